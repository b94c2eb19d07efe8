# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
The conversion of sequence and annotation files into GenBank files.
"""

__name__ = "gbconvert"
__author__ = "The gbconvert contributors"
__all__ = ["GenbankResult", "GenbankConverter", "add_translations"]

import datetime
import io
import os
from collections import OrderedDict
from .exceptions import (
    ConversionError,
    GenbankConverterError,
    InvalidFileFormatError,
    ParsingError,
    ValidationError,
)
from .file import _name, create_temp, is_binary, is_open_compatible, is_text
from .merge import merge, merge_sequences
from .options import ConversionOptions, GenbankOptions, TranslationOptions
from .sequence.annotation import AnnotationData, Feature, group_annotations
from .sequence.io.detect import detect_format
from .sequence.io.general import (
    load_annotations,
    load_sequences,
    normalize_format,
)
from .sequence.io.genbank.format import GenBankFormatter
from .sequence.translate import extract_segments, find_internal_stops, translate
from .validation import (
    ValidationIssue,
    ValidationResult,
    issue_location,
    validate_annotation_data,
    validate_sequence_data,
)


class GenbankResult:
    """
    The output of a conversion.

    Objects of this class are immutable.

    Parameters
    ----------
    genbank_data : bytes
        The *UTF-8* encoded GenBank records.
    sequence_count : int
        The number of written records.
    feature_count : int
        The number of written annotations.
    timestamp : datetime, optional
        The time of the conversion.
        By default, the current time is used.
    validation : ValidationResult, optional
        The issues found during the conversion.

    Attributes
    ----------
    genbank_data, sequence_count, feature_count, timestamp, validation
        Same as the parameters.
    text : str
        The decoded GenBank records.
    """

    def __init__(self, genbank_data, sequence_count, feature_count,
                 timestamp=None, validation=None):
        if timestamp is None:
            timestamp = datetime.datetime.now()
        if validation is None:
            validation = ValidationResult(
                sequence_count=sequence_count, feature_count=feature_count
            )
        self._genbank_data = bytes(genbank_data)
        self._sequence_count = sequence_count
        self._feature_count = feature_count
        self._timestamp = timestamp
        self._validation = validation

    @property
    def genbank_data(self):
        return self._genbank_data

    @property
    def sequence_count(self):
        return self._sequence_count

    @property
    def feature_count(self):
        return self._feature_count

    @property
    def timestamp(self):
        return self._timestamp

    @property
    def validation(self):
        return self._validation

    @property
    def text(self):
        return self._genbank_data.decode("utf-8")

    def write(self, file):
        """
        Write the GenBank records into a file.

        Parameters
        ----------
        file : file-like object or str
            The file to be written to.
            Alternatively a file path can be supplied.
        """
        if is_open_compatible(file):
            try:
                with open(file, "wb") as f:
                    f.write(self._genbank_data)
            except OSError as e:
                raise ConversionError(
                    f"Cannot write GenBank file '{_name(file)}': {e.strerror}"
                ) from e
        elif is_binary(file):
            file.write(self._genbank_data)
        elif is_text(file):
            file.write(self.text)
        else:
            raise TypeError(
                f"Cannot write into '{type(file).__name__}' object"
            )

    def __str__(self):
        return self.text

    def __repr__(self):
        """Represent GenbankResult as a string for debugging."""
        return (
            f"GenbankResult(sequence_count={self._sequence_count}, "
            f"feature_count={self._feature_count}, "
            f"timestamp={self._timestamp!r}, "
            f"size={len(self._genbank_data)})"
        )


class GenbankConverter:
    """
    The entry point for the conversion of sequences and annotations
    into GenBank records.

    A conversion runs through the following steps:

        1. The formats of the input files are detected, unless
           the annotation format is given in the
           :class:`ConversionOptions`.
        2. The files are parsed.
        3. The annotations are checked against the sequences and
           filtered (see :func:`merge()`).
        4. Coding features obtain a */translation* qualifier
           (see :func:`add_translations()`).
        5. The GenBank records are formatted.

    Problems with the input data do not abort the conversion, but are
    reported in the :attr:`GenbankResult.validation`.
    In *strict* mode a :class:`ValidationError` is raised instead, if
    any error was found.

    If :attr:`GenbankOptions.memory_efficient` is set or the input
    exceeds :attr:`GenbankOptions.memory_threshold`, the records are
    written into a temporary file instead of being assembled in memory.

    Parameters
    ----------
    options : GenbankOptions, optional
        The converter-level options.
    formatter : GenBankFormatter, optional
        The formatter used to write the records.
        By default a :class:`GenBankFormatter` with the given `options`
        is used.
    detector : callable, optional
        A function that takes a file and returns its format label,
        like :func:`detect_format()`.

    Examples
    --------

    >>> from gbconvert.sequence import (
    ...     Annotation, AnnotationData, Sequence, SequenceData
    ... )
    >>> sequences = SequenceData([Sequence("seq1", "ATGAAATAA")])
    >>> annotations = AnnotationData(
    ...     [Annotation("CDS", 0, 9, "+", sequence_id="seq1")]
    ... )
    >>> options = ConversionOptions(
    ...     translation=TranslationOptions(genetic_code_table=1)
    ... )
    >>> result = GenbankConverter().convert_data(
    ...     sequences, annotations, options
    ... )
    >>> print(result.sequence_count, result.feature_count)
    1 1
    >>> print([line.strip() for line in result.text.splitlines()][15])
    /translation="MK"
    """

    def __init__(self, options=None, formatter=None, detector=None):
        if options is None:
            options = GenbankOptions()
        if formatter is None:
            formatter = GenBankFormatter(options)
        if detector is None:
            detector = detect_format
        self._options = options
        self._formatter = formatter
        self._detector = detector

    @property
    def options(self):
        return self._options

    @property
    def formatter(self):
        return self._formatter

    def convert(self, sequence_file, annotation_file=None, options=None):
        """
        Convert a sequence file and an optional annotation file into
        GenBank records.

        Parameters
        ----------
        sequence_file : file-like object or str
            The sequence file, e.g. in *FASTA* format.
            Alternatively a file path can be supplied.
        annotation_file : file-like object or str, optional
            The annotation file in *GFF3*, *GTF*, *BED* or *VCF*
            format.
        options : ConversionOptions, optional
            The conversion options.

        Returns
        -------
        result : GenbankResult
            The GenBank records.

        Raises
        ------
        FileProcessingError
            If a file cannot be read.
        InvalidFileFormatError
            If the format of a file is not supported.
        ParsingError
            If a file is malformed.
        ValidationError
            If errors were found in *strict* mode.
        """
        if options is None:
            options = ConversionOptions()
        sequence_data, annotation_data, annotation_format \
            = self._load(sequence_file, annotation_file, options)
        return self._convert(
            sequence_data,
            annotation_data,
            options,
            annotation_format,
            self._exceeds_threshold(sequence_file),
        )

    def convert_data(self, sequence_data, annotation_data=None, options=None):
        """
        Convert already parsed sequences and annotations into GenBank
        records.

        Parameters
        ----------
        sequence_data : SequenceData
            The sequences.
        annotation_data : AnnotationData, optional
            The annotations.
        options : ConversionOptions, optional
            The conversion options.

        Returns
        -------
        result : GenbankResult
            The GenBank records.

        Raises
        ------
        ValidationError
            If errors were found in *strict* mode.
        ConversionError
            If the records cannot be created.
        """
        if options is None:
            options = ConversionOptions()
        oversized = sequence_data.total_length > self._options.memory_threshold
        return self._convert(
            sequence_data, annotation_data, options, None, oversized
        )

    def convert_to_stream(self, sequence_data, annotation_data, sink,
                          options=None):
        """
        Convert already parsed sequences and annotations and write the
        GenBank records directly into a file.

        Parameters
        ----------
        sequence_data : SequenceData
            The sequences.
        annotation_data : AnnotationData or None
            The annotations.
        sink : file-like object or str
            The file to be written to.
            Alternatively a file path can be supplied.
        options : ConversionOptions, optional
            The conversion options.

        Returns
        -------
        validation : ValidationResult
            The issues found during the conversion.
        """
        if options is None:
            options = ConversionOptions()
        sequence_data, annotation_data, validation = self._prepare(
            sequence_data, annotation_data, options
        )
        self._run(
            self._formatter.format_to_stream,
            sequence_data, annotation_data, sink, options
        )
        return validation

    def convert_files_to_stream(self, sequence_file, annotation_file, sink,
                                options=None):
        """
        Convert a sequence file and an optional annotation file and
        write the GenBank records directly into a file.

        Parameters
        ----------
        sequence_file, annotation_file : file-like object or str
            See :meth:`convert()`.
        sink : file-like object or str
            The file to be written to.
            Alternatively a file path can be supplied.
        options : ConversionOptions, optional
            The conversion options.

        Returns
        -------
        validation : ValidationResult
            The issues found during the conversion.
        """
        if options is None:
            options = ConversionOptions()
        sequence_data, annotation_data, annotation_format \
            = self._load(sequence_file, annotation_file, options)
        sequence_data, annotation_data, validation = self._prepare(
            sequence_data, annotation_data, options, annotation_format
        )
        self._run(
            self._formatter.format_to_stream,
            sequence_data, annotation_data, sink, options
        )
        return validation

    def validate_sequence(self, sequence_file):
        """
        Check whether a sequence file can be converted.

        Parsing problems are reported as errors in the returned
        result instead of being raised.

        Parameters
        ----------
        sequence_file : file-like object or str
            The sequence file.
            Alternatively a file path can be supplied.

        Returns
        -------
        result : ValidationResult
            The validation report.
        """
        sequence_file = _seekable(sequence_file)
        format = self._detector(sequence_file)
        try:
            sequence_data = load_sequences(sequence_file, format)
        except (InvalidFileFormatError, ParsingError) as e:
            return _failure(e, format)
        return validate_sequence_data(sequence_data, format)

    def validate_annotation(self, annotation_file, format=None):
        """
        Check whether an annotation file can be converted.

        Parameters
        ----------
        annotation_file : file-like object or str
            The annotation file.
            Alternatively a file path can be supplied.
        format : str, optional
            The format of the file.
            By default, it is detected.

        Returns
        -------
        result : ValidationResult
            The validation report.
        """
        annotation_file = _seekable(annotation_file)
        format = self._detector(annotation_file) if format is None \
            else normalize_format(format)
        try:
            annotation_data = load_annotations(annotation_file, format)
        except (InvalidFileFormatError, ParsingError) as e:
            return _failure(e, format)
        return validate_annotation_data(annotation_data, format)

    def validate(self, sequence_file, annotation_file, options=None):
        """
        Check whether an annotation file fits to a sequence file.

        In addition to the checks of :meth:`validate_sequence()` and
        :meth:`validate_annotation()`, each annotation is checked
        against the sequence it refers to (see :func:`merge()`).

        Parameters
        ----------
        sequence_file, annotation_file : file-like object or str
            The sequence and the annotation file.
            Alternatively file paths can be supplied.
        options : ConversionOptions, optional
            The conversion options, e.g. the feature filters.

        Returns
        -------
        result : ValidationResult
            The validation report.
            The detected format is the one of the annotation file.
        """
        if options is None:
            options = ConversionOptions()
        sequence_file = _seekable(sequence_file)
        annotation_file = _seekable(annotation_file)
        sequence_format = self._detector(sequence_file)
        annotation_format = self._annotation_format(annotation_file, options)
        try:
            sequence_data = load_sequences(sequence_file, sequence_format)
        except (InvalidFileFormatError, ParsingError) as e:
            return _failure(e, annotation_format)
        try:
            annotation_data = load_annotations(
                annotation_file, annotation_format
            )
        except (InvalidFileFormatError, ParsingError) as e:
            return _failure(e, annotation_format)
        sequence_result = validate_sequence_data(sequence_data)
        _, merge_result = merge(sequence_data, annotation_data, options)
        return ValidationResult(
            sequence_result.issues + merge_result.issues,
            annotation_format,
            sequence_count=len(sequence_data),
            feature_count=merge_result.feature_count,
        )

    def _load(self, sequence_file, annotation_file, options):
        sequence_file = _seekable(sequence_file)
        annotation_file = _seekable(annotation_file)
        sequence_data = load_sequences(
            sequence_file, self._detector(sequence_file)
        )
        if annotation_file is None:
            return sequence_data, None, None
        annotation_format = self._annotation_format(annotation_file, options)
        annotation_data = load_annotations(annotation_file, annotation_format)
        return sequence_data, annotation_data, annotation_format

    def _annotation_format(self, annotation_file, options):
        if options.annotation_format is not None:
            return normalize_format(options.annotation_format)
        return self._detector(annotation_file)

    def _exceeds_threshold(self, file):
        if not is_open_compatible(file):
            return False
        try:
            return os.path.getsize(file) > self._options.memory_threshold
        except OSError:
            # The file was readable before, hence this is not decisive
            return False

    def _prepare(self, sequence_data, annotation_data, options,
                 annotation_format=None):
        """
        Run the merge and translation steps and check the result in
        strict mode.
        """
        if annotation_data is None:
            annotation_data = AnnotationData()
        merged, result = merge(sequence_data, annotation_data, options)
        if options.merge_sequences:
            sequence_data = merge_sequences(sequence_data, options)
        merged, translation_issues = add_translations(
            sequence_data, merged, options.translation
        )
        result = ValidationResult(
            result.issues + tuple(translation_issues),
            annotation_format,
            sequence_count=len(sequence_data),
            feature_count=merged.total_count,
        )
        if options.strict and not result.valid:
            raise ValidationError(
                f"Conversion aborted in strict mode: {result.summary}",
                result,
            )
        return sequence_data, merged, result

    def _convert(self, sequence_data, annotation_data, options,
                 annotation_format, oversized):
        sequence_data, annotation_data, validation = self._prepare(
            sequence_data, annotation_data, options, annotation_format
        )
        if self._options.memory_efficient or oversized:
            genbank_data = self._run(
                self._format_via_temp, sequence_data, annotation_data, options
            )
        else:
            genbank_data = self._run(
                self._formatter.format, sequence_data, annotation_data, options
            )
        return GenbankResult(
            genbank_data,
            len(sequence_data),
            annotation_data.total_count,
            validation=validation,
        )

    def _format_via_temp(self, sequence_data, annotation_data, options):
        """
        Stream the records into a temporary file and read them back.
        """
        path = create_temp(".gb", self._options.temp_directory)
        try:
            with open(path, "wb") as f:
                self._formatter.format_to_stream(
                    sequence_data, annotation_data, f, options
                )
            with open(path, "rb") as f:
                return f.read()
        finally:
            os.remove(path)

    @staticmethod
    def _run(function, *args):
        try:
            return function(*args)
        except GenbankConverterError:
            raise
        except Exception as e:
            raise ConversionError(
                f"Failed to create GenBank records: {e}"
            ) from e


def add_translations(sequence_data, annotation_data, options=None):
    """
    Add the protein sequence of each coding feature as */translation*
    qualifier.

    A feature is translated if
    :meth:`TranslationOptions.should_translate()` accepts its type and
    it has no */translation* qualifier yet.
    The segments of the feature are concatenated and translated in the
    direction of its strand, starting at its phase.
    Additionally, the */codon_start* and */transl_table* qualifiers are
    added, if enabled in the options.
    The qualifiers are appended to the first segment of the feature.

    Parameters
    ----------
    sequence_data : SequenceData
        The sequences the annotations refer to.
    annotation_data : AnnotationData
        The annotations, already checked by :func:`merge()`.
    options : TranslationOptions, optional
        The translation options.

    Returns
    -------
    annotation_data : AnnotationData
        The annotations with the translations.
    issues : list of ValidationIssue
        A warning for each feature with an internal stop codon, that
        truncated the translation.

    Examples
    --------

    >>> from gbconvert.sequence import (
    ...     Annotation, AnnotationData, Sequence, SequenceData
    ... )
    >>> sequences = SequenceData([Sequence("seq1", "ATGAAATAA")])
    >>> annotations = AnnotationData(
    ...     [Annotation("CDS", 0, 9, "+", sequence_id="seq1")]
    ... )
    >>> translated, issues = add_translations(
    ...     sequences, annotations, TranslationOptions(genetic_code_table=1)
    ... )
    >>> print(list(list(translated)[0].qualifiers))
    [('codon_start', '1'), ('transl_table', '1'), ('translation', 'MK')]
    """
    if options is None:
        options = TranslationOptions()
    issues = []
    if not options.translate_cds:
        return annotation_data, issues
    code = None

    translated = OrderedDict()
    for seq_id in annotation_data.sequence_ids:
        sequence = sequence_data.get(seq_id)
        annotations = []
        for group in group_annotations(
            annotation_data.get_annotations(seq_id), sort=False
        ):
            first = group[0]
            if sequence is None \
                    or not options.should_translate(first.type) \
                    or "translation" in first.qualifiers:
                annotations.extend(group)
                continue
            if code is None:
                code = options.resolve_genetic_code()
            feature = Feature.from_annotations(group)
            nucleotides = extract_segments(sequence.sequence, feature.segments)
            phase = feature.phase if feature.phase is not None else 0
            protein = translate(
                nucleotides, feature.strand, phase, code, options
            )
            if not options.allow_internal_stop_codons:
                stops = find_internal_stops(
                    nucleotides, feature.strand, phase, code, options
                )
                if len(stops) > 0:
                    issues.append(ValidationIssue.warning(
                        f"Internal stop codon at codon {stops[0] + 1} of "
                        f"'{first.type}' feature, the translation is "
                        f"truncated",
                        issue_location(first),
                    ))
            if not protein:
                annotations.extend(group)
                continue
            qualifiers = first.qualifiers
            if options.include_codon_start_qualifier \
                    and "codon_start" not in qualifiers:
                qualifiers = qualifiers.appended("codon_start", phase + 1)
            if options.include_transl_table_qualifier \
                    and "transl_table" not in qualifiers:
                qualifiers = qualifiers.appended("transl_table", code.table_id)
            qualifiers = qualifiers.appended("translation", protein)
            annotations.append(first.evolve(qualifiers=qualifiers))
            annotations.extend(group[1:])
        translated[seq_id] = annotations
    return AnnotationData(translated), issues


def _failure(error, format):
    """
    Create an invalid :class:`ValidationResult` from a parsing error.
    """
    return ValidationResult(
        [ValidationIssue.error(str(error))],
        format,
        summary=f"Validation failed: {error}",
    )


def _seekable(file):
    """
    Read a non-seekable text stream, e.g. a pipe, into memory, as the
    format detection needs to inspect it before it is parsed.
    """
    if file is None or is_open_compatible(file) or not is_text(file) \
            or file.seekable():
        return file
    return io.StringIO(file.read())
