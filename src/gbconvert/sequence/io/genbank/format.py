# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Rendering of sequences and their annotations as GenBank records.
"""

__name__ = "gbconvert.sequence.io.genbank"
__author__ = "The gbconvert contributors"
__all__ = ["GenBankFormatter", "is_pseudogene"]

from collections import OrderedDict
from ....file import TextFile
from ....options import ConversionOptions, GenbankOptions
from .annotation import (
    feature_lines,
    gene_qualifiers,
    location_string,
    set_features,
    standardize_feature_type,
)
from .file import GenBankFile
from .metadata import (
    set_accession,
    set_comment,
    set_db_link,
    set_definition,
    set_keywords,
    set_locus,
    set_reference,
    set_source,
    set_version,
)
from .sequence import sequence_lines, set_sequence

# GFF3 attributes that are only used for bookkeeping
_ID_QUALIFIERS = ("ID", "Name", "Parent")

_SOURCE_MOL_TYPES = {
    "DNA": "genomic DNA",
    "RNA": "genomic RNA",
}


class GenBankFormatter:
    """
    A formatter that writes sequences together with their annotations as
    GenBank records, one record per sequence.

    The annotations are expected to be already checked against the
    sequences, e.g. by :func:`merge()`:
    The formatter does not validate the coordinates.

    Metadata, that is missing in the sequences and the
    :class:`ConversionOptions`, is taken from the
    :class:`GenbankOptions` defaults or replaced by placeholders.

    Parameters
    ----------
    genbank_options : GenbankOptions, optional
        Provides the default organism, molecule type, topology and
        division.

    Examples
    --------

    >>> from gbconvert.sequence import (
    ...     Annotation, AnnotationData, HeaderInfo, Sequence, SequenceData
    ... )
    >>> seq = Sequence(
    ...     "seq1", "ATGAAATAA", organism="Homo sapiens",
    ...     header_info=HeaderInfo(date="01-JAN-2024")
    ... )
    >>> annotations = AnnotationData(
    ...     [Annotation("CDS", 0, 9, "+", sequence_id="seq1")]
    ... )
    >>> formatter = GenBankFormatter()
    >>> print(formatter.format(SequenceData([seq]), annotations).decode())
    LOCUS       seq1                       9 bp    DNA     linear   UNC 01-JAN-2024
    DEFINITION  seq1.
    ACCESSION   seq1
    VERSION     seq1.1
    KEYWORDS    .
    SOURCE      Homo sapiens
      ORGANISM  Homo sapiens
                Unclassified.
    FEATURES             Location/Qualifiers
         source          1..9
                         /organism="Homo sapiens"
                         /mol_type="genomic DNA"
         CDS             1..9
    ORIGIN
            1 atgaaataa
    //
    <BLANKLINE>
    """

    def __init__(self, genbank_options=None):
        if genbank_options is None:
            genbank_options = GenbankOptions()
        self._genbank_options = genbank_options

    @property
    def genbank_options(self):
        return self._genbank_options

    def format(self, sequence_data, annotation_data=None, options=None):
        """
        Render all sequences as GenBank records.

        Parameters
        ----------
        sequence_data : SequenceData
            The sequences, each one is written into a separate record.
        annotation_data : AnnotationData, optional
            The annotations of the sequences.
        options : ConversionOptions, optional
            The conversion options.

        Returns
        -------
        genbank_data : bytes
            The *UTF-8* encoded records.
        """
        if options is None:
            options = ConversionOptions()
        lines = []
        for sequence in sequence_data:
            gb_file = self.format_record(sequence, annotation_data, options)
            lines += gb_file.lines
        if len(lines) == 0:
            return b""
        return ("\n".join(lines) + "\n").encode("utf-8")

    def format_to_stream(self, sequence_data, annotation_data, sink,
                         options=None):
        """
        Write all sequences as GenBank records into a file, without
        holding the complete output in memory.

        The lines are created lazily, so that at most the header of a
        single record is kept in memory.

        Parameters
        ----------
        sequence_data : SequenceData
            The sequences, each one is written into a separate record.
        annotation_data : AnnotationData or None
            The annotations of the sequences.
        sink : file-like object or str
            The file to be written to.
            Alternatively a file path can be supplied.
            Binary file objects receive *UTF-8* encoded text.
        options : ConversionOptions, optional
            The conversion options.
        """
        TextFile.write_iter(
            sink, self.iter_lines(sequence_data, annotation_data, options)
        )

    def iter_lines(self, sequence_data, annotation_data=None, options=None):
        """
        Create the lines of the GenBank records lazily.

        Parameters
        ----------
        sequence_data : SequenceData
            The sequences, each one is written into a separate record.
        annotation_data : AnnotationData, optional
            The annotations of the sequences.
        options : ConversionOptions, optional
            The conversion options.

        Yields
        ------
        line : str
            The current line, without line break.
        """
        if options is None:
            options = ConversionOptions()
        output = options.output_formatting
        for sequence in sequence_data:
            header = self._header(sequence, options)
            # Omit the terminator
            yield from header.lines[:-1]
            yield "FEATURES" + " " * 13 + "Location/Qualifiers"
            for key, location, qualifiers in self._feature_entries(
                sequence, annotation_data, options
            ):
                yield from feature_lines(key, location, qualifiers)
                if output.include_empty_lines_between_features:
                    yield ""
            yield "ORIGIN"
            if output.include_sequence:
                yield from sequence_lines(
                    sequence.sequence,
                    output.sequence_line_width,
                    output.lowercase_sequence,
                )
            yield "//"

    def format_record(self, sequence, annotation_data=None, options=None):
        """
        Create a single GenBank record.

        Parameters
        ----------
        sequence : Sequence
            The sequence.
        annotation_data : AnnotationData, optional
            The annotations.
            Only annotations referring to `sequence` are used.
        options : ConversionOptions, optional
            The conversion options.

        Returns
        -------
        gb_file : GenBankFile
            The record.
        """
        if options is None:
            options = ConversionOptions()
        output = options.output_formatting
        gb_file = self._header(sequence, options)
        set_features(
            gb_file,
            self._feature_entries(sequence, annotation_data, options),
            output.include_empty_lines_between_features,
        )
        set_sequence(
            gb_file,
            sequence.sequence if output.include_sequence else "",
            output.sequence_line_width,
            output.lowercase_sequence,
        )
        return gb_file

    def _header(self, sequence, options):
        """
        Create a record containing all fields before *FEATURES*.
        """
        defaults = self._genbank_options
        header = sequence.header_info
        if header is None:
            header = options.header_info

        gb_file = GenBankFile()
        set_locus(
            gb_file,
            sequence.name,
            sequence.length,
            self._molecule_type(sequence, options),
            _first(options.topology, sequence.topology,
                   defaults.default_topology),
            _first(options.division, sequence.division,
                   defaults.default_division),
            None if header is None else header.date,
        )
        if header is None:
            set_definition(
                gb_file, _first(sequence.description, sequence.id)
            )
            set_accession(gb_file, sequence.id)
            set_version(gb_file, f"{sequence.id}.1")
            set_keywords(gb_file)
            set_source(
                gb_file, self._organism(sequence, options), sequence.taxonomy
            )
        else:
            set_definition(
                gb_file,
                _first(header.definition, sequence.description, sequence.id)
            )
            set_accession(gb_file, _first(header.accession, sequence.id))
            set_version(gb_file, _first(header.version, f"{sequence.id}.1"))
            set_db_link(gb_file, header.db_links)
            set_keywords(gb_file, header.keywords)
            set_source(
                gb_file,
                self._organism(sequence, options),
                sequence.taxonomy if sequence.taxonomy else header.taxonomy,
            )
            for i, reference in enumerate(header.references):
                set_reference(gb_file, reference, i + 1)

        structured = OrderedDict()
        if header is not None and header.assembly_data:
            structured["Assembly-Data"] = header.assembly_data
        if options.custom_metadata:
            structured["Metadata"] = options.custom_metadata
        set_comment(
            gb_file, None if header is None else header.comment, structured
        )
        return gb_file

    def _feature_entries(self, sequence, annotation_data, options):
        """
        Create the feature key, location and qualifiers of the *source*
        feature and of each feature of the sequence.
        """
        organism = self._organism(sequence, options)
        mol_type = self._molecule_type(sequence, options)
        source_qualifiers = [
            ("organism", organism),
            ("mol_type", _SOURCE_MOL_TYPES.get(mol_type, mol_type)),
        ]
        if "mitochon" in organism.lower():
            source_qualifiers.append(("organelle", "mitochondrion"))
        yield "source", f"1..{sequence.length}", source_qualifiers

        if annotation_data is None:
            return
        formatting = options.feature_formatting
        features = annotation_data.get_features(
            sequence.id, options.output_formatting.sort_features_by_position
        )
        for feature in features:
            key = feature.type
            qualifiers = []
            if formatting.standardize_feature_types:
                key = standardize_feature_type(
                    feature.type, formatting.feature_type_mapping
                )
                # Gene names used as feature type
                for qual_key, value in gene_qualifiers(feature.type):
                    if qual_key not in feature.qualifiers:
                        qualifiers.append((qual_key, value))
            for qual_key, value in feature.qualifiers:
                if qual_key in _ID_QUALIFIERS \
                        and not formatting.preserve_original_ids:
                    continue
                qualifiers.append((qual_key, value))
            additional = formatting.additional_qualifiers.get(feature.type)
            if additional is None:
                additional = formatting.additional_qualifiers.get(key, {})
            qualifiers += list(additional.items())
            if formatting.include_pseudo_qualifier \
                    and is_pseudogene(feature) \
                    and "pseudo" not in feature.qualifiers:
                qualifiers.append(("pseudo", None))
            yield (
                key,
                location_string(
                    feature.segments, feature.strand, sequence.length
                ),
                qualifiers,
            )

    def _organism(self, sequence, options):
        return _first(
            options.organism,
            sequence.organism,
            self._genbank_options.default_organism,
            ".",
        )

    def _molecule_type(self, sequence, options):
        return _first(
            options.molecule_type,
            sequence.molecule_type,
            self._genbank_options.default_molecule_type,
            "DNA",
        )


def is_pseudogene(feature):
    """
    Check whether a feature or annotation describes a pseudogene.

    This is the case, if its type is ``'pseudogene'``, it has a
    */pseudo* qualifier or any qualifier value mentions a pseudogene.

    Parameters
    ----------
    feature : Feature or Annotation
        The feature.

    Returns
    -------
    pseudo : bool
        True, if the feature is a pseudogene.
    """
    if feature.type.lower() == "pseudogene":
        return True
    if "pseudo" in feature.qualifiers:
        return True
    for _, value in feature.qualifiers:
        if value is not None and "pseudogene" in value.lower():
            return True
    return False


def _first(*values):
    """
    Get the first value that is neither ``None`` nor empty.
    """
    for value in values:
        if value:
            return value
    return None
