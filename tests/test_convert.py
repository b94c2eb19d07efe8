# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

import io
import os
from os.path import join
import gbconvert
from gbconvert import (
    ConversionOptions,
    GenbankConverter,
    GenbankOptions,
    TranslationOptions,
)
from gbconvert.sequence import (
    Annotation,
    AnnotationData,
    HeaderInfo,
    Sequence,
    SequenceData,
)
import pytest
from .util import data_dir

# Fixed date for reproducible output
HEADER = HeaderInfo(date="07-MAR-2024")


def _path(file_name):
    return join(data_dir("sequence"), file_name)


def _orf_data(sequence="ATGAAATAA", **kwargs):
    sequences = SequenceData([Sequence("seq1", sequence)])
    annotations = AnnotationData([
        Annotation("CDS", 0, len(sequence), "+", sequence_id="seq1", **kwargs)
    ])
    return sequences, annotations


def _stripped_lines(text):
    return [line.strip() for line in text.splitlines()]


@pytest.mark.parametrize("include_stop_codon, ref_translation", [
    (False, "MK"),
    (True, "MK*"),
])
def test_translation(include_stop_codon, ref_translation):
    sequences, annotations = _orf_data()
    options = ConversionOptions(translation=TranslationOptions(
        genetic_code_table=1, include_stop_codon=include_stop_codon
    ))
    result = GenbankConverter().convert_data(sequences, annotations, options)
    lines = _stripped_lines(result.text)
    assert f'/translation="{ref_translation}"' in lines
    assert "/transl_table=1" in lines
    assert "/codon_start=1" in lines
    assert result.sequence_count == 1
    assert result.feature_count == 1
    assert result.validation.valid


def test_unknown_genetic_code():
    """
    An unknown genetic code falls back to the default code with a
    warning, while the selector itself is kept unchanged.
    """
    sequences, annotations = _orf_data()
    translation = TranslationOptions(genetic_code="xyz")
    options = ConversionOptions(translation=translation)
    with pytest.warns(UserWarning, match="Unknown genetic code"):
        result = GenbankConverter().convert_data(
            sequences, annotations, options
        )
    assert translation.get_genetic_code() == "xyz"
    lines = _stripped_lines(result.text)
    assert '/translation="MK"' in lines
    assert "/transl_table=5" in lines


def test_no_translation():
    sequences, annotations = _orf_data()
    options = ConversionOptions(
        translation=TranslationOptions(translate_cds=False)
    )
    result = GenbankConverter().convert_data(sequences, annotations, options)
    assert "/translation" not in result.text


def test_internal_stop_warning():
    sequences, annotations = _orf_data("ATGTAAAAATAA")
    options = ConversionOptions(
        translation=TranslationOptions(genetic_code_table=1)
    )
    result = GenbankConverter().convert_data(sequences, annotations, options)
    assert result.validation.valid
    assert len(result.validation.warnings) == 1
    assert "codon 2" in result.validation.warnings[0].message
    assert '/translation="M"' in _stripped_lines(result.text)


def test_existing_translation():
    sequences, annotations = _orf_data(qualifiers={"translation": "MKL"})
    translated, issues = gbconvert.add_translations(sequences, annotations)
    assert translated == annotations
    assert issues == []


def test_translation_of_segments():
    """
    The segments of a feature are concatenated before translation and
    the qualifiers are added to the first segment only.
    """
    sequences = SequenceData([Sequence("seq1", "ATGCCCAAATAA")])
    annotations = AnnotationData([
        Annotation("CDS", 9, 12, "+", sequence_id="seq1", feature_id="c1"),
        Annotation("CDS", 0, 3, "+", sequence_id="seq1", feature_id="c1"),
        Annotation("CDS", 6, 9, "+", sequence_id="seq1", feature_id="c1"),
    ])
    translated, issues = gbconvert.add_translations(
        sequences, annotations, TranslationOptions(genetic_code_table=1)
    )
    assert issues == []
    first, *rest = translated
    assert first.start == 0
    assert first.qualifiers.first("translation") == "MK"
    assert all("translation" not in annot.qualifiers for annot in rest)


def test_strict_mode():
    converter = GenbankConverter()
    options = ConversionOptions(strict=True)
    with pytest.raises(gbconvert.ValidationError) as excinfo:
        converter.convert(
            _path("sample.fasta"), _path("unmatched.gff3"), options
        )
    assert not excinfo.value.result.valid
    assert len(excinfo.value.result.errors) == 2

    # Without strict mode the invalid annotations are skipped
    result = converter.convert(_path("sample.fasta"), _path("unmatched.gff3"))
    assert not result.validation.valid
    assert result.validation.detected_format == "GFF3"
    assert result.feature_count == 1


def test_strict_mode_warnings():
    """
    Warnings do not abort a conversion in strict mode.
    """
    sequences, annotations = _orf_data(phase=5)
    options = ConversionOptions(strict=True)
    result = GenbankConverter().convert_data(sequences, annotations, options)
    assert len(result.validation.warnings) == 1


def test_convert_files():
    """
    Both coding features of the sample files are translated, including
    the one on the reverse strand.
    """
    options = ConversionOptions(
        translation=TranslationOptions(genetic_code_table=1),
        header_info=HEADER,
    )
    result = GenbankConverter().convert(
        _path("sample.fasta"), _path("sample.gff3"), options
    )
    assert result.sequence_count == 2
    assert result.feature_count == 4
    assert result.validation.valid
    lines = _stripped_lines(result.text)
    assert lines.count('/translation="MK"') == 2
    assert lines.count("/transl_table=1") == 2
    assert "CDS             complement(22..30)" in lines
    assert lines.count("//") == 2
    assert result.text.startswith("LOCUS       seq1")


@pytest.mark.parametrize("annotation_file", [
    "sample.gtf", "sample.bed", "sample.vcf"
])
def test_convert_annotation_formats(annotation_file):
    result = GenbankConverter().convert(
        _path("sample.fasta"), _path(annotation_file)
    )
    assert result.validation.valid
    assert result.feature_count > 0
    assert result.validation.detected_format \
        == annotation_file.split(".")[-1].upper()


def test_convert_sequences_only():
    result = GenbankConverter().convert(_path("sample.fasta"))
    assert result.sequence_count == 2
    assert result.feature_count == 0
    assert result.validation.detected_format is None


def test_annotation_format_option():
    """
    A given annotation format skips the detection.
    """
    options = ConversionOptions(annotation_format="bed")
    with pytest.raises(gbconvert.ParsingError):
        GenbankConverter().convert(
            _path("sample.fasta"), _path("sample.gff3"), options
        )


def test_merge_sequences():
    options = ConversionOptions(merge_sequences=True, header_info=HEADER)
    result = GenbankConverter().convert(
        _path("sample.fasta"), _path("sample.gff3"), options
    )
    assert result.sequence_count == 1
    assert result.feature_count == 4
    assert result.text.startswith("LOCUS       merged_seq1")
    # The exon on 'seq2' is shifted behind 'seq1'
    assert "exon            32..35" in _stripped_lines(result.text)


def test_memory_efficient(tmp_path):
    """
    Writing via a temporary file gives the same output and cleans up
    afterwards.
    """
    options = ConversionOptions(header_info=HEADER)
    ref_result = GenbankConverter().convert(
        _path("sample.fasta"), _path("sample.gff3"), options
    )
    converter = GenbankConverter(GenbankOptions(
        memory_efficient=True, temp_directory=str(tmp_path)
    ))
    result = converter.convert(
        _path("sample.fasta"), _path("sample.gff3"), options
    )
    assert result.genbank_data == ref_result.genbank_data
    assert os.listdir(tmp_path) == []


def test_memory_threshold(tmp_path):
    """
    Input above the memory threshold is also written via a temporary
    file.
    """
    sequences, annotations = _orf_data()
    options = ConversionOptions(header_info=HEADER)
    ref_result = GenbankConverter().convert_data(
        sequences, annotations, options
    )
    converter = GenbankConverter(GenbankOptions(
        memory_threshold=5, temp_directory=str(tmp_path)
    ))
    result = converter.convert_data(sequences, annotations, options)
    assert result.text == ref_result.text
    assert os.listdir(tmp_path) == []


def test_missing_temp_directory(tmp_path):
    sequences, annotations = _orf_data()
    converter = GenbankConverter(GenbankOptions(
        memory_efficient=True, temp_directory=join(tmp_path, "missing")
    ))
    with pytest.raises(gbconvert.FileProcessingError):
        converter.convert_data(sequences, annotations)


def test_convert_to_stream():
    sequences, annotations = _orf_data()
    options = ConversionOptions(header_info=HEADER)
    converter = GenbankConverter()
    ref_text = converter.convert_data(sequences, annotations, options).text

    sink = io.BytesIO()
    validation = converter.convert_to_stream(
        sequences, annotations, sink, options
    )
    assert validation.valid
    assert validation.feature_count == 1
    assert sink.getvalue().decode("utf-8") == ref_text

    sink = io.StringIO()
    converter.convert_to_stream(sequences, None, sink, options)
    assert sink.getvalue().startswith("LOCUS       seq1")
    assert "/translation" not in sink.getvalue()


def test_convert_files_to_stream(tmp_path):
    options = ConversionOptions(header_info=HEADER)
    converter = GenbankConverter()
    ref_text = converter.convert(
        _path("sample.fasta"), _path("sample.gff3"), options
    ).text
    path = join(tmp_path, "out.gb")
    validation = converter.convert_files_to_stream(
        _path("sample.fasta"), _path("sample.gff3"), path, options
    )
    assert validation.valid
    assert validation.detected_format == "GFF3"
    assert gbconvert.read_text(path) == ref_text


def test_result_write(tmp_path):
    sequences, annotations = _orf_data()
    result = GenbankConverter().convert_data(sequences, annotations)

    path = join(tmp_path, "out.gb")
    result.write(path)
    with open(path, "rb") as file:
        assert file.read() == result.genbank_data

    binary = io.BytesIO()
    result.write(binary)
    assert binary.getvalue() == result.genbank_data

    text = io.StringIO()
    result.write(text)
    assert text.getvalue() == str(result)

    with pytest.raises(TypeError):
        result.write(42)
    with pytest.raises(gbconvert.ConversionError):
        result.write(join(tmp_path, "missing", "out.gb"))


def test_result_defaults():
    result = gbconvert.GenbankResult(b"", 0, 0)
    assert result.text == ""
    assert result.validation.valid
    assert result.timestamp is not None


class BrokenFormatter:
    def format(self, sequence_data, annotation_data, options):
        raise RuntimeError("Formatter is broken")


def test_conversion_error():
    """
    Unexpected exceptions are wrapped into a :class:`ConversionError`.
    """
    sequences, annotations = _orf_data()
    converter = GenbankConverter(formatter=BrokenFormatter())
    with pytest.raises(gbconvert.ConversionError, match="broken") as excinfo:
        converter.convert_data(sequences, annotations)
    assert isinstance(excinfo.value.__cause__, RuntimeError)


def test_validate_sequence():
    converter = GenbankConverter()
    result = converter.validate_sequence(_path("sample.fasta"))
    assert result.valid
    assert result.detected_format == "FASTA"
    assert result.sequence_count == 2

    result = converter.validate_sequence(_path("unknown.txt"))
    assert not result.valid
    assert result.detected_format == gbconvert.sequence.io.UNKNOWN
    assert result.summary.startswith("Validation failed")


def test_validate_annotation():
    converter = GenbankConverter()
    result = converter.validate_annotation(_path("sample.gff3"))
    assert result.valid
    assert result.detected_format == "GFF3"
    assert result.feature_count == 4

    result = converter.validate_annotation(_path("sample.gff3"), "bed")
    assert not result.valid
    assert result.detected_format == "BED"

    result = converter.validate_annotation(_path("unknown.txt"))
    assert not result.valid


def test_validate():
    converter = GenbankConverter()
    result = converter.validate(_path("sample.fasta"), _path("unmatched.gff3"))
    assert not result.valid
    assert result.detected_format == "GFF3"
    assert result.sequence_count == 2
    assert result.feature_count == 1
    messages = [issue.message for issue in result.errors]
    assert "Unknown sequence ID 'seq3'" in messages
    assert any("out of range" in message for message in messages)

    result = converter.validate(_path("sample.fasta"), _path("sample.gff3"))
    assert result.valid


def test_convert_gene_locations():
    """
    Gene locations from the headers of a FASTA file are written as
    gene features followed by the typed feature.
    """
    options = ConversionOptions(header_info=HEADER)
    result = GenbankConverter().convert(
        _path("sample.fasta"), _path("sample_genes.fasta"), options
    )
    assert result.validation.valid
    assert result.validation.detected_format == "FASTA"
    assert result.feature_count == 6
    lines = _stripped_lines(result.text)
    assert "tRNA            10..15" in lines
    assert "CDS             complement(22..30)" in lines
    assert '/gene="CYTB"' in lines
    assert lines.count('/translation="MK"') == 2


@pytest.mark.parametrize("text, ref_message", [
    (">\nACGT\n", "Empty header"),
    (">s1\nAAAA\n>s1\nCCCC\n", "Duplicate header"),
    (">s1 a\nAAAA\n>s1 b\nCCCC\n", "Duplicate sequence ID"),
])
def test_validate_malformed_fasta(text, ref_message):
    """
    Malformed FASTA input gives an invalid result instead of raising.
    """
    result = GenbankConverter().validate_sequence(io.StringIO(text))
    assert not result.valid
    assert result.detected_format == "FASTA"
    assert any(ref_message in issue.message for issue in result.errors)


class NonSeekableStream(io.StringIO):
    def seekable(self):
        return False


def test_non_seekable_input():
    """
    Streams that cannot be rewound after the format detection, like
    pipes, give the same result as the files themselves.
    """
    streams = []
    for file_name in ("sample.fasta", "sample.gff3"):
        with open(_path(file_name)) as file:
            streams.append(NonSeekableStream(file.read()))
    options = ConversionOptions(header_info=HEADER)
    result = GenbankConverter().convert(*streams, options)
    ref_result = GenbankConverter().convert(
        _path("sample.fasta"), _path("sample.gff3"), options
    )
    assert result.genbank_data == ref_result.genbank_data

    with open(_path("sample.fasta")) as file:
        stream = NonSeekableStream(file.read())
    result = GenbankConverter().validate_sequence(stream)
    assert result.valid
    assert result.sequence_count == 2
