# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

import datetime
import io
from dataclasses import replace
import gbconvert.sequence as seq
import gbconvert.sequence.io.genbank as gb
from gbconvert.options import (
    ConversionOptions,
    FeatureFormattingOptions,
    GenbankOptions,
    OutputFormattingOptions,
)
import pytest


DATE = "07-MAR-2024"


def _format(sequences, annotations=None, options=None, genbank_options=None):
    if options is None:
        options = ConversionOptions()
    formatter = gb.GenBankFormatter(genbank_options)
    return formatter.format(
        seq.SequenceData(sequences),
        None if annotations is None else seq.AnnotationData(annotations),
        options,
    ).decode("utf-8")


def _feature_block(text):
    """
    Get the lines between the *FEATURES* and *ORIGIN* line of the first
    record.
    """
    lines = text.splitlines()
    start = lines.index("FEATURES             Location/Qualifiers")
    stop = lines.index("ORIGIN")
    return lines[start + 1 : stop]


def _sequence(id="seq1", sequence="ATGAAATAA", **kwargs):
    return seq.Sequence(
        id, sequence, header_info=seq.HeaderInfo(date=DATE), **kwargs
    )


def test_locus_columns():
    """
    Check the fixed column layout of the *LOCUS* line.
    """
    text = _format(
        [_sequence("NC_012920", "A" * 16569, topology="circular")],
        genbank_options=GenbankOptions(default_division="PRI"),
    )
    locus = text.splitlines()[0]
    assert len(locus) == 79
    assert locus[:12] == "LOCUS       "
    assert locus[12:28].rstrip() == "NC_012920"
    assert locus[29:40] == "      16569"
    assert locus[41:43] == "bp"
    assert locus[47:53].rstrip() == "DNA"
    assert locus[55:63].rstrip() == "circular"
    assert locus[64:67] == "PRI"
    assert locus[68:79] == DATE


def test_locus_name_truncation():
    file = gb.GenBankFile()
    gb.set_locus(file, "a very long locus name", 10, date=DATE)
    line = file.lines[0]
    assert line[12:28] == "a_very_long_locu"
    assert len(line) == 79


def test_format_date():
    assert gb.format_date(datetime.date(2024, 12, 1)) == "01-DEC-2024"
    assert gb.format_date(datetime.datetime(1999, 1, 31, 12)) \
        == "31-JAN-1999"
    assert gb.format_date("some date") == "some date"
    assert len(gb.format_date()) == 11


def test_full_range_location():
    """
    An annotation covering bases 0 to 100 is written as '1..100'.
    """
    text = _format(
        [_sequence(sequence="ACGT" * 25)],
        [seq.Annotation("gene", 0, 100, "+", sequence_id="seq1")],
    )
    assert "     gene            1..100" in _feature_block(text)


@pytest.mark.parametrize("segments, strand, ref_location", [
    ([(0, 100)], seq.Strand.FORWARD, "1..100"),
    ([(9, 10)], seq.Strand.FORWARD, "10"),
    ([(5, 5)], seq.Strand.FORWARD, "5^6"),
    ([(0, 100)], seq.Strand.REVERSE, "complement(1..100)"),
    ([(0, 10), (20, 30)], seq.Strand.UNSTRANDED, "join(1..10,21..30)"),
    (
        [(0, 10), (20, 30)], seq.Strand.REVERSE,
        "complement(join(1..10,21..30))"
    ),
])
def test_location_string(segments, strand, ref_location):
    assert gb.location_string(segments, strand) == ref_location


@pytest.mark.parametrize("site, ref_location", [
    ((0, 0), "100^1"),
    ((100, 100), "100^1"),
    ((1, 1), "1^2"),
])
def test_site_at_sequence_end(site, ref_location):
    """
    Sites before the first or behind the last base are written as the
    site between the last and the first base.
    """
    assert gb.location_string([site], sequence_length=100) == ref_location
    text = _format(
        [_sequence(sequence="ACGT" * 25)],
        [seq.Annotation("misc_feature", *site, sequence_id="seq1")],
    )
    assert f"     misc_feature    {ref_location}" in _feature_block(text)


def test_site_at_start_without_length():
    with pytest.raises(ValueError):
        gb.location_string([(0, 0)])


def test_multi_segment_feature():
    """
    Segments sharing a feature ID are written as a single joined
    feature.
    """
    annotations = [
        seq.Annotation(
            "CDS", 20, 30, "-", sequence_id="seq1", feature_id="cds1"
        ),
        seq.Annotation(
            "CDS", 0, 10, "-", sequence_id="seq1", feature_id="cds1"
        ),
    ]
    text = _format([_sequence(sequence="A" * 30)], annotations)
    block = _feature_block(text)
    assert block[3] == "     CDS             complement(join(1..10,21..30))"
    assert len(block) == 4


def test_line_width():
    """
    No line of a record exceeds 79 characters, even for long
    qualifiers, locations and descriptions.
    """
    long_note = " ".join(["word"] * 60)
    annotations = [
        seq.Annotation(
            "CDS", i * 10, i * 10 + 5, sequence_id="seq1", feature_id="cds1",
            qualifiers={"note": long_note, "translation": "M" * 200}
        )
        for i in range(40)
    ]
    sequence = _sequence(
        sequence="ACGT" * 100, description=" ".join(["description"] * 20)
    )
    text = _format([sequence], annotations)
    for line in text.splitlines():
        assert len(line) <= 79
    # The complete translation is kept
    feature_text = "".join(line.strip() for line in _feature_block(text))
    assert '/translation="' + "M" * 200 + '"' in feature_text


def test_qualifier_lines():
    assert gb.qualifier_lines("pseudo", None) == ["/pseudo"]
    assert gb.qualifier_lines("transl_table", "5") == ["/transl_table=5"]
    assert gb.qualifier_lines("note", 'a "b"') == ['/note="a ""b"""']
    assert gb.qualifier_lines("note", "two\nlines") == ['/note="two lines"']
    lines = gb.qualifier_lines("translation", "M" * 100)
    assert [len(line) for line in lines] == [58, 57]


def test_origin():
    text = _format([_sequence(sequence="ATGAAATAAC" * 7)])
    lines = text.splitlines()
    origin = lines.index("ORIGIN")
    assert lines[origin + 1] == (
        "        1 atgaaataac atgaaataac atgaaataac atgaaataac "
        "atgaaataac atgaaataac"
    )
    assert lines[origin + 2] == "       61 atgaaataac"
    assert lines[origin + 3] == "//"


def test_output_formatting():
    options = ConversionOptions(output_formatting=OutputFormattingOptions(
        sequence_line_width=20, lowercase_sequence=False
    ))
    text = _format([_sequence(sequence="ATGAAATAAC" * 3)], options=options)
    lines = text.splitlines()
    origin = lines.index("ORIGIN")
    assert lines[origin + 1] == "        1 ATGAAATAAC ATGAAATAAC"
    assert lines[origin + 2] == "       21 ATGAAATAAC"

    options = ConversionOptions(
        output_formatting=OutputFormattingOptions(include_sequence=False)
    )
    lines = _format([_sequence()], options=options).splitlines()
    assert lines[-2:] == ["ORIGIN", "//"]


def test_invalid_line_width():
    with pytest.raises(ValueError):
        OutputFormattingOptions(sequence_line_width=5)


def test_read_only_mappings():
    """
    Changing the dictionaries given to options afterwards, or the
    mappings of the options themselves, is not possible.
    """
    mapping = {"my_type": "misc_feature"}
    qualifiers = {"gene": {"locus_tag": "ABC_001"}}
    formatting = FeatureFormattingOptions(
        feature_type_mapping=mapping, additional_qualifiers=qualifiers
    )
    options = ConversionOptions(custom_metadata={"Submitter": "Lab"})
    mapping["my_type"] = "gene"
    qualifiers["gene"]["note"] = "x"
    assert formatting.feature_type_mapping == {"my_type": "misc_feature"}
    assert dict(formatting.additional_qualifiers["gene"]) \
        == {"locus_tag": "ABC_001"}
    with pytest.raises(TypeError):
        formatting.feature_type_mapping["my_type"] = "gene"
    with pytest.raises(TypeError):
        formatting.additional_qualifiers["gene"]["note"] = "x"
    with pytest.raises(TypeError):
        options.custom_metadata["Submitter"] = "Other lab"
    # Derived options keep the mappings
    assert replace(options, strict=True).custom_metadata \
        == {"Submitter": "Lab"}


def test_feature_order():
    annotations = [
        seq.Annotation("gene", 5, 9, sequence_id="seq1"),
        seq.Annotation("gene", 0, 4, sequence_id="seq1"),
    ]
    block = _feature_block(_format([_sequence()], annotations))
    assert [line.split()[1] for line in block[3:]] == ["1..4", "6..9"]

    options = ConversionOptions(output_formatting=OutputFormattingOptions(
        sort_features_by_position=False,
        include_empty_lines_between_features=True
    ))
    block = _feature_block(_format([_sequence()], annotations, options))
    assert block[3:] == [
        "",
        "     gene            6..9",
        "",
        "     gene            1..4",
        "",
    ]


def test_source_feature():
    """
    The *source* feature covers the complete sequence and names the
    organelle for mitochondrial organisms.
    """
    sequence = _sequence(
        organism="Drosophila melanogaster mitochondrion", molecule_type="RNA"
    )
    block = _feature_block(_format([sequence]))
    assert block == [
        "     source          1..9",
        '                     /organism="Drosophila melanogaster '
        'mitochondrion"',
        '                     /mol_type="genomic RNA"',
        '                     /organelle="mitochondrion"',
    ]


def test_metadata_precedence():
    """
    Options override the sequence properties, which override the
    defaults of the formatter.
    """
    sequence = _sequence(organism="Homo sapiens", topology="circular")
    genbank_options = GenbankOptions(
        default_organism="Mus musculus", default_division="ROD"
    )
    text = _format([sequence], genbank_options=genbank_options)
    assert "SOURCE      Homo sapiens" in text.splitlines()
    assert "circular ROD" in text.splitlines()[0]

    options = ConversionOptions(
        organism="Pan troglodytes", topology="linear", division="PRI"
    )
    text = _format(
        [sequence], options=options, genbank_options=genbank_options
    )
    assert "SOURCE      Pan troglodytes" in text.splitlines()
    assert "linear   PRI" in text.splitlines()[0]

    text = _format([_sequence()], genbank_options=genbank_options)
    assert "SOURCE      Mus musculus" in text.splitlines()


def test_missing_metadata():
    """
    Missing metadata is replaced by placeholders instead of raising an
    exception.
    """
    text = _format([seq.Sequence("seq1", "")])
    lines = text.splitlines()
    assert lines[1] == "DEFINITION  seq1."
    assert "SOURCE      ." in lines
    assert "            Unclassified." in lines
    assert "KEYWORDS    ." in lines
    assert lines[-2:] == ["ORIGIN", "//"]


def test_header_info():
    header = seq.HeaderInfo(
        accession="NC_012920",
        version="NC_012920.1",
        definition="Homo sapiens mitochondrion, complete genome",
        keywords=("RefSeq", "complete genome"),
        taxonomy=("Eukaryota", "Metazoa", "Chordata"),
        db_links={"BioProject": "PRJNA30353"},
        references=(
            seq.ReferenceInfo(
                base_range="(bases 1 to 9)",
                authors=("Anderson,S.", "Bankier,A.T."),
                title="Sequence of the human mitochondrial genome",
                journal="Nature 290 (5806), 457-465 (1981)",
                pubmed="7219534",
            ),
        ),
        comment="Reviewed sequence.",
        assembly_data={"Assembly Method": "SPAdes v. 3.15"},
        date=DATE,
    )
    options = ConversionOptions(
        header_info=header, custom_metadata={"Submitter": "Lab"}
    )
    text = _format(
        [seq.Sequence("seq1", "ATGAAATAA", organism="Homo sapiens")],
        options=options,
    )
    lines = text.splitlines()
    assert lines[0].endswith(DATE)
    assert lines[1:10] == [
        "DEFINITION  Homo sapiens mitochondrion, complete genome.",
        "ACCESSION   NC_012920",
        "VERSION     NC_012920.1",
        "DBLINK      BioProject: PRJNA30353",
        "KEYWORDS    RefSeq; complete genome.",
        "SOURCE      Homo sapiens",
        "  ORGANISM  Homo sapiens",
        "            Eukaryota; Metazoa; Chordata.",
        "REFERENCE   1  (bases 1 to 9)",
    ]
    assert "  AUTHORS   Anderson,S., Bankier,A.T." in lines
    assert "  PUBMED    7219534" in lines
    comment = lines.index("COMMENT     Reviewed sequence.")
    assert lines[comment + 1 : comment + 8] == [
        "",
        "            ##Assembly-Data-START##",
        "            Assembly Method     :: SPAdes v. 3.15",
        "            ##Assembly-Data-END##",
        "",
        "            ##Metadata-START##",
        "            Submitter           :: Lab",
    ]


def test_standardized_feature_types():
    annotations = [
        seq.Annotation("five_prime_UTR", 0, 3, sequence_id="seq1"),
        seq.Annotation("cox1", 0, 9, sequence_id="seq1"),
        seq.Annotation("trnL2(uaa)", 3, 6, sequence_id="seq1"),
        seq.Annotation("enhancer", 6, 9, sequence_id="seq1"),
        seq.Annotation("my_type", 6, 9, sequence_id="seq1"),
    ]
    options = ConversionOptions(feature_formatting=FeatureFormattingOptions(
        standardize_feature_types=True,
        feature_type_mapping={"my_type": "misc_feature"},
    ))
    block = _feature_block(_format([_sequence()], annotations, options))
    keys = [line.split()[0] for line in block if not line.startswith(" " * 6)]
    assert keys == [
        "source", "5'UTR", "CDS", "tRNA", "enhancer", "misc_feature"
    ]
    assert '                     /gene="cox1"' in block
    assert '                     /product="cytochrome c oxidase subunit I"' \
        in block
    assert '                     /product="tRNA-Leu"' in block

    # Without standardization the types are kept
    block = _feature_block(_format([_sequence()], annotations))
    keys = [line.split()[0] for line in block if not line.startswith(" " * 6)]
    assert keys[1:3] == ["five_prime_UTR", "cox1"]


@pytest.mark.parametrize("feature_type, ref_qualifiers", [
    ("nad4L", [
        ("gene", "nad4L"), ("product", "NADH dehydrogenase subunit 4L")
    ]),
    ("nd1", [("gene", "nd1"), ("product", "NADH dehydrogenase subunit 1")]),
    ("cox1-b", [
        ("gene", "cox1-b"),
        ("product", "cytochrome c oxidase subunit I, copy b")
    ]),
    ("rrnL", [("gene", "rrnL"), ("product", "16S ribosomal RNA")]),
    ("gene", []),
])
def test_gene_qualifiers(feature_type, ref_qualifiers):
    assert gb.gene_qualifiers(feature_type) == ref_qualifiers


def test_id_qualifiers():
    """
    *ID*, *Name* and *Parent* attributes are omitted, unless they
    should be preserved.
    """
    annotations = [seq.Annotation(
        "gene", 0, 9, sequence_id="seq1",
        qualifiers=[("ID", "gene1"), ("Name", "nad1"), ("gene", "nad1")]
    )]
    block = _feature_block(_format([_sequence()], annotations))
    assert block[4:] == ['                     /gene="nad1"']

    options = ConversionOptions(feature_formatting=FeatureFormattingOptions(
        preserve_original_ids=True
    ))
    block = _feature_block(_format([_sequence()], annotations, options))
    assert block[4:] == [
        '                     /ID="gene1"',
        '                     /Name="nad1"',
        '                     /gene="nad1"',
    ]


def test_additional_and_pseudo_qualifiers():
    annotations = [
        seq.Annotation("pseudogene", 0, 9, sequence_id="seq1"),
        seq.Annotation(
            "gene", 0, 9, sequence_id="seq1",
            qualifiers={"note": "remnant of a pseudogene"}
        ),
        seq.Annotation("gene", 0, 9, sequence_id="seq1"),
    ]
    options = ConversionOptions(feature_formatting=FeatureFormattingOptions(
        include_pseudo_qualifier=True,
        additional_qualifiers={"gene": {"locus_tag": "ABC_001"}},
    ))
    block = _feature_block(_format([_sequence()], annotations, options))
    assert block[3:] == [
        "     pseudogene      1..9",
        "                     /pseudo",
        "     gene            1..9",
        '                     /note="remnant of a pseudogene"',
        '                     /locus_tag="ABC_001"',
        "                     /pseudo",
        "     gene            1..9",
        '                     /locus_tag="ABC_001"',
    ]


def test_is_pseudogene():
    assert gb.is_pseudogene(seq.Annotation("Pseudogene", 0, 1))
    assert gb.is_pseudogene(
        seq.Annotation("gene", 0, 1, qualifiers={"pseudo": None})
    )
    assert not gb.is_pseudogene(seq.Annotation("gene", 0, 1))


def test_multiple_records():
    """
    Each sequence is written into its own record, annotations of other
    sequences are ignored.
    """
    annotations = [
        seq.Annotation("gene", 0, 3, sequence_id="seq2"),
        seq.Annotation("gene", 0, 9, sequence_id="seq3"),
    ]
    text = _format(
        [_sequence("seq1"), _sequence("seq2", "ACGT")], annotations
    )
    records = text.split("//\n")
    assert len(records) == 3
    assert records[2] == ""
    assert records[1].startswith("LOCUS       seq2 ")
    assert "gene            1..3" in records[1]
    assert "gene" not in records[0].split("FEATURES")[1]


def test_empty_input():
    formatter = gb.GenBankFormatter()
    assert formatter.format(seq.SequenceData()) == b""


@pytest.mark.parametrize("empty_lines", [False, True])
def test_streaming(empty_lines):
    """
    Writing the records as stream gives the same output as formatting
    them in memory.
    """
    sequences = seq.SequenceData([_sequence(), _sequence("seq2", "ACGT")])
    annotations = seq.AnnotationData([
        seq.Annotation("CDS", 0, 9, "+", sequence_id="seq1"),
        seq.Annotation("gene", 0, 4, "-", sequence_id="seq2"),
    ])
    options = replace(
        ConversionOptions(),
        output_formatting=OutputFormattingOptions(
            include_empty_lines_between_features=empty_lines
        )
    )
    formatter = gb.GenBankFormatter()
    ref_data = formatter.format(sequences, annotations, options)

    binary = io.BytesIO()
    formatter.format_to_stream(sequences, annotations, binary, options)
    assert binary.getvalue() == ref_data

    text = io.StringIO()
    formatter.format_to_stream(sequences, annotations, text, options)
    assert text.getvalue() == ref_data.decode("utf-8")

    lines = list(formatter.iter_lines(sequences, annotations, options))
    assert "\n".join(lines) + "\n" == ref_data.decode("utf-8")


def test_genbank_file_fields():
    file = gb.GenBankFile()
    gb.set_locus(file, "seq1", 9, date=DATE)
    gb.set_definition(file, "A test sequence")
    gb.set_sequence(file, "ATG")
    assert len(file) == 3
    content, subfields = file.get_fields("definition")[0]
    assert content == ["A test sequence."]
    assert len(subfields) == 0
    assert str(file).splitlines()[-2:] == ["        1 atg", "//"]
    with pytest.raises(ValueError):
        file.append(" ", ["content"])
