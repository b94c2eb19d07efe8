# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

import io
from os.path import join
import gbconvert
import gbconvert.sequence as seq
import gbconvert.sequence.io.gff as gff
import pytest
from ..util import data_dir


def test_entries():
    gff_file = gff.GFFFile.read(join(data_dir("sequence"), "sample.gff3"))
    assert len(gff_file) == 4
    assert gff_file.directives() == [
        ("gff-version 3", 0), ("sequence-region seq1 1 30", 1)
    ]
    seqid, source, type, start, end, score, strand, phase, attrib \
        = gff_file[2]
    assert seqid == "seq1"
    assert source == "test"
    assert type == "CDS"
    assert (start, end) == (22, 30)
    assert score is None
    assert strand == seq.Strand.REVERSE
    assert phase == 0
    # Percent encoding is resolved
    assert attrib == [("ID", "cds2"), ("note", "reverse; strand")]
    assert gff_file.line_number(2) == 5
    assert gff_file[-1][0] == "seq2"
    with pytest.raises(IndexError):
        gff_file[4]


def test_multiple_values():
    text = "seq1\t.\tgene\t1\t9\t1.5\t.\t.\tID=g1;Dbxref=a:1,b:2;\n"
    entry = gff.GFFFile.read(io.StringIO(text))[0]
    assert entry[5] == 1.5
    assert entry[6] == seq.Strand.UNSTRANDED
    assert entry[8] == [("ID", "g1"), ("Dbxref", "a:1"), ("Dbxref", "b:2")]


def test_gtf_entries():
    gff_file = gff.GFFFile.read(
        join(data_dir("sequence"), "sample.gtf"), "GTF"
    )
    assert gff_file.format == "GTF"
    assert len(gff_file) == 3
    assert gff_file[0][8] == [("gene_id", "g1"), ("transcript_id", "t1")]


def test_unknown_dialect():
    with pytest.raises(ValueError):
        gff.GFFFile("GFF2")


@pytest.mark.parametrize("line, message", [
    ("seq1\t.\tgene\t1\t9\n", "columns"),
    ("seq1\t.\tgene\tone\t9\t.\t+\t.\tID=g1\n", "coordinates"),
    ("seq1\t.\tgene\t1\t9\tabc\t+\t.\tID=g1\n", "score"),
    ("seq1\t.\tgene\t1\t9\t.\tx\t.\tID=g1\n", "strand"),
    ("seq1\t.\tCDS\t1\t9\t.\t+\t3\tID=g1\n", "phase"),
    ("seq1\t.\tgene\t1\t9\t.\t+\t.\tID\n", "Attribute"),
])
def test_malformed_entry(line, message):
    """
    Malformed entries raise a :class:`ParsingError` with the line
    number of the entry.
    """
    gff_file = gff.GFFFile.read(io.StringIO("##gff-version 3\n" + line))
    with pytest.raises(gbconvert.ParsingError, match=message) as excinfo:
        gff_file[0]
    assert excinfo.value.format == "GFF3"
    assert excinfo.value.line == 2


def test_fasta_directive():
    text = (
        "seq1\t.\tgene\t1\t9\t.\t+\t.\tID=g1\n"
        "##FASTA\n"
        ">seq1\n"
        "ACGTACGTA\n"
    )
    with pytest.warns(UserWarning, match="FASTA"):
        gff_file = gff.GFFFile.read(io.StringIO(text))
    assert len(gff_file) == 1


def test_get_annotations():
    gff_file = gff.GFFFile.read(join(data_dir("sequence"), "sample.gff3"))
    data = gff.get_annotations(gff_file)
    assert data.sequence_ids == ("seq1", "seq2")
    gene, cds1, cds2 = data.get_annotations("seq1")
    # Coordinates are 0-based half-open
    assert (gene.start, gene.end) == (0, 9)
    assert gene.feature_id == "gene1"
    assert cds1.phase == 0
    assert cds1.qualifiers.first("product") == "test protein"
    assert (cds2.start, cds2.end) == (21, 30)
    assert cds2.strand == seq.Strand.REVERSE


def test_get_annotations_gtf():
    """
    GTF entries are grouped by their transcript ID, or the gene ID if
    the transcript ID is absent.
    """
    gff_file = gff.GFFFile.read(
        join(data_dir("sequence"), "sample.gtf"), "GTF"
    )
    data = gff.get_annotations(gff_file)
    assert [annot.feature_id for annot in data] == ["t1", "t1", "g2"]
    features = data.get_features("seq1")
    assert [feature.type for feature in features] == ["exon", "CDS", "gene"]
