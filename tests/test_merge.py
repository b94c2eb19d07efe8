# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

import numpy as np
import gbconvert
from gbconvert import ConversionOptions, FeatureFilterOptions, Severity
from gbconvert.sequence import (
    Annotation,
    AnnotationData,
    Sequence,
    SequenceData,
)
import pytest


@pytest.fixture
def sequences():
    return SequenceData([
        Sequence("seq1", "A" * 10),
        Sequence("seq2", "C" * 15),
    ])


@pytest.mark.parametrize("seed", range(5))
def test_dropped_references(sequences, seed):
    """
    Each annotation referring to an unknown sequence is removed and
    reported by exactly one error.
    """
    np.random.seed(seed)
    seq_ids = np.random.choice(["seq1", "seq2", "seq3", "seq4"], size=30)
    annotations = AnnotationData([
        Annotation("gene", 0, 5, sequence_id=str(seq_id))
        for seq_id in seq_ids
    ])
    merged, result = gbconvert.merge(sequences, annotations)
    n_unknown = np.count_nonzero(np.isin(seq_ids, ["seq3", "seq4"]))
    assert merged.total_count == 30 - n_unknown
    assert result.feature_count == 30 - n_unknown
    assert len(result.errors) == n_unknown
    assert all("Unknown sequence ID" in e.message for e in result.errors)
    assert set(merged.sequence_ids) <= set(["seq1", "seq2"])


@pytest.mark.parametrize("start, end", [(-1, 5), (5, 4), (0, 11), (10, 12)])
def test_out_of_range(sequences, start, end):
    annotations = AnnotationData([
        Annotation("gene", start, end, sequence_id="seq1")
    ])
    merged, result = gbconvert.merge(sequences, annotations)
    assert merged.total_count == 0
    assert len(result.errors) == 1
    assert "out of range" in result.errors[0].message


def test_boundaries(sequences):
    """
    Annotations covering the complete sequence and empty sites are
    valid.
    """
    annotations = AnnotationData([
        Annotation("gene", 0, 10, sequence_id="seq1"),
        Annotation("misc_feature", 10, 10, sequence_id="seq1"),
    ])
    merged, result = gbconvert.merge(sequences, annotations)
    assert merged.total_count == 2
    assert result.valid
    assert len(result.issues) == 0


def test_invalid_phase(sequences):
    annotations = AnnotationData([
        Annotation("CDS", 0, 9, phase=4, sequence_id="seq1")
    ])
    merged, result = gbconvert.merge(sequences, annotations)
    assert result.valid
    assert result.warnings[0].severity == Severity.WARNING
    assert list(merged)[0].phase is None


def test_inconsistent_strands(sequences):
    annotations = AnnotationData([
        Annotation("CDS", 0, 3, "+", sequence_id="seq2", feature_id="c1"),
        Annotation("CDS", 6, 9, "-", sequence_id="seq2", feature_id="c1"),
    ])
    merged, result = gbconvert.merge(sequences, annotations)
    assert result.valid
    assert len(result.warnings) == 1
    assert merged.total_count == 2


def test_idempotence(sequences):
    """
    Merging already merged data gives the same data and no issues.
    """
    annotations = AnnotationData([
        Annotation("gene", 5, 15, "-", sequence_id="seq2", feature_id="g2"),
        Annotation("CDS", 0, 9, "+", 0, sequence_id="seq1", feature_id="c1"),
        Annotation("gene", 0, 10, "+", sequence_id="seq1", feature_id="g1"),
        Annotation("CDS", 3, 6, "-", sequence_id="seq2"),
        Annotation("gene", 0, 5, sequence_id="unknown"),
    ])
    merged, result = gbconvert.merge(sequences, annotations)
    assert len(result.errors) == 1
    remerged, reresult = gbconvert.merge(sequences, merged)
    assert remerged == merged
    assert len(reresult.issues) == 0


def test_feature_order(sequences):
    """
    The merged annotations are ordered by sequence and position.
    """
    annotations = AnnotationData([
        Annotation("gene", 5, 15, sequence_id="seq2"),
        Annotation("gene", 5, 10, sequence_id="seq1"),
        Annotation("gene", 0, 5, sequence_id="seq1"),
    ])
    merged, _ = gbconvert.merge(sequences, annotations)
    assert merged.sequence_ids == ("seq1", "seq2")
    assert [a.start for a in merged.get_annotations("seq1")] == [0, 5]


def test_include_filter(sequences):
    annotations = AnnotationData([
        Annotation("gene", 0, 9, sequence_id="seq1"),
        Annotation("CDS", 0, 9, sequence_id="seq1"),
        Annotation("gene", 0, 9, sequence_id="seq2"),
        Annotation("CDS", 3, 9, sequence_id="seq2"),
    ])
    options = ConversionOptions(
        feature_filter=FeatureFilterOptions(include_feature_types=["gene"])
    )
    merged, result = gbconvert.merge(sequences, annotations, options)
    assert [annot.type for annot in merged] == ["gene", "gene"]
    assert result.feature_count == 2
    assert result.valid


def test_filters(sequences):
    annotations = AnnotationData([
        Annotation(
            "gene", 0, 9, sequence_id="seq1",
            qualifiers={"gene": "nad1", "note": "x", "ID": "g1"}
        ),
        Annotation("CDS", 0, 2, sequence_id="seq1"),
        Annotation("repeat_region", 0, 9, sequence_id="seq2"),
        Annotation("gene", 0, 15, sequence_id="seq2"),
    ])
    options = ConversionOptions(feature_filter=FeatureFilterOptions(
        exclude_feature_types=["repeat_region"],
        min_feature_length=3,
        max_feature_length=10,
    ))
    merged, _ = gbconvert.merge(sequences, annotations, options)
    (annot,) = merged
    # The qualifiers of kept annotations are not touched
    assert list(annot.qualifiers) \
        == [("gene", "nad1"), ("note", "x"), ("ID", "g1")]

    # Qualifier filters select whole annotations
    options = ConversionOptions(feature_filter=FeatureFilterOptions(
        exclude_qualifiers=["note"]
    ))
    merged, _ = gbconvert.merge(sequences, annotations, options)
    assert [annot.type for annot in merged] \
        == ["CDS", "repeat_region", "gene"]

    options = ConversionOptions(feature_filter=FeatureFilterOptions(
        include_qualifiers=["product", "gene"]
    ))
    merged, _ = gbconvert.merge(sequences, annotations, options)
    (annot,) = merged
    assert list(annot.qualifiers) \
        == [("gene", "nad1"), ("note", "x"), ("ID", "g1")]


def test_empty_filters(sequences):
    """
    Empty filter lists do not remove anything.
    """
    annotations = AnnotationData([
        Annotation("gene", 0, 9, sequence_id="seq1"),
        Annotation("CDS", 0, 9, sequence_id="seq1", qualifiers={"note": "x"}),
    ])
    options = ConversionOptions(feature_filter=FeatureFilterOptions(
        include_feature_types=[],
        exclude_feature_types=[],
        include_qualifiers=[],
        exclude_qualifiers=[],
    ))
    merged, _ = gbconvert.merge(sequences, annotations, options)
    assert merged.total_count == 2


def test_merge_sequences(sequences):
    """
    With 'merge_sequences' the annotations of the second sequence are
    shifted by the length of the first sequence.
    """
    annotations = AnnotationData([
        Annotation("gene", 0, 5, sequence_id="seq1"),
        Annotation("gene", 2, 15, "-", sequence_id="seq2"),
    ])
    options = ConversionOptions(merge_sequences=True)
    merged, result = gbconvert.merge(sequences, annotations, options)
    assert merged.sequence_ids == ("merged_seq1",)
    assert [(a.start, a.end) for a in merged] == [(0, 5), (12, 25)]
    assert result.sequence_count == 1

    merged_sequences = gbconvert.merge_sequences(sequences, options)
    assert merged_sequences.ids == ("merged_seq1",)
    merged_sequence = merged_sequences["merged_seq1"]
    assert merged_sequence.length == 25
    assert merged_sequence.sequence == "A" * 10 + "C" * 15
    assert merged_sequence.topology == "linear"
    assert merged_sequence.description \
        == "Concatenation of 2 sequences: seq1, seq2"


def test_merge_single_sequence():
    sequences = SequenceData([Sequence("seq1", "ACGT", topology="circular")])
    assert gbconvert.merge_sequences(sequences) is sequences
    options = ConversionOptions(merge_sequences=True)
    annotations = AnnotationData([Annotation("gene", 0, 4, sequence_id="seq1")])
    merged, _ = gbconvert.merge(sequences, annotations, options)
    assert merged.sequence_ids == ("seq1",)
