# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Reconciliation of annotations with the sequences they refer to.
"""

__name__ = "gbconvert"
__author__ = "The gbconvert contributors"
__all__ = ["merge", "merge_sequences", "MERGED_ID_PREFIX"]

from collections import OrderedDict
from .options import ConversionOptions
from .sequence.annotation import AnnotationData, group_annotations
from .sequence.sequence import SequenceData
from .validation import ValidationIssue, ValidationResult, issue_location

MERGED_ID_PREFIX = "merged_"


def merge(sequence_data, annotation_data, options=None):
    """
    Attach annotations to the sequences they refer to.

    The annotations are processed in the following order:

        1. Annotations referring to a sequence ID, that is not in
           `sequence_data`, are removed and reported as error.
        2. Annotations with coordinates outside of their sequence or a
           start behind the end are removed and reported as error.
        3. A phase outside of ``0..2`` is removed and reported as
           warning.
        4. The feature filters from `options` are applied.
        5. Annotations are grouped into features by their type and
           feature ID, ordered by their start.
           Inconsistent strands within a feature are reported as
           warning.
        6. If `options.merge_sequences` is set, the coordinates are
           shifted to the position in the concatenated sequence
           (see :func:`merge_sequences()`).

    Problems never raise an exception, but are collected in the
    returned :class:`ValidationResult`.

    Parameters
    ----------
    sequence_data : SequenceData
        The sequences.
    annotation_data : AnnotationData
        The annotations.
    options : ConversionOptions, optional
        The conversion options.

    Returns
    -------
    merged : AnnotationData
        The valid, filtered and ordered annotations.
    result : ValidationResult
        The validation report.
        It is only invalid, if it contains at least one error.

    Examples
    --------

    >>> sequences = SequenceData([Sequence("seq1", "ATGAAATAA")])
    >>> annotations = AnnotationData([
    ...     Annotation("CDS", 0, 9, "+", sequence_id="seq1"),
    ...     Annotation("CDS", 0, 9, "+", sequence_id="seq2"),
    ... ])
    >>> merged, result = merge(sequences, annotations)
    >>> print(merged.total_count)
    1
    >>> print(result.valid)
    False
    >>> for issue in result.errors:
    ...     print(issue)
    ERROR [seq2:0-9]: Unknown sequence ID 'seq2'
    """
    if options is None:
        options = ConversionOptions()
    feature_filter = options.feature_filter
    issues = []

    accepted = OrderedDict((seq_id, []) for seq_id in sequence_data.ids)
    for annot in annotation_data:
        sequence = sequence_data.get(annot.sequence_id)
        if sequence is None:
            issues.append(ValidationIssue.error(
                f"Unknown sequence ID '{annot.sequence_id}'",
                issue_location(annot),
            ))
            continue
        if annot.start < 0 or annot.start > annot.end \
                or annot.end > sequence.length:
            issues.append(ValidationIssue.error(
                f"Coordinates {annot.start}..{annot.end} of "
                f"'{annot.type}' annotation are out of range for sequence "
                f"of length {sequence.length}",
                issue_location(annot),
            ))
            continue
        if annot.phase is not None and annot.phase not in (0, 1, 2):
            issues.append(ValidationIssue.warning(
                f"Invalid phase {annot.phase} of '{annot.type}' annotation "
                f"is ignored",
                issue_location(annot),
            ))
            annot = annot.evolve(phase=None)
        if not feature_filter.accepts(annot):
            continue
        accepted[annot.sequence_id].append(annot)

    ordered = OrderedDict()
    for seq_id, annots in accepted.items():
        if len(annots) == 0:
            continue
        ordered[seq_id] = []
        for group in group_annotations(annots):
            strands = set(annot.strand for annot in group)
            if len(strands) > 1:
                issues.append(ValidationIssue.warning(
                    f"Segments of '{group[0].type}' feature have "
                    f"inconsistent strands, "
                    f"using '{group[0].strand.symbol}'",
                    issue_location(group[0]),
                ))
            ordered[seq_id].extend(group)

    if options.merge_sequences and len(sequence_data) > 1:
        merged_id = MERGED_ID_PREFIX + sequence_data.ids[0]
        offsets = _prefix_lengths(sequence_data)
        shifted = []
        for seq_id, annots in ordered.items():
            offset = offsets[seq_id]
            for annot in annots:
                shifted.append(annot.evolve(
                    start=annot.start + offset,
                    end=annot.end + offset,
                    sequence_id=merged_id,
                ))
        merged = AnnotationData({merged_id: shifted} if shifted else {})
        sequence_count = 1
    else:
        merged = AnnotationData(ordered)
        sequence_count = len(sequence_data)

    result = ValidationResult(
        issues, sequence_count=sequence_count, feature_count=merged.total_count
    )
    return merged, result


def merge_sequences(sequence_data, options=None):
    """
    Concatenate all sequences into a single sequence.

    The ID of the concatenated sequence is the ID of the first sequence
    with the prefix ``'merged_'``.
    The remaining metadata is taken from the first sequence.
    As the concatenation is no circular molecule, the topology is
    linear unless `options.topology` is given.

    Parameters
    ----------
    sequence_data : SequenceData
        The sequences in the order of concatenation.
    options : ConversionOptions, optional
        The conversion options.

    Returns
    -------
    merged : SequenceData
        The concatenated sequence.
        If `sequence_data` contains less than two sequences, it is
        returned unchanged.

    Examples
    --------

    >>> data = SequenceData([Sequence("a", "A" * 10), Sequence("b", "C" * 15)])
    >>> merged = merge_sequences(data)
    >>> print(merged.ids, merged.get("merged_a").length)
    ('merged_a',) 25
    """
    if len(sequence_data) < 2:
        return sequence_data
    topology = "linear"
    if options is not None and options.topology is not None:
        topology = options.topology
    sequences = list(sequence_data)
    first = sequences[0]
    merged_id = MERGED_ID_PREFIX + first.id
    description = first.description
    if description is None:
        description = (
            f"Concatenation of {len(sequences)} sequences: "
            + ", ".join(seq.id for seq in sequences)
        )
    merged = first.evolve(
        id=merged_id,
        name=merged_id,
        sequence="".join(seq.sequence for seq in sequences),
        description=description,
        topology=topology,
    )
    return SequenceData([merged])


def _prefix_lengths(sequence_data):
    """
    Get the position of each sequence in the concatenation of all
    sequences.
    """
    offsets = {}
    offset = 0
    for sequence in sequence_data:
        offsets[sequence.id] = offset
        offset += sequence.length
    return offsets
