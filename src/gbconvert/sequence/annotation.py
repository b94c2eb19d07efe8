# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence"
__author__ = "The gbconvert contributors"
__all__ = [
    "Strand",
    "Qualifiers",
    "Annotation",
    "Feature",
    "AnnotationData",
    "group_annotations",
]

import numbers
from collections import OrderedDict
from collections.abc import Mapping
from enum import IntEnum


class Strand(IntEnum):
    """
    This enum type describes the strand of an annotation.

        - **FORWARD** - The annotation is located on the forward strand
        - **REVERSE** - The annotation is located on the reverse strand
        - **UNSTRANDED** - The strand is unknown or irrelevant
    """

    FORWARD = 1
    REVERSE = -1
    UNSTRANDED = 0

    @staticmethod
    def parse(value):
        """
        Convert a strand given in one of the common notations into a
        :class:`Strand`.

        Parameters
        ----------
        value : Strand or int or str or None
            The strand.
            Integers are interpreted by their sign,
            strings can be ``'+'``, ``'-'``, ``'.'``, ``'?'`` or an
            integer representation.

        Returns
        -------
        strand : Strand
            The parsed strand.

        Raises
        ------
        ValueError
            If the value is not a valid strand notation.
        """
        if value is None:
            return Strand.UNSTRANDED
        if isinstance(value, Strand):
            return value
        if isinstance(value, numbers.Integral):
            if value > 0:
                return Strand.FORWARD
            elif value < 0:
                return Strand.REVERSE
            else:
                return Strand.UNSTRANDED
        if isinstance(value, str):
            symbol = value.strip()
            if symbol == "+":
                return Strand.FORWARD
            elif symbol == "-":
                return Strand.REVERSE
            elif symbol in (".", "?", ""):
                return Strand.UNSTRANDED
            try:
                return Strand.parse(int(symbol))
            except ValueError:
                pass
        raise ValueError(f"'{value}' is not a valid strand")

    @property
    def symbol(self):
        return {Strand.FORWARD: "+", Strand.REVERSE: "-"}.get(self, ".")


class Qualifiers:
    """
    An immutable, ordered collection of qualifiers.

    In contrast to a :class:`dict`, a qualifier key may appear multiple
    times, e.g. for multiple *note* qualifiers.
    The order of the qualifiers is kept, as it determines the order in
    the written file.
    A value of ``None`` marks a flag qualifier without value, like
    ``/pseudo``.

    Parameters
    ----------
    qualifiers : Qualifiers or Mapping or iterable object of tuple(str, str), optional
        The qualifiers.
        If a mapping is given, each value may be a string, a list of
        strings (giving one qualifier per element) or ``None``.

    Examples
    --------

    >>> qual = Qualifiers({"gene": "nad1", "note": ["first", "second"]})
    >>> print(qual.get("note"))
    ['first', 'second']
    >>> print(list(qual.keys()))
    ['gene', 'note']
    >>> print(len(qual.appended("pseudo", None)))
    4
    """

    def __init__(self, qualifiers=None):
        if qualifiers is None:
            self._pairs = ()
        elif isinstance(qualifiers, Qualifiers):
            self._pairs = qualifiers._pairs
        elif isinstance(qualifiers, Mapping):
            pairs = []
            for key, value in qualifiers.items():
                if isinstance(value, (list, tuple)):
                    for val in value:
                        pairs.append((str(key), _to_value(val)))
                else:
                    pairs.append((str(key), _to_value(value)))
            self._pairs = tuple(pairs)
        else:
            self._pairs = tuple(
                (str(key), _to_value(value)) for key, value in qualifiers
            )

    def get(self, key):
        """
        Get all values of a qualifier.

        Parameters
        ----------
        key : str
            The qualifier key.

        Returns
        -------
        values : list of (str or None)
            The values in the order of their occurrence.
            Empty, if the key does not exist.
        """
        return [val for k, val in self._pairs if k == key]

    def first(self, key, default=None):
        """
        Get the first value of a qualifier, or `default` if the key
        does not exist.
        """
        for k, val in self._pairs:
            if k == key:
                return val
        return default

    def keys(self):
        return list(OrderedDict.fromkeys(k for k, _ in self._pairs))

    def items(self):
        return iter(self._pairs)

    def appended(self, key, value):
        """
        Create a new :class:`Qualifiers` with an additional qualifier
        at the end.

        Parameters
        ----------
        key : str
            The qualifier key.
        value : str or None
            The qualifier value.

        Returns
        -------
        qualifiers : Qualifiers
            The new qualifiers.
        """
        return Qualifiers(self._pairs + ((str(key), _to_value(value)),))

    def without(self, *keys):
        """
        Create a new :class:`Qualifiers` without the given keys.
        """
        return Qualifiers([(k, v) for k, v in self._pairs if k not in keys])

    def __contains__(self, key):
        return any(k == key for k, _ in self._pairs)

    def __iter__(self):
        return iter(self._pairs)

    def __len__(self):
        return len(self._pairs)

    def __repr__(self):
        """Represent Qualifiers as a string for debugging."""
        return f"Qualifiers({list(self._pairs)})"

    def __eq__(self, item):
        if not isinstance(item, Qualifiers):
            return False
        return self._pairs == item._pairs

    def __hash__(self):
        return hash(self._pairs)


class Annotation:
    """
    A single annotated region on a sequence.

    The coordinates are 0-based and half-open, i.e. `start` is the
    first base of the region and `end` is the position after the last
    base.
    The coordinates are not checked against a sequence, so
    that an annotation may be created before the sequence it refers to
    is known.

    Objects of this class are immutable.

    Parameters
    ----------
    type : str
        The feature type, e.g. ``'gene'`` or ``'CDS'``.
    start, end : int
        The region on the sequence.
    strand : Strand or int or str, optional
        The strand, parsed via :meth:`Strand.parse()`.
    phase : int, optional
        The reading frame offset of a *CDS* segment.
    sequence_id : str, optional
        The ID of the sequence the annotation refers to.
    feature_id : str, optional
        An identifier shared by all segments of a feature,
        e.g. the exons of a gene.
    qualifiers : Qualifiers or Mapping or iterable object of tuple(str, str), optional
        The qualifiers of the annotation.

    Attributes
    ----------
    type, start, end, strand, phase, sequence_id, feature_id, qualifiers
        Same as the parameters.
    length : int
        The number of bases in the region.

    Examples
    --------

    >>> annot = Annotation("CDS", 0, 9, "+", sequence_id="seq1")
    >>> print(annot.strand == Strand.FORWARD)
    True
    >>> print(annot.evolve(end=12).length)
    12
    """

    def __init__(self, type, start, end, strand=Strand.UNSTRANDED,
                 phase=None, sequence_id=None, feature_id=None,
                 qualifiers=None):
        self._type = type
        self._start = int(start)
        self._end = int(end)
        self._strand = Strand.parse(strand)
        self._phase = int(phase) if phase is not None else None
        self._sequence_id = sequence_id
        self._feature_id = feature_id
        self._qualifiers = Qualifiers(qualifiers)

    @property
    def type(self):
        return self._type

    @property
    def start(self):
        return self._start

    @property
    def end(self):
        return self._end

    @property
    def length(self):
        return self._end - self._start

    @property
    def strand(self):
        return self._strand

    @property
    def phase(self):
        return self._phase

    @property
    def sequence_id(self):
        return self._sequence_id

    @property
    def feature_id(self):
        return self._feature_id

    @property
    def qualifiers(self):
        return self._qualifiers

    def evolve(self, **changes):
        """
        Create a new :class:`Annotation` with some attributes replaced.

        Parameters
        ----------
        **changes
            The attributes to be replaced, given with the names of the
            constructor parameters.

        Returns
        -------
        annotation : Annotation
            The new annotation.
        """
        params = dict(
            type=self._type,
            start=self._start,
            end=self._end,
            strand=self._strand,
            phase=self._phase,
            sequence_id=self._sequence_id,
            feature_id=self._feature_id,
            qualifiers=self._qualifiers,
        )
        params.update(changes)
        return Annotation(**params)

    def __repr__(self):
        """Represent Annotation as a string for debugging."""
        return (
            f'Annotation("{self._type}", {self._start}, {self._end}, '
            f"strand={self._strand.symbol!r}, phase={self._phase}, "
            f"sequence_id={self._sequence_id!r}, "
            f"feature_id={self._feature_id!r}, "
            f"qualifiers={self._qualifiers!r})"
        )

    def __eq__(self, item):
        if not isinstance(item, Annotation):
            return False
        return (
            self._type == item._type
            and self._start == item._start
            and self._end == item._end
            and self._strand == item._strand
            and self._phase == item._phase
            and self._sequence_id == item._sequence_id
            and self._feature_id == item._feature_id
            and self._qualifiers == item._qualifiers
        )

    def __hash__(self):
        return hash(
            (
                self._type,
                self._start,
                self._end,
                self._strand,
                self._phase,
                self._sequence_id,
                self._feature_id,
                self._qualifiers,
            )
        )


class Feature:
    """
    A logical feature, composed of one or multiple
    :class:`Annotation` segments that share the same feature ID.

    This is the unit written as one entry into the feature table of a
    *GenBank* record.

    Objects of this class are immutable.

    Parameters
    ----------
    type : str
        The feature type.
    segments : iterable object of tuple(int, int)
        The 0-based half-open regions of the feature.
        They are sorted in ascending order.
    strand : Strand, optional
        The strand of the feature.
    phase : int, optional
        The reading frame offset of the first segment in transcript
        direction.
    sequence_id, feature_id : str, optional
        The sequence the feature belongs to and the shared ID of the
        segments.
    qualifiers : Qualifiers, optional
        The qualifiers of the feature.

    Attributes
    ----------
    type, segments, strand, phase, sequence_id, feature_id, qualifiers
        Same as the parameters.
    start, end : int
        The start of the first and the end of the last segment.
    length : int
        The summed length of all segments.
    """

    def __init__(self, type, segments, strand=Strand.UNSTRANDED, phase=None,
                 sequence_id=None, feature_id=None, qualifiers=None):
        segments = tuple(
            sorted(((int(s), int(e)) for s, e in segments),
                   key=lambda seg: seg[0])
        )
        if len(segments) == 0:
            raise ValueError("A feature must have at least one segment")
        self._type = type
        self._segments = segments
        self._strand = Strand.parse(strand)
        self._phase = phase
        self._sequence_id = sequence_id
        self._feature_id = feature_id
        self._qualifiers = Qualifiers(qualifiers)

    @staticmethod
    def from_annotations(annotations):
        """
        Combine the segments of a single feature into a
        :class:`Feature`.

        Parameters
        ----------
        annotations : iterable object of Annotation
            The segments, already sorted by their start.
            Type, strand, sequence ID and feature ID are taken from the
            first segment.
            The qualifiers of all segments are joined, a qualifier that
            an earlier segment already has is not added again.

        Returns
        -------
        feature : Feature
            The combined feature.
        """
        annotations = list(annotations)
        first = annotations[0]
        # The phase refers to the 5' segment in transcript direction
        if first.strand == Strand.REVERSE:
            phase = annotations[-1].phase
        else:
            phase = first.phase
        pairs = []
        for annot in annotations:
            # Only qualifiers repeated by another segment are dropped
            previous = set(pairs)
            pairs += [
                pair for pair in annot.qualifiers if pair not in previous
            ]
        return Feature(
            first.type,
            [(annot.start, annot.end) for annot in annotations],
            first.strand,
            phase,
            first.sequence_id,
            first.feature_id,
            Qualifiers(pairs),
        )

    @property
    def type(self):
        return self._type

    @property
    def segments(self):
        return self._segments

    @property
    def start(self):
        return self._segments[0][0]

    @property
    def end(self):
        return max(end for _, end in self._segments)

    @property
    def length(self):
        return sum(end - start for start, end in self._segments)

    @property
    def strand(self):
        return self._strand

    @property
    def phase(self):
        return self._phase

    @property
    def sequence_id(self):
        return self._sequence_id

    @property
    def feature_id(self):
        return self._feature_id

    @property
    def qualifiers(self):
        return self._qualifiers

    def evolve(self, **changes):
        """
        Create a new :class:`Feature` with some attributes replaced.
        """
        params = dict(
            type=self._type,
            segments=self._segments,
            strand=self._strand,
            phase=self._phase,
            sequence_id=self._sequence_id,
            feature_id=self._feature_id,
            qualifiers=self._qualifiers,
        )
        params.update(changes)
        return Feature(**params)

    def __repr__(self):
        """Represent Feature as a string for debugging."""
        return (
            f'Feature("{self._type}", {list(self._segments)}, '
            f"strand={self._strand.symbol!r}, "
            f"qualifiers={self._qualifiers!r})"
        )

    def __eq__(self, item):
        if not isinstance(item, Feature):
            return False
        return (
            self._type == item._type
            and self._segments == item._segments
            and self._strand == item._strand
            and self._phase == item._phase
            and self._sequence_id == item._sequence_id
            and self._feature_id == item._feature_id
            and self._qualifiers == item._qualifiers
        )

    def __hash__(self):
        return hash((self._type, self._segments, self._strand))


class AnnotationData:
    """
    A collection of :class:`Annotation` objects, grouped by the ID of
    the sequence they refer to.

    Both, the order of sequence IDs and the order of annotations within
    a sequence, follow the insertion order.
    The sequence IDs are not checked, i.e. annotations may refer to
    sequences that do not exist.

    Parameters
    ----------
    annotations : Mapping or iterable object of Annotation, optional
        Either a mapping of sequence IDs to lists of annotations or a
        flat iterable of annotations, which are grouped by their
        :attr:`Annotation.sequence_id`.

    Examples
    --------

    >>> data = AnnotationData([
    ...     Annotation("gene", 0, 90, "+", sequence_id="a"),
    ...     Annotation("gene", 10, 50, "-", sequence_id="b"),
    ...     Annotation("CDS", 0, 90, "+", sequence_id="a"),
    ... ])
    >>> print(data.sequence_ids)
    ('a', 'b')
    >>> print(data.total_count)
    3
    """

    def __init__(self, annotations=()):
        self._annotations = OrderedDict()
        if isinstance(annotations, Mapping):
            for seq_id, annots in annotations.items():
                self._annotations[seq_id] = tuple(annots)
        else:
            grouped = OrderedDict()
            for annot in annotations:
                if not isinstance(annot, Annotation):
                    raise TypeError(
                        f"Expected 'Annotation', not '{type(annot).__name__}'"
                    )
                grouped.setdefault(annot.sequence_id, []).append(annot)
            for seq_id, annots in grouped.items():
                self._annotations[seq_id] = tuple(annots)

    @staticmethod
    def from_annotations(annotations):
        """
        Group a flat iterable of annotations by their sequence ID.

        Parameters
        ----------
        annotations : iterable object of Annotation
            The annotations.

        Returns
        -------
        data : AnnotationData
            The grouped annotations.
        """
        return AnnotationData(list(annotations))

    @property
    def sequence_ids(self):
        return tuple(self._annotations.keys())

    @property
    def total_count(self):
        return sum(len(annots) for annots in self._annotations.values())

    def get_annotations(self, sequence_id):
        """
        Get the annotations of a sequence.

        Parameters
        ----------
        sequence_id : str
            The sequence ID.

        Returns
        -------
        annotations : tuple of Annotation
            The annotations in insertion order.
            Empty, if the sequence has no annotations.
        """
        return self._annotations.get(sequence_id, ())

    def get_features(self, sequence_id, sort=True):
        """
        Get the logical features of a sequence, where annotations
        sharing type and feature ID are combined into a single
        :class:`Feature`.

        Parameters
        ----------
        sequence_id : str
            The sequence ID.
        sort : bool, optional
            If false, the features are ordered by the first occurrence
            of their annotations instead of their position.

        Returns
        -------
        features : list of Feature
            The features.
        """
        return [
            Feature.from_annotations(group)
            for group in group_annotations(
                self.get_annotations(sequence_id), sort
            )
        ]

    def __iter__(self):
        for annots in self._annotations.values():
            yield from annots

    def __len__(self):
        return self.total_count

    def __contains__(self, sequence_id):
        return sequence_id in self._annotations

    def __repr__(self):
        """Represent AnnotationData as a string for debugging."""
        return f"AnnotationData({dict(self._annotations)})"

    def __eq__(self, item):
        if not isinstance(item, AnnotationData):
            return False
        return self._annotations == item._annotations


def group_annotations(annotations, sort=True):
    """
    Group annotations that belong to the same logical feature.

    Annotations are grouped by their sequence ID, type and feature ID.
    Annotations without feature ID form a group on their own.

    Parameters
    ----------
    annotations : iterable object of Annotation
        The annotations to be grouped.
    sort : bool, optional
        If false, the groups keep the order of their first annotation
        in the input.

    Returns
    -------
    groups : list of list of Annotation
        The groups.
        Within each group the annotations are sorted by their start,
        annotations with equal start keep their input order.
        Unless `sort` is false, the groups are sorted by the start of
        their first annotation, again in a stable manner.
    """
    groups = OrderedDict()
    for i, annot in enumerate(annotations):
        if annot.feature_id is None:
            key = (i,)
        else:
            key = (annot.sequence_id, annot.type, annot.feature_id)
        groups.setdefault(key, []).append(annot)
    # 'sorted()' is stable
    sorted_groups = [
        sorted(group, key=lambda annot: annot.start)
        for group in groups.values()
    ]
    if not sort:
        return sorted_groups
    return sorted(sorted_groups, key=lambda group: group[0].start)


def _to_value(value):
    if value is None:
        return None
    return str(value)
