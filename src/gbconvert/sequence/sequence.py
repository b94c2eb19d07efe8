# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
The module contains the :class:`Sequence` record and the ordered
:class:`SequenceData` collection.
"""

__name__ = "gbconvert.sequence"
__author__ = "The gbconvert contributors"
__all__ = ["Sequence", "SequenceData", "HeaderInfo", "ReferenceInfo"]

from collections import OrderedDict
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ReferenceInfo:
    """
    A literature reference, as written into a *REFERENCE* field of a
    GenBank record.

    Parameters
    ----------
    number : int, optional
        The reference number. By default the position in the list of
        references is used.
    base_range : str, optional
        The range of bases the reference refers to,
        e.g. ``'(bases 1 to 1224)'``.
    authors : tuple of str, optional
        The author names.
    title, journal : str, optional
        Title and journal of the publication.
    pubmed : str, optional
        The *PubMed* ID.
    """

    number: ... = None
    base_range: ... = None
    authors: ... = ()
    title: ... = None
    journal: ... = None
    pubmed: ... = None


@dataclass(frozen=True)
class HeaderInfo:
    """
    Optional metadata for the header section of a GenBank record.

    Each attribute left at ``None`` (or empty) is derived from the
    sequence or replaced by a placeholder during formatting.

    Parameters
    ----------
    accession, version, definition, keywords : str, optional
        Content of the respective GenBank fields.
    taxonomy : tuple of str, optional
        The taxonomic lineage, written below the *ORGANISM* line.
    db_links : dict of (str -> str), optional
        Cross references written into the *DBLINK* field,
        e.g. ``{"BioProject": "PRJNA20713"}``.
    references : tuple of ReferenceInfo, optional
        Literature references.
    comment : str, optional
        Free text for the *COMMENT* field.
    assembly_data : dict of (str -> str), optional
        Written as structured ``##Assembly-Data`` comment.
    date : date or str, optional
        The date written into the *LOCUS* line.
        By default the current date is used.
    """

    accession: ... = None
    version: ... = None
    definition: ... = None
    keywords: ... = None
    taxonomy: ... = ()
    db_links: ... = field(default_factory=dict)
    references: ... = ()
    comment: ... = None
    assembly_data: ... = field(default_factory=dict)
    date: ... = None


class Sequence:
    """
    A single nucleotide sequence together with the metadata required
    for a GenBank record.

    Objects of this class are immutable.

    Parameters
    ----------
    id : str
        The unique identifier of the sequence.
    sequence : str
        The nucleotide sequence.
    name : str, optional
        The locus name. Defaults to `id`.
    description : str, optional
        A description, used for the *DEFINITION* field.
    molecule_type : str, optional
        The molecule type, e.g. ``'DNA'`` or ``'RNA'``.
    topology : {'linear', 'circular'}, optional
        The topology of the sequence.
    division : str, optional
        The three letter GenBank division code, e.g. ``'BCT'``.
    organism : str, optional
        The source organism.
    taxonomy : iterable object of str, optional
        The taxonomic lineage of the organism.
    header_info : HeaderInfo, optional
        Additional header metadata for this sequence.

    Attributes
    ----------
    id, sequence, name, description, molecule_type, topology, division, organism, taxonomy, header_info
        Same as the parameters.
    length : int
        The number of symbols in the sequence.

    Examples
    --------

    >>> seq = Sequence("seq1", "ATGAAATAA", description="A short ORF")
    >>> print(seq.length)
    9
    >>> print(seq.name)
    seq1
    """

    def __init__(self, id, sequence="", name=None, description=None,
                 molecule_type=None, topology=None, division=None,
                 organism=None, taxonomy=(), header_info=None):
        if not isinstance(id, str) or len(id.strip()) == 0:
            raise ValueError("The sequence ID must be a non-empty string")
        if sequence is None:
            sequence = ""
        if not isinstance(sequence, str):
            raise TypeError(
                f"Expected 'str' as sequence, not '{type(sequence).__name__}'"
            )
        if topology is not None and topology.lower() not in (
            "linear", "circular"
        ):
            raise ValueError(f"'{topology}' is not a valid topology")
        self._id = id
        self._sequence = sequence
        self._name = name if name else id
        self._description = description
        self._molecule_type = molecule_type
        self._topology = topology.lower() if topology is not None else None
        self._division = division
        self._organism = organism
        self._taxonomy = tuple(taxonomy) if taxonomy else ()
        self._header_info = header_info

    @property
    def id(self):
        return self._id

    @property
    def sequence(self):
        return self._sequence

    @property
    def length(self):
        return len(self._sequence)

    @property
    def name(self):
        return self._name

    @property
    def description(self):
        return self._description

    @property
    def molecule_type(self):
        return self._molecule_type

    @property
    def topology(self):
        return self._topology

    @property
    def division(self):
        return self._division

    @property
    def organism(self):
        return self._organism

    @property
    def taxonomy(self):
        return self._taxonomy

    @property
    def header_info(self):
        return self._header_info

    def evolve(self, **changes):
        """
        Create a new :class:`Sequence` with some attributes replaced.

        Parameters
        ----------
        **changes
            The attributes to be replaced, given with the names of the
            constructor parameters.

        Returns
        -------
        sequence : Sequence
            The new sequence.
        """
        params = dict(
            id=self._id,
            sequence=self._sequence,
            name=self._name,
            description=self._description,
            molecule_type=self._molecule_type,
            topology=self._topology,
            division=self._division,
            organism=self._organism,
            taxonomy=self._taxonomy,
            header_info=self._header_info,
        )
        params.update(changes)
        return Sequence(**params)

    def __len__(self):
        return len(self._sequence)

    def __str__(self):
        return self._sequence

    def __repr__(self):
        """Represent Sequence as a string for debugging."""
        return f'Sequence("{self._id}", length={len(self._sequence)})'

    def __eq__(self, item):
        if not isinstance(item, Sequence):
            return False
        return (
            self._id == item._id
            and self._sequence == item._sequence
            and self._name == item._name
            and self._description == item._description
            and self._molecule_type == item._molecule_type
            and self._topology == item._topology
            and self._division == item._division
            and self._organism == item._organism
            and self._taxonomy == item._taxonomy
            and self._header_info == item._header_info
        )

    def __hash__(self):
        return hash((self._id, self._sequence))


class SequenceData:
    """
    An ordered collection of :class:`Sequence` objects with unique IDs.

    The insertion order is kept, so that records are always written in
    a deterministic order.

    Parameters
    ----------
    sequences : iterable object of Sequence, optional
        The sequences in the collection.

    Raises
    ------
    ValueError
        If two sequences share the same ID.

    Examples
    --------

    >>> data = SequenceData([Sequence("a", "ACGT"), Sequence("b", "GG")])
    >>> print(data.ids)
    ('a', 'b')
    >>> print(data.get("b").length)
    2
    """

    def __init__(self, sequences=()):
        self._sequences = OrderedDict()
        for sequence in sequences:
            if not isinstance(sequence, Sequence):
                raise TypeError(
                    f"Expected 'Sequence', not '{type(sequence).__name__}'"
                )
            if sequence.id in self._sequences:
                raise ValueError(f"Duplicate sequence ID '{sequence.id}'")
            self._sequences[sequence.id] = sequence

    @property
    def ids(self):
        return tuple(self._sequences.keys())

    @property
    def count(self):
        return len(self._sequences)

    @property
    def total_length(self):
        return sum(seq.length for seq in self._sequences.values())

    def get(self, id, default=None):
        """
        Get the sequence with the given ID.

        Parameters
        ----------
        id : str
            The sequence ID.
        default : object, optional
            Returned if no sequence with the given ID exists.

        Returns
        -------
        sequence : Sequence or object
            The sequence or `default`.
        """
        return self._sequences.get(id, default)

    def __getitem__(self, id):
        return self._sequences[id]

    def __contains__(self, id):
        return id in self._sequences

    def __iter__(self):
        return iter(self._sequences.values())

    def __len__(self):
        return len(self._sequences)

    def __repr__(self):
        """Represent SequenceData as a string for debugging."""
        return f"SequenceData({list(self._sequences.values())})"

    def __eq__(self, item):
        if not isinstance(item, SequenceData):
            return False
        return list(self) == list(item)
