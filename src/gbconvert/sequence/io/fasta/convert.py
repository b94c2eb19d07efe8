# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.fasta"
__author__ = "The gbconvert contributors"
__all__ = [
    "parse_header",
    "get_sequences",
    "get_annotations",
    "standardize_gene_name",
]

import re
from collections import OrderedDict
from ....exceptions import ParsingError
from ...annotation import Annotation, AnnotationData
from ...sequence import Sequence, SequenceData

# Source modifiers as used by NCBI submission tools,
# e.g. '[organism=Homo sapiens]'
_MODIFIER_PATTERN = re.compile(r"\[\s*([\w-]+)\s*=\s*([^\]]*)\]")
_MODIFIER_FIELDS = {
    "organism": "organism",
    "org": "organism",
    "topology": "topology",
    "moltype": "molecule_type",
    "mol_type": "molecule_type",
    "mol-type": "molecule_type",
    "division": "division",
}

# Gene location headers, e.g. 'NC_012920; 3307-4262; +; nad1(0)'
_LOCATION_HEADER_PATTERN = re.compile(
    r"([^;]+);\s*([0-9]+)-([0-9]+);\s*([+\-]);\s*([^(]+)(?:\(([^)]+)\))?.*"
)
_PRODUCTS = {
    **{
        f"{prefix}{number}": f"NADH dehydrogenase subunit {number.upper()}"
        for prefix in ("nad", "nd")
        for number in ("1", "2", "3", "4", "4l", "5", "6")
    },
    "cox1": "cytochrome c oxidase subunit I",
    "cox2": "cytochrome c oxidase subunit II",
    "cox3": "cytochrome c oxidase subunit III",
    "atp6": "ATP synthase F0 subunit 6",
    "atp8": "ATP synthase F0 subunit 8",
    "cob": "cytochrome b",
    "cytb": "cytochrome b",
    "rrn12": "12S ribosomal RNA",
    "rrn16": "16S ribosomal RNA",
}
_AMINO_ACIDS = {
    "a": "Ala", "c": "Cys", "d": "Asp", "e": "Glu", "f": "Phe",
    "g": "Gly", "h": "His", "i": "Ile", "k": "Lys", "l": "Leu",
    "m": "Met", "n": "Asn", "p": "Pro", "q": "Gln", "r": "Arg",
    "s": "Ser", "t": "Thr", "v": "Val", "w": "Trp", "y": "Tyr",
}


def parse_header(header):
    """
    Split a FASTA header into the sequence ID, the description and
    source modifiers.

    The ID is the first word of the header.
    Modifiers in brackets (``[key=value]``) are removed from the
    description.

    Parameters
    ----------
    header : str
        The header without the leading ``>``.

    Returns
    -------
    id : str
        The sequence ID.
    description : str or None
        The remaining text of the header.
    modifiers : OrderedDict of (str -> str)
        The source modifiers with lower case keys.

    Examples
    --------

    >>> id, description, modifiers = parse_header(
    ...     "NC_012920 Homo sapiens mitochondrion [topology=circular]"
    ... )
    >>> print(id)
    NC_012920
    >>> print(description)
    Homo sapiens mitochondrion
    >>> print(dict(modifiers))
    {'topology': 'circular'}
    """
    modifiers = OrderedDict(
        (key.lower(), value.strip())
        for key, value in _MODIFIER_PATTERN.findall(header)
    )
    header = _MODIFIER_PATTERN.sub("", header)
    parts = header.strip().split(maxsplit=1)
    if len(parts) == 0:
        return "", None, modifiers
    id = parts[0]
    description = " ".join(parts[1].split()) if len(parts) > 1 else None
    return id, description or None, modifiers


def get_sequences(fasta_file, molecule_type=None):
    """
    Create a :class:`SequenceData` object from FASTA entries.

    Parameters
    ----------
    fasta_file : FastaFile or iterable object of tuple(str, str)
        The FASTA file or its entries, e.g. from
        :meth:`FastaFile.read_iter()`.
    molecule_type : str, optional
        The molecule type of sequences, that do not specify it in
        their header.

    Returns
    -------
    sequence_data : SequenceData
        The sequences in the order of the file.

    Raises
    ------
    ParsingError
        If a header has no sequence ID or two sequences have the same
        ID.
    """
    if hasattr(fasta_file, "items"):
        entries = fasta_file.items()
    else:
        entries = fasta_file
    sequences = []
    ids = set()
    for header, seq_str in entries:
        id, description, modifiers = parse_header(header)
        if len(id) == 0:
            raise ParsingError(
                f"The header '>{header}' contains no sequence ID", "FASTA"
            )
        if id in ids:
            raise ParsingError(f"Duplicate sequence ID '{id}'", "FASTA")
        ids.add(id)
        fields = {"molecule_type": molecule_type}
        for key, value in modifiers.items():
            if key in _MODIFIER_FIELDS and value:
                fields[_MODIFIER_FIELDS[key]] = value
        if "topology" in fields:
            topology = fields["topology"].lower()
            if topology in ("linear", "circular"):
                fields["topology"] = topology
            else:
                del fields["topology"]
        sequences.append(Sequence(
            id, seq_str, description=description, **fields
        ))
    return SequenceData(sequences)


def get_annotations(fasta_file):
    """
    Create an :class:`AnnotationData` object from FASTA entries, whose
    headers describe the location of a gene.

    Such files are written by mitochondrial genome annotation tools
    like *MITOS*, one entry per gene, with headers of the form

    ``seqid; start-end; strand; name(qualifier)``

    where the 1-based, inclusive range refers to the sequence with the
    ID `seqid` and the qualifier in parentheses is optional.
    Entries with other headers are ignored.

    The gene name is brought into its common spelling (e.g. ``'nad1'``
    becomes ``'ND1'``) and determines the feature type:
    ``trn*`` names become *tRNA*, ``rrn*`` names *rRNA* and names of
    protein coding genes *CDS* features.
    The replication origins ``'OH'`` and ``'OL'`` and any other name
    become a *misc_feature*.
    Each feature, except for the replication origins, is preceded by a
    *gene* feature covering the same region.

    Parameters
    ----------
    fasta_file : FastaFile or iterable object of tuple(str, str)
        The FASTA file or its entries.

    Returns
    -------
    annotation_data : AnnotationData
        The annotations of each sequence, sorted by their start.

    Raises
    ------
    ParsingError
        If the range of a header is empty or starts before the first
        base.

    Examples
    --------

    >>> data = get_annotations([("chrM; 1-12; +; nad1", "ATGAAATTTTAA")])
    >>> for annot in data.get_annotations("chrM"):
    ...     print(annot.type, annot.start, annot.end, annot.qualifiers.first("gene"))
    gene 0 12 ND1
    CDS 0 12 ND1
    """
    if hasattr(fasta_file, "items"):
        entries = fasta_file.items()
    else:
        entries = fasta_file
    features = OrderedDict()
    for header, _ in entries:
        match = _LOCATION_HEADER_PATTERN.fullmatch(header.strip())
        if match is None:
            continue
        seq_id, start, end, strand, name, qualifier = match.groups()
        start, end = int(start), int(end)
        if start < 1 or end < start:
            raise ParsingError(
                f"Invalid gene location '{start}-{end}' in header '{header}'",
                "FASTA"
            )
        seq_id = seq_id.strip()
        name = standardize_gene_name(name.strip())
        features.setdefault(seq_id, []).append(
            _create_feature(seq_id, start - 1, end, strand, name,
                            qualifier)
        )
    annotations = OrderedDict()
    for seq_id, seq_features in features.items():
        annots = []
        # 'sorted()' is stable
        for feature in sorted(seq_features, key=lambda annot: annot.start):
            if feature.qualifiers.first("gene") is not None:
                annots.append(Annotation(
                    "gene", feature.start, feature.end, feature.strand,
                    sequence_id=seq_id,
                    qualifiers=[("gene", feature.qualifiers.first("gene"))]
                ))
            annots.append(feature)
        annotations[seq_id] = annots
    return AnnotationData(annotations)


def standardize_gene_name(name):
    """
    Bring the name of a mitochondrial gene into its common spelling.

    Parameters
    ----------
    name : str
        The gene name as written by the annotation tool.

    Returns
    -------
    name : str
        The standardized name.
        Unknown names are returned unchanged.

    Examples
    --------

    >>> print([standardize_gene_name(name) for name in
    ...        ("nad4l", "cox1", "cob", "rrnL", "trnL2", "OH")])
    ['ND4L', 'COX1', 'CYTB', 'rrn16', 'trnl2', 'OH']
    """
    lower = name.lower()
    if lower == "nad4l":
        return "ND4L"
    match = re.fullmatch(r"(nad|cox|atp)(\d)", lower)
    if match is not None:
        prefix, number = match.groups()
        return ("ND" if prefix == "nad" else prefix.upper()) + number
    if lower in ("cob", "cytb"):
        return "CYTB"
    if lower == "rrns":
        return "rrn12"
    if lower == "rrnl":
        return "rrn16"
    if lower.startswith("trn") and len(lower) > 3:
        return lower
    return name


def _create_feature(seq_id, start, end, strand, name, qualifier):
    lower = name.lower()
    if lower in ("oh", "ol"):
        strand_name = "heavy" if lower == "oh" else "light"
        return Annotation(
            "misc_feature", start, end, strand, sequence_id=seq_id,
            qualifiers=[(
                "note",
                f"origin of {strand_name} strand replication ({name.upper()})"
            )]
        )
    qualifiers = [("gene", name)]
    if lower.startswith("trn"):
        type = "tRNA"
        # The amino acid is the letter following 'trn'
        amino_acid = _AMINO_ACIDS.get(lower[3:4])
        if amino_acid is not None:
            qualifiers.append(("product", f"tRNA-{amino_acid}"))
        if qualifier is not None and len(qualifier.strip()) == 3:
            qualifiers.append(
                ("note", "anticodon:" + qualifier.strip().lower())
            )
    elif lower.startswith("rrn"):
        type = "rRNA"
        if lower in _PRODUCTS:
            qualifiers.append(("product", _PRODUCTS[lower]))
    elif _is_protein_coding(lower):
        type = "CDS"
        qualifiers.append(("product", _protein_product(lower)))
    else:
        type = "misc_feature"
    return Annotation(
        type, start, end, strand, sequence_id=seq_id, qualifiers=qualifiers
    )


def _is_protein_coding(lower):
    if lower in _PRODUCTS:
        return True
    if re.fullmatch(r"cox\d+(-[a-z])?|(nad|nd)\d+l?(_\d+)?|orf\d+", lower):
        return True
    return lower.startswith("gp")


def _protein_product(lower):
    if lower in _PRODUCTS:
        return _PRODUCTS[lower]
    # Additional gene copies, e.g. 'nad5_1' or 'cox1-b'
    match = re.fullmatch(r"(\w+?)[_-](\w+)", lower)
    if match is not None and match.group(1) in _PRODUCTS:
        base, copy = match.groups()
        return f"{_PRODUCTS[base]}, copy {copy.upper()}"
    if lower.startswith("gp"):
        return "gene product " + lower[2:]
    if lower.startswith("orf"):
        return "hypothetical protein"
    return "mitochondrial protein " + lower
