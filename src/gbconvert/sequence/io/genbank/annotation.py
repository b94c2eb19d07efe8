# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Functions for writing the *FEATURES* field of a GenBank record.
"""

__name__ = "gbconvert.sequence.io.genbank"
__author__ = "The gbconvert contributors"
__all__ = [
    "location_string",
    "qualifier_lines",
    "feature_lines",
    "standardize_feature_type",
    "gene_qualifiers",
    "set_features",
]

import re
from ....file import wrap_words
from ...annotation import Strand
from .file import LINE_WIDTH

_KEY_START = 5
_QUAL_START = 21
_CONTENT_WIDTH = LINE_WIDTH - _QUAL_START

# Qualifiers whose values are written without quotes
UNQUOTED_QUALIFIERS = frozenset([
    "anticodon",
    "codon",
    "codon_start",
    "compare",
    "direction",
    "estimated_length",
    "mod_base",
    "number",
    "rpt_type",
    "transl_except",
    "transl_table",
])

# Synonyms of INSDC feature keys
_FEATURE_TYPE_SYNONYMS = {
    "transcript": "mRNA",
    "mrna": "mRNA",
    "messenger_rna": "mRNA",
    "mrna_region": "mRNA",
    "primary_transcript": "precursor_RNA",
    "five_prime_utr": "5'UTR",
    "5_prime_utr": "5'UTR",
    "five_prime_utr_region": "5'UTR",
    "three_prime_utr": "3'UTR",
    "3_prime_utr": "3'UTR",
    "three_prime_utr_region": "3'UTR",
    "pseudogenic_transcript": "mRNA",
    "pseudogenic_exon": "exon",
    "pseudogenic_region": "gene",
    "pseudogene": "gene",
    "pseudogenic_trna": "tRNA",
    "pseudogenic_rrna": "rRNA",
    "coding_sequence": "CDS",
    "cds": "CDS",
    "trna": "tRNA",
    "rrna": "rRNA",
    "ncrna": "ncRNA",
    "tmrna": "tmRNA",
    "ribosomal_rna": "rRNA",
    "transfer_rna": "tRNA",
    "repeat": "repeat_region",
    "region": "misc_feature",
    "origin_of_replication": "rep_origin",
    "d_loop": "D-loop",
    "control_region": "D-loop",
}

# Mitochondrial gene names and the products of their CDS
_PROTEIN_PRODUCTS = {
    "nad1": "NADH dehydrogenase subunit 1",
    "nad2": "NADH dehydrogenase subunit 2",
    "nad3": "NADH dehydrogenase subunit 3",
    "nad4": "NADH dehydrogenase subunit 4",
    "nad4l": "NADH dehydrogenase subunit 4L",
    "nad5": "NADH dehydrogenase subunit 5",
    "nad6": "NADH dehydrogenase subunit 6",
    "cox1": "cytochrome c oxidase subunit I",
    "cox2": "cytochrome c oxidase subunit II",
    "cox3": "cytochrome c oxidase subunit III",
    "atp6": "ATP synthase F0 subunit 6",
    "atp8": "ATP synthase F0 subunit 8",
    "cob": "cytochrome b",
    "cytb": "cytochrome b",
}
for _gene in ("1", "2", "3", "4", "4l", "5", "6"):
    _PROTEIN_PRODUCTS["nd" + _gene] = _PROTEIN_PRODUCTS["nad" + _gene]

_TRNA_PRODUCTS = {
    "trna": "tRNA-Ala", "trnc": "tRNA-Cys", "trnd": "tRNA-Asp",
    "trne": "tRNA-Glu", "trnf": "tRNA-Phe", "trng": "tRNA-Gly",
    "trnh": "tRNA-His", "trni": "tRNA-Ile", "trnk": "tRNA-Lys",
    "trnl": "tRNA-Leu", "trnm": "tRNA-Met", "trnn": "tRNA-Asn",
    "trnp": "tRNA-Pro", "trnq": "tRNA-Gln", "trnr": "tRNA-Arg",
    "trns": "tRNA-Ser", "trnt": "tRNA-Thr", "trnv": "tRNA-Val",
    "trnw": "tRNA-Trp", "trny": "tRNA-Tyr",
}

_RRNA_PRODUCTS = {
    "rrns": "12S ribosomal RNA",
    "rrn12": "12S ribosomal RNA",
    "rrnl": "16S ribosomal RNA",
    "rrn16": "16S ribosomal RNA",
}

# e.g. 'trnL1', 'trnS2', 'trnF(gaa)'
_TRNA_PATTERN = re.compile(r"^trn([a-z])\d?(\([acgtu]{3}\))?$")
# e.g. 'nad5_1', 'cox1-a'
_PROTEIN_COPY_PATTERN = re.compile(r"^((?:nad|nd|cox|atp)\d+l?)[-_]([a-z0-9]+)$")


def location_string(segments, strand=Strand.UNSTRANDED,
                    sequence_length=None):
    """
    Create a GenBank compatible location string.

    Parameters
    ----------
    segments : iterable object of tuple(int, int)
        The 0-based half-open regions of the feature in ascending
        order.
    strand : Strand, optional
        The strand of the feature.
    sequence_length : int, optional
        The length of the annotated sequence.
        It is required for sites, i.e. regions without bases, at the
        start or the end of the sequence:
        These are written as site between the last and the first
        base, as for a circular molecule.

    Returns
    -------
    location : str
        The location in 1-based inclusive coordinates.

    Raises
    ------
    ValueError
        If a site is at the start of the sequence and no
        `sequence_length` is given.

    Examples
    --------

    >>> print(location_string([(0, 100)]))
    1..100
    >>> print(location_string([(4, 5)], Strand.REVERSE))
    complement(5)
    >>> print(location_string([(0, 10), (20, 30)], Strand.REVERSE))
    complement(join(1..10,21..30))
    >>> print(location_string([(5, 5)]))
    5^6
    >>> print(location_string([(0, 0)], sequence_length=100))
    100^1
    """
    ranges = []
    for start, end in segments:
        if end - start == 1:
            ranges.append(str(end))
        elif end == start:
            if start == 0 or start == sequence_length:
                if sequence_length is None:
                    raise ValueError(
                        "The sequence length is required for a site at "
                        "the start of the sequence"
                    )
                ranges.append(f"{sequence_length}^1")
            else:
                # Site between two bases
                ranges.append(f"{start}^{start + 1}")
        else:
            ranges.append(f"{start + 1}..{end}")
    if len(ranges) == 1:
        loc_string = ranges[0]
    else:
        loc_string = "join(" + ",".join(ranges) + ")"
    if strand == Strand.REVERSE:
        loc_string = f"complement({loc_string})"
    return loc_string


def qualifier_lines(key, value):
    """
    Create the lines of a single qualifier, without indentation.

    Flag qualifiers (``None`` or empty value) are written without
    value, the values of qualifiers in :data:`UNQUOTED_QUALIFIERS` are
    written without quotes.
    Double quotes within the value are escaped by doubling them.
    The text is wrapped at spaces, long words are split.

    Parameters
    ----------
    key : str
        The qualifier key.
    value : str or None
        The qualifier value.

    Returns
    -------
    lines : list of str
        The lines, each at most 58 characters long.

    Examples
    --------

    >>> print(qualifier_lines("pseudo", None))
    ['/pseudo']
    >>> print(qualifier_lines("codon_start", "1"))
    ['/codon_start=1']
    >>> print(qualifier_lines("note", 'the "best" gene'))
    ['/note="the ""best"" gene"']
    """
    if value is None or value == "":
        text = f"/{key}"
    elif key in UNQUOTED_QUALIFIERS:
        text = f"/{key}={value}"
    else:
        value = " ".join(value.splitlines()).replace('"', '""')
        text = f'/{key}="{value}"'
    return wrap_words(text, _CONTENT_WIDTH)


def feature_lines(key, location, qualifiers=()):
    """
    Create the lines of a single feature table entry.

    Parameters
    ----------
    key : str
        The feature key.
    location : str
        The location string.
        It is wrapped after commas, if it is too long.
    qualifiers : iterable object of tuple(str, str or None), optional
        The qualifiers in the order they are written.

    Returns
    -------
    lines : list of str
        The lines of the entry.

    Examples
    --------

    >>> lines = feature_lines("gene", "1..90", [("gene", "nad1")])
    >>> print("\\n".join(lines))
         gene            1..90
                         /gene="nad1"
    """
    indent = " " * _QUAL_START
    loc_lines = _wrap_location(location)
    if len(key) >= _QUAL_START - _KEY_START:
        # Key is too long for the key column
        lines = [" " * _KEY_START + key, indent + loc_lines[0]]
    else:
        lines = [
            " " * _KEY_START + key.ljust(_QUAL_START - _KEY_START)
            + loc_lines[0]
        ]
    lines += [indent + line for line in loc_lines[1:]]
    for qual_key, value in qualifiers:
        lines += [indent + line for line in qualifier_lines(qual_key, value)]
    return lines


def standardize_feature_type(feature_type, custom_mapping=None):
    """
    Map a feature type onto the INSDC feature key vocabulary.

    Parameters
    ----------
    feature_type : str
        The feature type.
    custom_mapping : dict of (str -> str), optional
        A mapping that is applied before the built-in vocabulary.

    Returns
    -------
    key : str
        The INSDC feature key or the original type, if it is unknown.

    Examples
    --------

    >>> print(standardize_feature_type("five_prime_UTR"))
    5'UTR
    >>> print(standardize_feature_type("trnL2"))
    tRNA
    >>> print(standardize_feature_type("nad4L"))
    CDS
    >>> print(standardize_feature_type("enhancer"))
    enhancer
    """
    if custom_mapping and feature_type in custom_mapping:
        return custom_mapping[feature_type]
    lower = feature_type.lower()
    if lower in _FEATURE_TYPE_SYNONYMS:
        return _FEATURE_TYPE_SYNONYMS[lower]
    if lower in _PROTEIN_PRODUCTS or _PROTEIN_COPY_PATTERN.match(lower):
        return "CDS"
    if _TRNA_PATTERN.match(lower):
        return "tRNA"
    if lower in _RRNA_PRODUCTS:
        return "rRNA"
    return feature_type


def gene_qualifiers(feature_type):
    """
    Get the qualifiers implied by a feature type, that is actually a
    gene name (e.g. ``'cox1'`` or ``'trnL1'``).

    Parameters
    ----------
    feature_type : str
        The original feature type.

    Returns
    -------
    qualifiers : list of tuple(str, str)
        The */gene* and */product* qualifiers.
        Empty, if the type is no known gene name.
    """
    lower = feature_type.lower()
    if lower in _PROTEIN_PRODUCTS:
        return [("gene", feature_type), ("product", _PROTEIN_PRODUCTS[lower])]
    match = _PROTEIN_COPY_PATTERN.match(lower)
    if match:
        base, copy = match.groups()
        product = _PROTEIN_PRODUCTS.get(base)
        if product is None:
            return [("gene", feature_type)]
        return [("gene", feature_type), ("product", f"{product}, copy {copy}")]
    match = _TRNA_PATTERN.match(lower)
    if match:
        return [
            ("gene", feature_type),
            ("product", _TRNA_PRODUCTS["trn" + match.group(1)]),
        ]
    if lower in _RRNA_PRODUCTS:
        return [("gene", feature_type), ("product", _RRNA_PRODUCTS[lower])]
    return []


def set_features(gb_file, feature_entries, empty_lines=False):
    """
    Set the *FEATURES* field of a GenBank record.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    feature_entries : iterable object of tuple(str, str, list)
        The features, each given as feature key, location string and
        qualifiers.
    empty_lines : bool, optional
        If true, an empty line is put after each feature.
    """
    lines = []
    for key, location, qualifiers in feature_entries:
        lines += feature_lines(key, location, qualifiers)
        if empty_lines:
            lines.append("")
    gb_file.append("FEATURES", lines)


def _wrap_location(location):
    """
    Wrap a location string after commas.
    """
    if len(location) <= _CONTENT_WIDTH:
        return [location]
    lines = []
    line = ""
    for part in location.split(","):
        if line and len(line) + len(part) + 1 > _CONTENT_WIDTH:
            lines.append(line)
            line = ""
        line += part + ","
    # Remove the comma after the last part
    lines.append(line[:-1])
    return lines
