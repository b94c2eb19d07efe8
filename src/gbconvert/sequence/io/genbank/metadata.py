# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Functions for setting the metadata fields of a GenBank record.
"""

__name__ = "gbconvert.sequence.io.genbank"
__author__ = "The gbconvert contributors"
__all__ = [
    "format_date",
    "set_locus",
    "set_definition",
    "set_accession",
    "set_version",
    "set_db_link",
    "set_keywords",
    "set_source",
    "set_reference",
    "set_comment",
]

import datetime
from collections import OrderedDict
from ....file import wrap_words
from .file import HEADER_INDENT, LINE_WIDTH

_MONTHS = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)
# Width of the key column in structured comments
_STRUCTURED_KEY_WIDTH = 20


def format_date(date=None):
    """
    Format a date in the ``DD-MMM-YYYY`` style used in the *LOCUS*
    field.

    Parameters
    ----------
    date : date or datetime or str, optional
        The date.
        A string is returned as it is.
        By default the current date is used.

    Returns
    -------
    date_string : str
        The formatted date.

    Examples
    --------

    >>> print(format_date(datetime.date(2024, 3, 7)))
    07-MAR-2024
    """
    if isinstance(date, str):
        return date
    if date is None:
        date = datetime.date.today()
    return f"{date.day:02d}-{_MONTHS[date.month - 1]}-{date.year:04d}"


def set_locus(gb_file, name, length, mol_type="DNA", topology="linear",
              division="UNC", date=None):
    """
    Set the *LOCUS* field of a GenBank record.

    The fields are placed at the fixed columns of the classic GenBank
    layout:
    The name occupies columns 13-28 (truncated to 16 characters),
    the length is right-justified in columns 30-40, followed by ``bp``,
    the molecule type at columns 48-53, the topology at columns 56-63,
    the division at columns 65-67 and the date at columns 69-79.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    name : str
        The locus name.
    length : int
        Sequence length.
    mol_type : str, optional
        The molecule type, e.g. ``'DNA'`` or ``'mRNA'``.
    topology : {'linear', 'circular'}, optional
        The topology of the sequence.
    division : str, optional
        The GenBank division to which the record belongs.
    date : date or str, optional
        The date of last modification.
        By default the current date is used.

    Examples
    --------

    >>> file = GenBankFile()
    >>> set_locus(file, "seq1", 9, date="01-JAN-2024")
    >>> print(file.lines[0])
    LOCUS       seq1                       9 bp    DNA     linear   UNC 01-JAN-2024
    """
    name = name.replace(" ", "_")[:16]
    mol_type = "" if mol_type is None else mol_type[:6]
    topology = "" if topology is None else topology[:8]
    division = "" if division is None else division[:3]
    line = (
        f"{name:<16} {length:>11} bp    {mol_type:<6}  "
        f"{topology:<8} {division:<3} {format_date(date)}"
    )
    gb_file.append("LOCUS", [line])


def set_definition(gb_file, definition):
    """
    Set the *DEFINITION* field of a GenBank record.

    A terminal period is added, if it is missing.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    definition : str
        The description of the sequence.
    """
    definition = definition.strip()
    if not definition.endswith("."):
        definition += "."
    gb_file.append("DEFINITION", _wrap(definition))


def set_accession(gb_file, accession):
    """
    Set the *ACCESSION* field of a GenBank record.
    """
    gb_file.append("ACCESSION", [accession])


def set_version(gb_file, version):
    """
    Set the *VERSION* field of a GenBank record.
    """
    gb_file.append("VERSION", [version])


def set_db_link(gb_file, links):
    """
    Set the *DBLINK* field of a GenBank record.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    links : dict of (str -> str)
        The cross references, e.g. ``{"BioProject": "PRJNA20713"}``.
        If the dictionary is empty, no field is added.
    """
    if len(links) == 0:
        return
    gb_file.append(
        "DBLINK", [f"{database}: {uid}" for database, uid in links.items()]
    )


def set_keywords(gb_file, keywords=None):
    """
    Set the *KEYWORDS* field of a GenBank record.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    keywords : str or iterable object of str, optional
        The keywords.
        If omitted, the field contains only a period.
    """
    if keywords is None or len(keywords) == 0:
        text = "."
    elif isinstance(keywords, str):
        text = keywords
    else:
        text = "; ".join(keywords)
    if not text.endswith("."):
        text += "."
    gb_file.append("KEYWORDS", _wrap(text))


def set_source(gb_file, organism=None, taxonomy=None):
    """
    Set the *SOURCE* field of a GenBank record, including the
    *ORGANISM* subfield with the taxonomic lineage.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    organism : str, optional
        The source organism.
        If omitted, a period is used as placeholder.
    taxonomy : iterable object of str, optional
        The taxonomic lineage.
        If omitted, the lineage is ``'Unclassified.'``.

    Examples
    --------

    >>> file = GenBankFile()
    >>> set_source(file, "Homo sapiens", ["Eukaryota", "Metazoa"])
    >>> print(file)
    SOURCE      Homo sapiens
      ORGANISM  Homo sapiens
                Eukaryota; Metazoa.
    //
    """
    if not organism:
        organism = "."
    if taxonomy:
        lineage = "; ".join(taxonomy)
        if not lineage.endswith("."):
            lineage += "."
    else:
        lineage = "Unclassified."
    gb_file.append(
        "SOURCE", _wrap(organism),
        OrderedDict([("ORGANISM", _wrap(organism) + _wrap(lineage))]),
    )


def set_reference(gb_file, reference, number=None):
    """
    Append a *REFERENCE* field to a GenBank record.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    reference : ReferenceInfo
        The literature reference.
    number : int, optional
        The reference number, used if the reference does not give one.
    """
    if reference.number is not None:
        number = reference.number
    content = "" if number is None else str(number)
    if reference.base_range:
        content += "  " + reference.base_range
    subfields = OrderedDict()
    if reference.authors:
        subfields["AUTHORS"] = _wrap(", ".join(reference.authors))
    if reference.title:
        subfields["TITLE"] = _wrap(reference.title)
    if reference.journal:
        subfields["JOURNAL"] = _wrap(reference.journal)
    if reference.pubmed:
        subfields["PUBMED"] = [str(reference.pubmed)]
    gb_file.append("REFERENCE", [content.strip()], subfields)


def set_comment(gb_file, comment=None, structured=None):
    """
    Set the *COMMENT* field of a GenBank record.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    comment : str, optional
        Free text.
        Line breaks in the text are kept.
    structured : dict of (str -> dict of (str -> str)), optional
        Structured comments.
        Each entry is written as a block enclosed by
        ``##<name>-START##`` and ``##<name>-END##``.

    Examples
    --------

    >>> file = GenBankFile()
    >>> set_comment(
    ...     file, "Annotated automatically.",
    ...     {"Assembly-Data": {"Assembly Method": "SPAdes v. 3.15"}}
    ... )
    >>> print(file)
    COMMENT     Annotated automatically.
    <BLANKLINE>
                ##Assembly-Data-START##
                Assembly Method     :: SPAdes v. 3.15
                ##Assembly-Data-END##
    //
    """
    lines = []
    if comment:
        for paragraph in comment.splitlines():
            lines += _wrap(paragraph)
    if structured:
        for block_name, entries in structured.items():
            if len(entries) == 0:
                continue
            # Empty line separates blocks
            if len(lines) > 0:
                lines.append("")
            lines.append(f"##{block_name}-START##")
            for key, value in entries.items():
                lines += _wrap(
                    f"{key:<{_STRUCTURED_KEY_WIDTH}}:: {value}"
                )
            lines.append(f"##{block_name}-END##")
    if len(lines) == 0:
        return
    gb_file.append("COMMENT", lines)


def _wrap(text):
    return wrap_words(str(text), LINE_WIDTH - HEADER_INDENT)
