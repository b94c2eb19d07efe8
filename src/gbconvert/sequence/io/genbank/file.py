# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.genbank"
__author__ = "The gbconvert contributors"
__all__ = ["GenBankFile"]

from collections import OrderedDict
from ....file import TextFile

# Column at which the content of header fields starts
HEADER_INDENT = 12
# Maximum width of a line
LINE_WIDTH = 79


class GenBankFile(TextFile):
    """
    A single GenBank record, assembled field by field.

    Each field is written with its name in the first column and its
    content starting at column 13.
    Content that spans multiple lines continues at the same column.
    Subfields, like *ORGANISM* within *SOURCE*, follow their parent
    field with the name indented by two spaces.
    A field name may be used more than once, as for the *REFERENCE*
    blocks.
    The *FEATURES* and *ORIGIN* fields are exceptions:
    their content lines are already formatted and are written below
    the field header as they are.

    :attr:`lines` always ends with the ``//`` terminator, new fields
    are inserted in front of it.

    Examples
    --------

    >>> file = GenBankFile()
    >>> file.append(
    ...     "SOMEFIELD", ["One line", "A second line"],
    ...     subfields={"SUBFIELD1": ["Single Line"], "SUBFIELD2": ["Two", "lines"]}
    ... )
    >>> print(file)
    SOMEFIELD   One line
                A second line
      SUBFIELD1 Single Line
      SUBFIELD2 Two
                lines
    //
    >>> content, subfields = file.get_fields("SOMEFIELD")[0]
    >>> print(content)
    ['One line', 'A second line']
    """

    def __init__(self):
        super().__init__()
        self.lines = ["//"]
        # (name, content, subfields) in order of insertion
        self._fields = []

    def get_fields(self, name):
        """
        Find the fields with the given name.

        Parameters
        ----------
        name : str
            The field name, case-insensitive.

        Returns
        -------
        fields : list of (list of str, OrderedDict of str -> list of str)
            The content lines and subfields of each matching field, in
            the order they were appended.
            Fields without subfields have an empty dictionary.
        """
        name = name.upper()
        return [
            (content, subfields)
            for field_name, content, subfields in self._fields
            if field_name == name
        ]

    def append(self, name, content, subfields=None):
        """
        Add a field to the end of the record.

        Parameters
        ----------
        name : str
            The field name.
            It is converted to upper case.
        content : iterable object of str
            The content lines.
        subfields : dict of str -> list of str, optional
            The subfields, mapping each subfield name to its content
            lines.
        """
        name = name.strip().upper()
        if len(name) == 0:
            raise ValueError("Must give a non empty name")
        content = list(content)
        subfields = OrderedDict(
            (key.strip().upper(), list(value))
            for key, value in (subfields or {}).items()
        )
        self.lines[-1:-1] = self._render(name, content, subfields)
        self._fields.append((name, content, subfields))

    def __len__(self):
        return len(self._fields)

    def __iter__(self):
        return iter(self._fields)

    @staticmethod
    def _render(name, content, subfields):
        if name == "FEATURES":
            return ["FEATURES" + " " * 13 + "Location/Qualifiers"] + content
        if name == "ORIGIN":
            return ["ORIGIN"] + content
        rows = _field_rows(name, content)
        for key, value in subfields.items():
            rows += _field_rows("  " + key, value)
        return [
            f"{label:{HEADER_INDENT}}{text}".rstrip() for label, text in rows
        ]


def _field_rows(label, content):
    """
    Pair the label with the first content line and empty labels with
    the following ones.
    """
    if len(content) == 0:
        return [(label, "")]
    return [(label, content[0])] + [("", line) for line in content[1:]]
