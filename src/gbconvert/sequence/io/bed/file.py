# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.bed"
__author__ = "The gbconvert contributors"
__all__ = ["BedFile"]

import warnings
from ....exceptions import ParsingError
from ....file import TextFile, _name
from ...annotation import Strand

# Only the first six columns are evaluated
_SUPPORTED_COLUMNS = 6


class BedFile(TextFile):
    """
    This class represents a file in the
    `BED <https://genome.ucsc.edu/FAQ/FAQformat.html#format1>`_ format.

    The file is used as a sequence of entries, where each entry is a
    line that is neither empty, a comment nor a *track* or *browser*
    line.
    Each entry consists of the values of the first six columns:

    ==============  =====================  ===========================================
    **chrom**       ``str``                The ID of the reference sequence
    **start**       ``int``                0-based start coordinate
    **end**         ``int``                0-based exclusive end coordinate
    **name**        ``str`` or ``None``    The name of the interval
    **score**       ``str`` or ``None``    The score of the interval
    **strand**      ``Strand``             The strand of the interval
    ==============  =====================  ===========================================

    Further columns (e.g. *thickStart* or *blockSizes*) are not
    supported:
    If a file contains them, a warning is raised when the file is read.

    Examples
    --------

    >>> from io import StringIO
    >>> bed_file = BedFile.read(StringIO("track name=test\\nchr1\\t9\\t20\\tpeak1\\t0\\t-\\n"))
    >>> print(bed_file[0])
    ('chr1', 9, 20, 'peak1', '0', <Strand.REVERSE: -1>)
    """

    def __init__(self):
        super().__init__()
        self._file_name = None
        self._entries = []

    @classmethod
    def read(cls, file):
        """
        Read a BED file.

        Parameters
        ----------
        file : file-like object or str
            The file to be read.
            Alternatively a file path can be supplied.

        Returns
        -------
        file_object : BedFile
            The parsed file.
        """
        file_object = super().read(file)
        file_object._file_name = _name(file)
        file_object._index_entries()
        return file_object

    def line_number(self, index):
        """
        Get the 1-based line number of an entry.
        """
        return self._entries[index] + 1

    def __getitem__(self, index):
        line_index = self._entries[index]
        columns = self.lines[line_index].rstrip().split("\t")
        if len(columns) < 3:
            raise ParsingError(
                f"Expected at least 3 columns, but got {len(columns)}",
                "BED", self._file_name, line_index + 1
            )
        chrom = columns[0]
        try:
            start = int(columns[1])
            end = int(columns[2])
        except ValueError:
            raise ParsingError(
                f"Invalid coordinates '{columns[1]}' and '{columns[2]}'",
                "BED", self._file_name, line_index + 1
            ) from None
        name = _optional(columns, 3)
        score = _optional(columns, 4)
        try:
            strand = Strand.parse(_optional(columns, 5))
        except ValueError:
            raise ParsingError(
                f"Invalid strand '{columns[5]}'",
                "BED", self._file_name, line_index + 1
            ) from None
        return chrom, start, end, name, score, strand

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def _index_entries(self):
        self._entries = []
        max_columns = 0
        for line_i, line in enumerate(self.lines):
            if len(line.strip()) == 0 or line.startswith("#") \
                    or line.startswith("track") or line.startswith("browser"):
                continue
            self._entries.append(line_i)
            max_columns = max(max_columns, len(line.rstrip().split("\t")))
        if max_columns > _SUPPORTED_COLUMNS:
            warnings.warn(
                f"Only the first {_SUPPORTED_COLUMNS} BED columns are "
                f"supported, the remaining {max_columns - _SUPPORTED_COLUMNS} "
                f"column(s) are ignored",
                UserWarning
            )


def _optional(columns, index):
    """
    Get the value of an optional column, ``None`` if it is missing or a
    placeholder.
    """
    if index >= len(columns):
        return None
    value = columns[index].strip()
    if value in ("", "."):
        return None
    return value
