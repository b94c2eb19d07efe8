# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.fasta"
__author__ = "The gbconvert contributors"
__all__ = ["FastaFile"]

from collections import OrderedDict
from collections.abc import Mapping
from ....exceptions import ParsingError
from ....file import TextFile, _name


class FastaFile(TextFile, Mapping):
    """
    A nucleotide sequence file in FASTA format.

    Each record begins with a header line, marked by a leading ``>``,
    followed by any number of sequence lines up to the next header.
    Blank lines and comment lines starting with ``;`` are ignored.

    The records are accessible as a read-only :class:`Mapping`:
    the header text after the ``>`` is the key and the concatenated
    sequence lines are the value.

    Examples
    --------

    >>> from io import StringIO
    >>> file = FastaFile.read(StringIO(">seq1 first\\nATAC\\nTT\\n>seq2\\nGG\\n"))
    >>> print(dict(file.items()))
    {'seq1 first': 'ATACTT', 'seq2': 'GG'}
    """

    def __init__(self):
        super().__init__()
        self._records = OrderedDict()

    @classmethod
    def read(cls, file):
        """
        Read a FASTA file.

        Parameters
        ----------
        file : file-like object or str
            The FASTA file or its path.

        Returns
        -------
        file_object : FastaFile
            The parsed file.

        Raises
        ------
        ParsingError
            If sequence data appears before the first header or a
            header is empty or occurs twice.
        """
        file_object = super().read(file)
        file_object._index_records(_name(file))
        return file_object

    def __getitem__(self, header):
        if not isinstance(header, str):
            raise IndexError(
                "'FastaFile' only supports header strings as keys"
            )
        first, last = self._records[header]
        return "".join(
            line.strip() for line in self.lines[first + 1 : last]
            if not _is_skipped(line)
        )

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records)

    def __contains__(self, header):
        return header in self._records

    def _index_records(self, file_name=None):
        """
        Map each header to the range of lines its record occupies.
        """
        self._records = OrderedDict()
        header = None
        for line_i, line in enumerate(self.lines):
            if _is_skipped(line):
                continue
            if line.lstrip().startswith(">"):
                if header is not None:
                    self._records[header] = (first, line_i)
                header = _check_header(
                    line.strip()[1:], self._records, file_name, line_i
                )
                first = line_i
            elif header is None:
                raise ParsingError(
                    "Sequence data before the first header",
                    "FASTA", file_name, line_i + 1
                )
        if header is not None:
            self._records[header] = (first, len(self.lines))

    @staticmethod
    def read_iter(file):
        """
        Iterate over the records of a FASTA file without keeping the
        whole file in memory.

        Parameters
        ----------
        file : file-like object or str
            The FASTA file or its path.

        Yields
        ------
        header : str
            The header of the record, without the leading ``>``.
        sequence : str
            The sequence of the record.
        """
        header = None
        seen = set()
        chunks = []
        for line_i, line in enumerate(TextFile.read_iter(file)):
            line = line.strip()
            if _is_skipped(line):
                continue
            if line.startswith(">"):
                if header is not None:
                    yield header, "".join(chunks)
                header = _check_header(line[1:], seen, _name(file), line_i)
                seen.add(header)
                chunks = []
            elif header is None:
                raise ParsingError(
                    "Sequence data before the first header",
                    "FASTA", _name(file), line_i + 1
                )
            else:
                chunks.append(line)
        if header is not None:
            yield header, "".join(chunks)


def _is_skipped(line):
    line = line.strip()
    return len(line) == 0 or line.startswith(";")


def _check_header(header, previous_headers, file_name, line_i):
    if len(header.strip()) == 0:
        raise ParsingError("Empty header", "FASTA", file_name, line_i + 1)
    if header in previous_headers:
        raise ParsingError(
            f"Duplicate header '>{header}'", "FASTA", file_name, line_i + 1
        )
    return header
