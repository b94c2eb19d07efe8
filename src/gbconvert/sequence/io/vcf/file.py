# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.vcf"
__author__ = "The gbconvert contributors"
__all__ = ["VcfFile"]

from ....exceptions import ParsingError
from ....file import TextFile, _name

_COLUMNS = ("CHROM", "POS", "ID", "REF", "ALT")


class VcfFile(TextFile):
    """
    This class represents a file in the
    `Variant Call Format <https://samtools.github.io/hts-specs/VCFv4.3.pdf>`_.

    The file is used as a sequence of records, i.e. all lines that are
    not part of the header.
    Each record consists of the values of the first five columns:

    ==============  =================  ============================================
    **chrom**       ``str``            The ID of the reference sequence
    **pos**         ``int``            1-based position of the first reference base
    **id**          ``str`` or None    The identifier of the variant
    **ref**         ``str``            The reference bases
    **alt**         ``list`` of str    The alternative alleles
    ==============  =================  ============================================

    Examples
    --------

    >>> from io import StringIO
    >>> text = "##fileformat=VCFv4.2\\nchr1\\t10\\trs1\\tAC\\tA,G\\t.\\t.\\t.\\n"
    >>> vcf_file = VcfFile.read(StringIO(text))
    >>> print(vcf_file.file_format)
    VCFv4.2
    >>> print(vcf_file[0])
    ('chr1', 10, 'rs1', 'AC', ['A', 'G'])
    """

    def __init__(self):
        super().__init__()
        self._file_name = None
        self._entries = []
        self._meta = []

    @classmethod
    def read(cls, file):
        """
        Read a VCF file.

        Parameters
        ----------
        file : file-like object or str
            The file to be read.
            Alternatively a file path can be supplied.

        Returns
        -------
        file_object : VcfFile
            The parsed file.
        """
        file_object = super().read(file)
        file_object._file_name = _name(file)
        file_object._index_entries()
        return file_object

    @property
    def file_format(self):
        """
        The version given in the ``##fileformat`` meta line or ``None``.
        """
        for key, value in self._meta:
            if key == "fileformat":
                return value
        return None

    def meta_information(self):
        """
        Get the meta-information lines.

        Returns
        -------
        meta : list of tuple(str, str)
            The key and value of each ``##key=value`` line.
        """
        return list(self._meta)

    def line_number(self, index):
        """
        Get the 1-based line number of a record.
        """
        return self._entries[index] + 1

    def __getitem__(self, index):
        line_index = self._entries[index]
        columns = self.lines[line_index].rstrip().split("\t")
        if len(columns) < len(_COLUMNS):
            raise ParsingError(
                f"Expected at least {len(_COLUMNS)} columns, "
                f"but got {len(columns)}",
                "VCF", self._file_name, line_index + 1
            )
        chrom, pos, id, ref, alt = columns[: len(_COLUMNS)]
        try:
            pos = int(pos)
        except ValueError:
            raise ParsingError(
                f"Invalid position '{pos}'",
                "VCF", self._file_name, line_index + 1
            ) from None
        if pos < 1 or len(ref) == 0 or ref == ".":
            raise ParsingError(
                "Record has no valid reference allele",
                "VCF", self._file_name, line_index + 1
            )
        id = None if id == "." else id
        alt = [] if alt == "." else alt.split(",")
        return chrom, pos, id, ref, alt

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def _index_entries(self):
        self._entries = []
        self._meta = []
        for line_i, line in enumerate(self.lines):
            if len(line.strip()) == 0:
                continue
            if line.startswith("##"):
                key, _, value = line[2:].partition("=")
                self._meta.append((key, value))
            elif line.startswith("#"):
                # Column header line
                continue
            else:
                self._entries.append(line_i)
