# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This module detects the format of sequence and annotation files, based
on their file extension and their content.
"""

__name__ = "gbconvert.sequence.io"
__author__ = "The gbconvert contributors"
__all__ = [
    "UNKNOWN",
    "FormatDetector",
    "FastaDetector",
    "GFF3Detector",
    "GTFDetector",
    "BedDetector",
    "VcfDetector",
    "GenBankDetector",
    "DEFAULT_DETECTORS",
    "detect_format",
]

import abc
import itertools
import os.path
import re
from ...exceptions import FileProcessingError
from ...file import TextFile, is_open_compatible

UNKNOWN = "UNKNOWN"

# Number of non-empty lines inspected for content sniffing
_SNIFF_LINES = 20

_GTF_ATTRIBUTE_PATTERN = re.compile(r'gene_id\s+"[^"]*"')


class FormatDetector(metaclass=abc.ABCMeta):
    """
    Base class for the detection of a single file format.

    A detector can recognize a file by its extension and by its content.
    Subclasses define the :attr:`label` of the format, the recognized
    :attr:`extensions` and implement :meth:`sniff()`.
    """

    label = None
    extensions = ()

    def matches_extension(self, file_name):
        """
        Check whether a file name has one of the extensions of this
        format.

        Parameters
        ----------
        file_name : str
            The file name or path.

        Returns
        -------
        match : bool
            True, if the extension matches (case-insensitive).
        """
        _, suffix = os.path.splitext(file_name)
        return suffix[1:].lower() in self.extensions

    @abc.abstractmethod
    def sniff(self, lines):
        """
        Check whether the given lines look like this format.

        Parameters
        ----------
        lines : list of str
            The first non-empty lines of the file, without line breaks.

        Returns
        -------
        match : bool
            True, if the content is recognized.
        """
        pass


class FastaDetector(FormatDetector):
    label = "FASTA"
    extensions = ("fa", "fasta", "fna", "faa", "ffn")

    def sniff(self, lines):
        return len(lines) > 0 and lines[0].lstrip().startswith(">")


class GFF3Detector(FormatDetector):
    label = "GFF3"
    extensions = ("gff", "gff3")

    def sniff(self, lines):
        for line in lines:
            if line.startswith("##gff-version"):
                return True
        for line in _data_lines(lines):
            columns = line.split("\t")
            if len(columns) >= 8 \
                    and columns[3].isdigit() and columns[4].isdigit() \
                    and _GTF_ATTRIBUTE_PATTERN.search(line) is None:
                return True
        return False


class GTFDetector(FormatDetector):
    label = "GTF"
    extensions = ("gtf",)

    def sniff(self, lines):
        for line in _data_lines(lines):
            if _GTF_ATTRIBUTE_PATTERN.search(line) is not None:
                return True
        return False


class BedDetector(FormatDetector):
    label = "BED"
    extensions = ("bed",)

    def sniff(self, lines):
        for line in _data_lines(lines):
            if line.startswith(("track", "browser")):
                continue
            columns = line.split("\t")
            if len(columns) >= 3 \
                    and columns[1].isdigit() and columns[2].isdigit():
                return True
            # Only the first data line is decisive
            return False
        return False


class VcfDetector(FormatDetector):
    label = "VCF"
    extensions = ("vcf",)

    def sniff(self, lines):
        for line in lines:
            if line.startswith("##fileformat=VCF") \
                    or line.startswith("#CHROM\tPOS\tID\tREF\tALT"):
                return True
        return False


class GenBankDetector(FormatDetector):
    label = "GENBANK"
    extensions = ("gb", "gbk", "genbank")

    def sniff(self, lines):
        for line in lines:
            if line.startswith("LOCUS"):
                return True
        return False


# The order determines the priority of the detectors
DEFAULT_DETECTORS = (
    FastaDetector(),
    VcfDetector(),
    # GTF lines are also valid GFF lines
    GTFDetector(),
    GFF3Detector(),
    BedDetector(),
    GenBankDetector(),
)


def detect_format(file, file_name=None, detectors=DEFAULT_DETECTORS):
    """
    Detect the format of a sequence or annotation file.

    The detection runs in two passes:
    First, only detectors whose extensions match the file name are
    asked to confirm the format by inspecting the content.
    If none of them does, every detector inspects the content,
    in the given order.

    Parameters
    ----------
    file : file-like object or str
        The file to be inspected.
        Alternatively a file path can be supplied.
        The position of the file object is restored afterwards.
    file_name : str, optional
        The file name used for the extension pass.
        By default, the path given in `file` or the ``name`` attribute
        of the file object is used.
    detectors : iterable object of FormatDetector, optional
        The detectors in the order of their priority.

    Returns
    -------
    format : str
        The label of the detected format, e.g. ``'GFF3'``, or
        :const:`UNKNOWN`.

    Raises
    ------
    FileProcessingError
        If the file cannot be read or is a file object that is not
        seekable, e.g. a pipe.

    Examples
    --------

    >>> from io import StringIO
    >>> print(detect_format(StringIO(">seq1\\nATGC\\n")))
    FASTA
    >>> print(detect_format(StringIO("chr1\\t10\\t20\\n"), "peaks.bed"))
    BED
    >>> print(detect_format(StringIO("Hello world\\n")))
    UNKNOWN
    """
    if file_name is None:
        if is_open_compatible(file):
            file_name = os.fsdecode(file)
        else:
            file_name = getattr(file, "name", None)
            if not isinstance(file_name, str):
                file_name = None
    lines = _peek_lines(file, _SNIFF_LINES)

    if file_name is not None:
        for detector in detectors:
            if detector.matches_extension(file_name) and detector.sniff(lines):
                return detector.label
    for detector in detectors:
        if detector.sniff(lines):
            return detector.label
    return UNKNOWN


def _peek_lines(file, number):
    """
    Read the first non-empty lines of a file.
    """
    if is_open_compatible(file):
        line_iter = TextFile.read_iter(file)
        try:
            return _non_empty(line_iter, number)
        finally:
            # Closes the underlying file
            line_iter.close()
    if not file.seekable():
        # The inspected lines would be missing for the parser
        name = getattr(file, "name", None)
        raise FileProcessingError(
            "The format of a non-seekable file object cannot be detected, "
            "read it into memory or give the format explicitly",
            name if isinstance(name, str) else None
        )
    position = file.tell()
    lines = _non_empty(TextFile.read_iter(file), number)
    file.seek(position)
    return lines


def _non_empty(line_iter, number):
    lines = (line.rstrip("\r\n") for line in line_iter)
    return list(itertools.islice(
        (line for line in lines if line.strip()), number
    ))


def _data_lines(lines):
    return (line for line in lines if not line.startswith("#"))
