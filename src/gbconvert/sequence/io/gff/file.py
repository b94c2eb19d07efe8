# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.gff"
__author__ = "The gbconvert contributors"
__all__ = ["GFFFile"]

import re
import warnings
from urllib.parse import unquote
from ....exceptions import ParsingError
from ....file import TextFile, _name
from ...annotation import Strand

# Attribute entries in GTF files, e.g. 'gene_id "ENSG00000223972";'
_GTF_ATTRIBUTE_PATTERN = re.compile(r'\s*([^\s;]+)\s+(?:"([^"]*)"|([^;\s]+))\s*')


class GFFFile(TextFile):
    """
    This class represents a file in *Generic Feature Format 3*
    (`GFF3 <https://github.com/The-Sequence-Ontology/Specifications/blob/master/gff3.md>`_)
    or in *Gene Transfer Format* (GTF).

    Both formats share the first eight tab separated columns and differ
    only in the syntax of the *attributes* column.

    This class is used as a sequence of entries, where each entry is
    defined as a non-comment and non-directive line.
    Each entry consists of values corresponding to the 9 columns:

    ==============  =======================  ==============================================
    **seqid**       ``str``                  The ID of the reference sequence
    **source**      ``str``                  Source of the data (e.g. ``Genbank``)
    **type**        ``str``                  Type of the feature (e.g. ``CDS``)
    **start**       ``int``                  1-based start coordinate of the feature
    **end**         ``int``                  1-based inclusive end coordinate
    **score**       ``float`` or ``None``    Optional score (e.g. an E-value)
    **strand**      ``Strand``               Strand of the feature
    **phase**       ``int`` or ``None``      Reading frame shift, ``None`` for non-CDS features
    **attributes**  ``list`` of ``tuple``    Additional properties as key-value pairs
    ==============  =======================  ==============================================

    Note that the entry index may not be equal to the line index,
    because the files can contain comment and directive lines.

    Notes
    -----
    The GFF3 specification allows mixing in reference sequence data in
    FASTA format via the ``##FASTA`` directive.
    This class does not support extracting the sequence information:
    The content after the ``##FASTA`` directive is ignored and a
    warning is raised.

    Parameters
    ----------
    format : {'GFF3', 'GTF'}, optional
        The dialect of the file.

    Examples
    --------

    >>> from io import StringIO
    >>> text = "##gff-version 3\\nseq1\\t.\\tgene\\t1\\t90\\t.\\t+\\t.\\tID=g1;Name=nad1\\n"
    >>> gff_file = GFFFile.read(StringIO(text))
    >>> seqid, source, type, start, end, score, strand, phase, attrib = gff_file[0]
    >>> print(seqid, type, start, end, strand.symbol)
    seq1 gene 1 90 +
    >>> print(attrib)
    [('ID', 'g1'), ('Name', 'nad1')]
    """

    def __init__(self, format="GFF3"):
        super().__init__()
        format = format.upper()
        if format == "GFF":
            format = "GFF3"
        if format not in ("GFF3", "GTF"):
            raise ValueError(f"Unknown GFF dialect '{format}'")
        self._format = format
        self._file_name = None
        # Maps entry indices to line indices
        self._entries = []
        # Stores the directives as (directive text, line index)-tuple
        self._directives = []

    @classmethod
    def read(cls, file, format="GFF3"):
        """
        Read a GFF3 or GTF file.

        Parameters
        ----------
        file : file-like object or str
            The file to be read.
            Alternatively a file path can be supplied.
        format : {'GFF3', 'GTF'}, optional
            The dialect of the file.

        Returns
        -------
        file_object : GFFFile
            The parsed file.
        """
        file_object = super().read(file, format)
        file_object._file_name = _name(file)
        file_object._index_entries()
        return file_object

    @property
    def format(self):
        return self._format

    def directives(self):
        """
        Get the directives in the file.

        Returns
        -------
        directives : list of tuple(str, int)
            A list of directives, sorted by their line order.
            The first element of each tuple is the name of the
            directive (without ``##``), the second element is the index
            of the corresponding line.
        """
        return sorted(self._directives, key=lambda directive: directive[1])

    def line_number(self, index):
        """
        Get the 1-based line number of an entry.

        Parameters
        ----------
        index : int
            The entry index.

        Returns
        -------
        line_number : int
            The line number.
        """
        return self._entries[index] + 1

    def __getitem__(self, index):
        if (index >= 0 and index >= len(self)) or \
           (index < 0 and -index > len(self)):
            raise IndexError(
                f"Index {index} is out of range for GFFFile with "
                f"{len(self)} entries"
            )
        line_index = self._entries[index]
        try:
            return self._parse_line(self.lines[line_index])
        except ParsingError as e:
            raise ParsingError(
                str(e), self._format, self._file_name, line_index + 1
            ) from None

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def _index_entries(self):
        """
        Parse the file for comment and directive lines.
        Count these lines cumulatively, so that entry indices can be
        mapped onto line indices.
        Additionally track the line index of directive lines.
        """
        self._directives = []
        self._entries = []
        for line_i, line in enumerate(self.lines):
            if len(line.strip()) == 0:
                continue
            elif line.startswith("#"):
                if line.startswith("##"):
                    # Omit the leading '##'
                    directive = line[2:].strip()
                    self._directives.append((directive, line_i))
                    if directive == "FASTA":
                        warnings.warn(
                            "FASTA data mixed into GFF files is not "
                            "supported, the FASTA data will be ignored",
                            UserWarning
                        )
                        # To ignore the following FASTA data, stop
                        # parsing at this point
                        break
            else:
                self._entries.append(line_i)

    def _parse_line(self, line):
        # Columns are tab separated
        s = line.rstrip("\n").split("\t")
        if len(s) == 8:
            s.append("")
        if len(s) != 9:
            raise ParsingError(f"Expected 9 columns, but got {len(s)}")
        seqid, source, type, start, end, score, strand, phase, attrib = s
        try:
            start = int(start)
            end = int(end)
        except ValueError:
            raise ParsingError(
                f"Invalid coordinates '{start}' and '{end}'"
            ) from None
        try:
            score = None if score == "." else float(score)
        except ValueError:
            raise ParsingError(f"Invalid score '{score}'") from None
        try:
            strand = Strand.parse(strand)
        except ValueError:
            raise ParsingError(f"Invalid strand '{strand}'") from None
        if phase == ".":
            phase = None
        elif phase in ("0", "1", "2"):
            phase = int(phase)
        else:
            raise ParsingError(f"Invalid phase '{phase}'")
        if self._format == "GTF":
            attrib = _parse_gtf_attributes(attrib)
        else:
            seqid = unquote(seqid)
            source = unquote(source)
            type = unquote(type)
            attrib = _parse_gff3_attributes(attrib)
        return seqid, source, type, start, end, score, strand, phase, attrib


def _parse_gff3_attributes(attributes):
    """
    Parse the *attributes* column of GFF3 into key-value pairs.
    Comma separated values are split into multiple pairs.
    """
    pairs = []
    attributes = attributes.strip()
    if attributes in ("", "."):
        return pairs
    for entry in attributes.split(";"):
        if len(entry.strip()) == 0:
            # Trailing semicolon
            continue
        compounds = entry.split("=", 1)
        if len(compounds) != 2:
            raise ParsingError(f"Attribute entry '{entry}' is invalid")
        key, val = compounds
        key = unquote(key.strip())
        for value in val.split(","):
            pairs.append((key, unquote(value.strip())))
    return pairs


def _parse_gtf_attributes(attributes):
    """
    Parse the *attributes* column of GTF into key-value pairs.
    """
    pairs = []
    attributes = attributes.strip()
    if attributes in ("", "."):
        return pairs
    for entry in attributes.split(";"):
        if len(entry.strip()) == 0:
            continue
        match = _GTF_ATTRIBUTE_PATTERN.fullmatch(entry)
        if match is None:
            raise ParsingError(f"Attribute entry '{entry.strip()}' is invalid")
        key, quoted, unquoted = match.groups()
        pairs.append((key, quoted if quoted is not None else unquoted))
    return pairs
