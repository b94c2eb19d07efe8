# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Functions for writing a sequence into the *ORIGIN* field of a GenBank
record.
"""

__name__ = "gbconvert.sequence.io.genbank"
__author__ = "The gbconvert contributors"
__all__ = ["sequence_lines", "set_sequence"]

_SYMBOLS_PER_CHUNK = 10


def sequence_lines(sequence, line_width=60, lowercase=True, sequence_start=1):
    """
    Create the lines of the *ORIGIN* field lazily.

    Each line starts with the position of its first base, right-aligned
    to 9 characters, followed by the bases in chunks of 10.

    Parameters
    ----------
    sequence : str
        The sequence.
    line_width : int, optional
        The number of bases per line.
    lowercase : bool, optional
        If true, the sequence is written in lower case.
    sequence_start : int, optional
        The number of the first base of the sequence.

    Yields
    ------
    line : str
        The current line.

    Examples
    --------

    >>> for line in sequence_lines("ATGAAATAAC" * 7):
    ...     print(line)
            1 atgaaataac atgaaataac atgaaataac atgaaataac atgaaataac atgaaataac
           61 atgaaataac
    """
    if lowercase:
        sequence = sequence.lower()
    for i in range(0, len(sequence), line_width):
        line = f"{sequence_start + i:>9d}"
        chunk = sequence[i : i + line_width]
        for j in range(0, len(chunk), _SYMBOLS_PER_CHUNK):
            line += " " + chunk[j : j + _SYMBOLS_PER_CHUNK]
        yield line


def set_sequence(gb_file, sequence, line_width=60, lowercase=True,
                 sequence_start=1):
    """
    Set the *ORIGIN* field of a GenBank record with a sequence.

    Parameters
    ----------
    gb_file : GenBankFile
        The GenBank record to be edited.
    sequence : str
        The sequence that is put into the GenBank record.
        If the sequence is empty, the *ORIGIN* field has no content.
    line_width, lowercase, sequence_start
        See :func:`sequence_lines()`.
    """
    gb_file.append(
        "ORIGIN",
        sequence_lines(sequence, line_width, lowercase, sequence_start)
    )
