# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This module contains convenience functions for loading sequences and
annotations from files of any supported format, without the need to
manually instantiate a :class:`TextFile` object.
"""

__name__ = "gbconvert.sequence.io"
__author__ = "The gbconvert contributors"
__all__ = [
    "SEQUENCE_FORMATS",
    "ANNOTATION_FORMATS",
    "normalize_format",
    "load_sequences",
    "load_annotations",
]

from ...exceptions import InvalidFileFormatError
from .detect import UNKNOWN, detect_format

SEQUENCE_FORMATS = ("FASTA",)
ANNOTATION_FORMATS = ("GFF3", "GTF", "BED", "VCF", "FASTA")


def normalize_format(format):
    """
    Convert a format label into its canonical upper case form.

    ``'GFF'`` is accepted as alias of ``'GFF3'``.

    Parameters
    ----------
    format : str
        The format label.

    Returns
    -------
    format : str
        The canonical format label.
    """
    format = format.strip().upper()
    if format == "GFF":
        return "GFF3"
    return format


def load_sequences(file, format=None, molecule_type=None):
    """
    Load the sequences from a sequence file.

    Parameters
    ----------
    file : file-like object or str
        The file to be read.
        Alternatively a file path can be supplied.
    format : str, optional
        The format of the file.
        By default, the format is detected via :func:`detect_format()`.
    molecule_type : str, optional
        The molecule type of sequences, that do not specify it
        themselves.

    Returns
    -------
    sequence_data : SequenceData
        The sequences in the order of the file.

    Raises
    ------
    InvalidFileFormatError
        If the format is not a supported sequence format.
    """
    format = detect_format(file) if format is None \
        else normalize_format(format)
    if format == "FASTA":
        from .fasta import FastaFile, get_sequences
        return get_sequences(FastaFile.read(file), molecule_type)
    raise InvalidFileFormatError(
        _unsupported_message("sequence", format), format
    )


def load_annotations(file, format=None):
    """
    Load the annotations from an annotation file.

    Parameters
    ----------
    file : file-like object or str
        The file to be read.
        Alternatively a file path can be supplied.
    format : str, optional
        The format of the file, one of ``'GFF3'`` (or ``'GFF'``),
        ``'GTF'``, ``'BED'``, ``'VCF'`` or ``'FASTA'``.
        FASTA files are read as gene locations in their headers,
        see :func:`gbconvert.sequence.io.fasta.get_annotations()`.
        By default, the format is detected via :func:`detect_format()`.

    Returns
    -------
    annotation_data : AnnotationData
        The annotations with 0-based, half-open coordinates.

    Raises
    ------
    InvalidFileFormatError
        If the format is not a supported annotation format.
    ParsingError
        If a line of the file is malformed.
    """
    format = detect_format(file) if format is None \
        else normalize_format(format)
    if format in ("GFF3", "GTF"):
        from .gff import GFFFile, get_annotations
        return get_annotations(GFFFile.read(file, format))
    elif format == "BED":
        from .bed import BedFile, get_annotations
        return get_annotations(BedFile.read(file))
    elif format == "VCF":
        from .vcf import VcfFile, get_annotations
        return get_annotations(VcfFile.read(file))
    elif format == "FASTA":
        from .fasta import FastaFile, get_annotations
        return get_annotations(FastaFile.read(file))
    raise InvalidFileFormatError(
        _unsupported_message("annotation", format), format
    )


def _unsupported_message(kind, format):
    if format == UNKNOWN:
        return f"The {kind} file format could not be detected"
    return f"'{format}' is not a supported {kind} file format"
