# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Translation of coding regions into protein sequences.
"""

__name__ = "gbconvert.sequence"
__author__ = "The gbconvert contributors"
__all__ = [
    "reverse_complement",
    "extract_segments",
    "translate",
    "find_internal_stops",
]

import numpy as np
from .annotation import Strand
from .codon import get_codon_table

_COMPLEMENT = str.maketrans("ACGTUacgtu", "TGCAAtgcaa")


def reverse_complement(nucleotides):
    """
    Get the reverse complement of a nucleotide sequence.

    The case of each symbol is kept and ``'U'`` is complemented to
    ``'A'``.
    Any other symbol is kept as it is.

    Parameters
    ----------
    nucleotides : str
        The nucleotide sequence.

    Returns
    -------
    reverse_complement : str
        The reverse complement.

    Examples
    --------

    >>> print(reverse_complement("ATGcN"))
    NgCAT
    """
    return nucleotides.translate(_COMPLEMENT)[::-1]


def extract_segments(nucleotides, segments):
    """
    Concatenate the given regions of a sequence.

    Parameters
    ----------
    nucleotides : str
        The complete sequence.
    segments : iterable object of tuple(int, int)
        The 0-based half-open regions, in ascending order.

    Returns
    -------
    concatenated : str
        The concatenated regions, always in forward direction.
    """
    return "".join(nucleotides[start:end] for start, end in segments)


def translate(nucleotides, strand=Strand.FORWARD, start_offset=0, table=None,
              options=None):
    """
    Translate a coding region into a protein sequence.

    The translation starts at `start_offset` and proceeds codon by
    codon, while a trailing partial codon is ignored.
    If the first codon is a start codon of the genetic code, it is
    translated into ``'M'``, even if it codes for another amino acid
    elsewhere, e.g. ``'ATT'`` in the *Invertebrate Mitochondrial*
    code.
    The translation stops at the first stop codon, unless
    `options.allow_internal_stop_codons` is set:
    In this case internal stop codons are written as ``'*'`` and only
    a stop codon at the last position stops the translation.
    A stop codon, at which the translation stops, is only included in
    the protein sequence if `options.include_stop_codon` is set.

    The function never raises an exception for malformed sequences:
    Codons containing other symbols than unambiguous nucleotides are
    translated into ``'X'``.

    Parameters
    ----------
    nucleotides : str
        The nucleotide sequence of the coding region in forward
        direction.
    strand : Strand or int or str, optional
        If the strand is :attr:`Strand.REVERSE` the reverse complement
        of `nucleotides` is translated.
    start_offset : int, optional
        The number of nucleotides skipped before the first codon,
        i.e. the *phase* of a *CDS*.
    table : CodonTable or GeneticCode or int or str, optional
        The genetic code.
        By default, the genetic code resolved from `options` is used.
    options : TranslationOptions, optional
        The translation options.
        By default the default :class:`TranslationOptions` are used.

    Returns
    -------
    protein : str or None
        The protein sequence or ``None`` if
        `options.translate_cds` is false.

    Examples
    --------

    >>> print(translate("ATGAAATAA", table=1))
    MK
    >>> from gbconvert.options import TranslationOptions
    >>> options = TranslationOptions(include_stop_codon=True)
    >>> print(translate("ATGAAATAA", table=1, options=options))
    MK*
    >>> print(translate("TTATTTCAT", strand=-1, table=1))
    MK
    >>> print(translate("ATTAAATAA", table=5))
    MK
    """
    # Avoid circular import
    from ..options import TranslationOptions

    if options is None:
        options = TranslationOptions()
    if not options.translate_cds:
        return None
    protein = _map_frame(
        nucleotides, strand, start_offset, table, options, initiate=True
    )
    if options.allow_internal_stop_codons:
        # Only a terminal stop codon stops the translation
        if protein.endswith("*") and not options.include_stop_codon:
            protein = protein[:-1]
    else:
        stop_index = protein.find("*")
        if stop_index != -1:
            if options.include_stop_codon:
                protein = protein[: stop_index + 1]
            else:
                protein = protein[:stop_index]
    return protein


def find_internal_stops(nucleotides, strand=Strand.FORWARD, start_offset=0,
                        table=None, options=None):
    """
    Find stop codons that are not the last codon of a coding region.

    Parameters
    ----------
    nucleotides, strand, start_offset, table, options
        See :func:`translate()`.

    Returns
    -------
    indices : list of int
        The indices of the internal stop codons, counted in codons from
        `start_offset`.

    Examples
    --------

    >>> print(find_internal_stops("ATGTAAAAATAA", table=1))
    [1]
    """
    from ..options import TranslationOptions

    if options is None:
        options = TranslationOptions()
    protein = _map_frame(nucleotides, strand, start_offset, table, options)
    if len(protein) == 0:
        return []
    is_stop = np.frombuffer(protein.encode("ASCII"), dtype=np.uint8) == ord("*")
    # The last codon is a regular stop codon
    return [int(i) for i in np.where(is_stop[:-1])[0]]


def _map_frame(nucleotides, strand, start_offset, table, options,
               initiate=False):
    if not nucleotides:
        return ""
    if table is None:
        table = options.resolve_genetic_code()
    codon_table = get_codon_table(table)
    try:
        strand = Strand.parse(strand)
    except ValueError:
        strand = Strand.FORWARD
    if strand == Strand.REVERSE:
        nucleotides = reverse_complement(nucleotides)
    start_offset = max(int(start_offset or 0), 0)
    # If there is a trailing partial codon, remove it
    frame_length = ((len(nucleotides) - start_offset) // 3) * 3
    if frame_length <= 0:
        return ""
    frame = nucleotides[start_offset : start_offset + frame_length]
    protein = codon_table.map_codons(frame)
    if initiate and codon_table.is_start_codon(frame[:3]):
        # Alternative start codons code for methionine at the first
        # position
        protein = "M" + protein[1:]
    return protein
