# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
A subpackage for handling nucleotide sequences and their annotations.

A :class:`Sequence` holds a nucleotide sequence together with the
metadata, that is written into the header of a *GenBank* record.
Multiple sequences are collected in an ordered :class:`SequenceData`
object.

An :class:`Annotation` describes a single region on a sequence in
0-based, half-open coordinates, with a feature type, a strand and
:class:`Qualifiers`.
The annotations of all sequences are collected in an
:class:`AnnotationData` object, that groups them by the ID of the
sequence they refer to.
Annotations that share a feature ID (e.g. the exons of a gene) form a
single logical :class:`Feature`.

Furthermore, this subpackage provides the NCBI genetic codes as
:class:`CodonTable` objects and the :func:`translate()` function,
which derives protein sequences from coding regions.
"""

__name__ = "gbconvert.sequence"
__author__ = "The gbconvert contributors"

from .sequence import *
from .annotation import *
from .codon import *
from .translate import *
