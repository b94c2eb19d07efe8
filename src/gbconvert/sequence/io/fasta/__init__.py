# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This subpackage is used for reading nucleotide sequences from files in
the *FASTA* format.
"""

__name__ = "gbconvert.sequence.io.fasta"
__author__ = "The gbconvert contributors"

from .file import *
from .convert import *
