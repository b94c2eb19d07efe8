# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This subpackage provides support for reading genomic intervals from
files in the *Browser Extensible Data* (BED) format.
"""

__name__ = "gbconvert.sequence.io.bed"
__author__ = "The gbconvert contributors"

from .file import *
from .convert import *
