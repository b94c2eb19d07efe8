# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
A subpackage for reading sequence and annotation files and for writing
*GenBank* files.

Each supported format has its own subpackage.
The format of a file can be detected with :func:`detect_format()`,
while :func:`load_sequences()` and :func:`load_annotations()` read a
file of any supported format.
"""

__name__ = "gbconvert.sequence.io"
__author__ = "The gbconvert contributors"

from .detect import *
from .general import *
