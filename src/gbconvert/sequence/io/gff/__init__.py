# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This subpackage provides support for reading sequence annotations from
the *Generic Feature Format 3* (GFF3) and the *Gene Transfer Format*
(GTF).
"""

__name__ = "gbconvert.sequence.io.gff"
__author__ = "The gbconvert contributors"

from .file import *
from .convert import *
