# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This subpackage is used for writing sequences and their features into
files in the *GenBank* flat file format.

The low-level :class:`GenBankFile` assembles a record field by field,
while the :class:`GenBankFormatter` renders complete
:class:`SequenceData` and :class:`AnnotationData` objects, either into
memory or directly into a file.
"""

__name__ = "gbconvert.sequence.io.genbank"
__author__ = "The gbconvert contributors"

from .file import *
from .metadata import *
from .annotation import *
from .sequence import *
from .format import *
