# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This is the top-level package of *gbconvert*.

It converts sequence data (*FASTA*) together with sequence annotations
(*GFF3*, *GTF*, *BED*, *VCF*) into the *GenBank* flat file format.
The subpackage :mod:`gbconvert.sequence` contains the data model,
the genetic code tables and the file format support, while the
high-level entry point is the :class:`GenbankConverter`.

The top-level package also provides utilities and base classes used by
most of the package's modules, like the :class:`TextFile` base class
and the exceptions raised by the package.
"""

__version__ = "0.1.0"
__name__ = "gbconvert"
__author__ = "The gbconvert contributors"

from .exceptions import *
from .file import *
from .options import *
from .validation import *
from .merge import *
from .convert import *
