# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
This subpackage provides support for reading sequence variants from
files in the *Variant Call Format* (VCF) as annotations.
"""

__name__ = "gbconvert.sequence.io.vcf"
__author__ = "The gbconvert contributors"

from .file import *
from .convert import *
