# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

import gbconvert
import gbconvert.sequence
import gbconvert.sequence.io


def test_version_number():
    assert hasattr(gbconvert, "__version__")


def test_public_names():
    """
    Check whether the central classes are available from the top-level
    packages.
    """
    for name in [
        "GenbankConverter", "GenbankResult", "ConversionOptions",
        "GenbankOptions", "ValidationResult", "merge", "ParsingError",
        "issue_location",
    ]:
        assert hasattr(gbconvert, name)
    for name in [
        "Sequence", "SequenceData", "Annotation", "AnnotationData",
        "CodonTable", "GeneticCode", "translate", "get_codon_table",
    ]:
        assert hasattr(gbconvert.sequence, name)
    for name in ["detect_format", "load_sequences", "load_annotations"]:
        assert hasattr(gbconvert.sequence.io, name)
