# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.bed"
__author__ = "The gbconvert contributors"
__all__ = ["get_annotations"]

from ...annotation import Annotation, AnnotationData

# BED intervals have no type
FEATURE_TYPE = "misc_feature"


def get_annotations(bed_file):
    """
    Parse a BED file into an :class:`AnnotationData` object.

    As BED uses 0-based half-open coordinates as well, the coordinates
    are taken as they are.
    Each interval becomes a *misc_feature* annotation, the name and the
    score of the interval are kept as *note* and *score* qualifiers.

    Parameters
    ----------
    bed_file : BedFile
        The file to extract the annotations from.

    Returns
    -------
    annotation_data : AnnotationData
        The extracted annotations.
    """
    annotations = []
    for chrom, start, end, name, score, strand in bed_file:
        qualifiers = []
        if name is not None:
            qualifiers.append(("note", name))
        if score is not None:
            qualifiers.append(("score", score))
        annotations.append(Annotation(
            FEATURE_TYPE, start, end, strand,
            sequence_id=chrom, qualifiers=qualifiers
        ))
    return AnnotationData(annotations)
