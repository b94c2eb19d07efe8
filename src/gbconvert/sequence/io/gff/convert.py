# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.gff"
__author__ = "The gbconvert contributors"
__all__ = ["get_annotations"]

from ...annotation import Annotation, AnnotationData

# Attributes, whose value identifies the feature an entry belongs to
_GFF3_ID_KEYS = ("ID",)
# Exons and CDS segments of the same transcript are joined
_GTF_ID_KEYS = ("transcript_id", "gene_id")


def get_annotations(gff_file):
    """
    Parse a GFF3 or GTF file into an :class:`AnnotationData` object.

    The *type* column is used as the :attr:`Annotation.type`,
    the coordinates are converted into 0-based half-open coordinates
    and the *attributes* column is parsed into the qualifiers.
    Entries with the same type and the same ``ID`` attribute
    (GFF3) or the same ``transcript_id`` or, if absent, ``gene_id``
    attribute (GTF) share a feature ID and are therefore interpreted
    as segments of the same feature.

    Parameters
    ----------
    gff_file : GFFFile
        The file to extract the annotations from.

    Returns
    -------
    annotation_data : AnnotationData
        The extracted annotations.

    Examples
    --------

    >>> from io import StringIO
    >>> text = (
    ...     "seq1\\t.\\tCDS\\t1\\t30\\t.\\t-\\t0\\tID=cds1\\n"
    ...     "seq1\\t.\\tCDS\\t61\\t90\\t.\\t-\\t0\\tID=cds1\\n"
    ... )
    >>> data = get_annotations(GFFFile.read(StringIO(text)))
    >>> for feature in data.get_features("seq1"):
    ...     print(feature.type, feature.segments, feature.strand.symbol)
    CDS ((0, 30), (60, 90)) -
    """
    id_keys = _GTF_ID_KEYS if gff_file.format == "GTF" else _GFF3_ID_KEYS
    annotations = []
    for seqid, _, type, start, end, _, strand, phase, attrib in gff_file:
        feature_id = None
        for id_key in id_keys:
            for key, value in attrib:
                if key == id_key:
                    feature_id = value
                    break
            if feature_id is not None:
                break
        annotations.append(Annotation(
            type, start - 1, end, strand, phase,
            sequence_id=seqid, feature_id=feature_id, qualifiers=attrib
        ))
    return AnnotationData(annotations)
