# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert.sequence.io.vcf"
__author__ = "The gbconvert contributors"
__all__ = ["get_annotations"]

import re
from ...annotation import Annotation, AnnotationData

FEATURE_TYPE = "variation"

_NUCLEOTIDE_PATTERN = re.compile("^[ACGTUNacgtun]+$")


def get_annotations(vcf_file):
    """
    Parse a VCF file into an :class:`AnnotationData` object.

    Each record becomes a *variation* annotation, that spans the
    reference allele, i.e. a record at the 1-based position *POS*
    covers ``POS-1 .. POS-1+len(REF)`` in 0-based half-open
    coordinates.
    Alternative alleles consisting of nucleotides are written as
    *replace* qualifiers, symbolic alleles (e.g. ``<DEL>``) as *note*
    qualifiers.
    An ID from *dbSNP* becomes a *db_xref* qualifier.

    Parameters
    ----------
    vcf_file : VcfFile
        The file to extract the annotations from.

    Returns
    -------
    annotation_data : AnnotationData
        The extracted annotations.

    Examples
    --------

    >>> from io import StringIO
    >>> text = "chr1\\t10\\trs123\\tAC\\tA\\t.\\t.\\t.\\n"
    >>> annot = list(get_annotations(VcfFile.read(StringIO(text))))[0]
    >>> print(annot.start, annot.end)
    9 11
    >>> print(list(annot.qualifiers))
    [('replace', 'a'), ('db_xref', 'dbSNP:123')]
    """
    annotations = []
    for chrom, pos, id, ref, alt in vcf_file:
        qualifiers = []
        for allele in alt:
            if _NUCLEOTIDE_PATTERN.match(allele):
                qualifiers.append(("replace", allele.lower()))
            else:
                qualifiers.append(("note", f"alternative allele {allele}"))
        if id is not None:
            if id.startswith("rs") and id[2:].isdigit():
                qualifiers.append(("db_xref", f"dbSNP:{id[2:]}"))
            else:
                qualifiers.append(("note", f"variant {id}"))
        annotations.append(Annotation(
            FEATURE_TYPE, pos - 1, pos - 1 + len(ref),
            sequence_id=chrom, qualifiers=qualifiers
        ))
    return AnnotationData(annotations)
