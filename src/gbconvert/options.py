# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Configuration of the conversion.

All options are immutable :func:`dataclasses.dataclass` objects.
Derived options are created with :func:`dataclasses.replace()`.
"""

__name__ = "gbconvert"
__author__ = "The gbconvert contributors"
__all__ = [
    "TranslationOptions",
    "FeatureFormattingOptions",
    "OutputFormattingOptions",
    "FeatureFilterOptions",
    "ConversionOptions",
    "GenbankOptions",
]

from dataclasses import dataclass, field
from types import MappingProxyType
from .sequence.codon import resolve_genetic_code


@dataclass(frozen=True)
class TranslationOptions:
    """
    Options for the translation of coding features.

    The genetic code can be selected in three ways.
    If more than one selector is given, `genetic_code_table` takes
    precedence over `genetic_code`, which takes precedence over
    `genetic_code_enum`.
    Selectors that are not used are still kept.

    Parameters
    ----------
    translate_cds : bool, optional
        If false, no */translation* qualifier is added.
    include_stop_codon : bool, optional
        If true, the stop codon that terminates the translation is
        included as ``'*'``.
    allow_internal_stop_codons : bool, optional
        If true, internal stop codons are translated as ``'*'``
        instead of terminating the translation.
    genetic_code_table : int, optional
        The NCBI table ID of the genetic code.
    genetic_code : str, optional
        A free text name of the genetic code.
    genetic_code_enum : GeneticCode, optional
        The genetic code.
    include_transl_table_qualifier, include_codon_start_qualifier : bool, optional
        Whether to add the */transl_table* and */codon_start*
        qualifiers to translated features.
    force_translate_feature_types : tuple of str, optional
        Feature types that are translated in addition to *CDS*.
    skip_translate_feature_types : tuple of str, optional
        Feature types that are never translated.

    Attributes
    ----------
    translate_cds, include_stop_codon, allow_internal_stop_codons, genetic_code_table, genetic_code, genetic_code_enum, include_transl_table_qualifier, include_codon_start_qualifier, force_translate_feature_types, skip_translate_feature_types
        Same as the parameters.

    Examples
    --------

    >>> options = TranslationOptions(genetic_code="xyz")
    >>> print(options.get_genetic_code())
    xyz
    """

    translate_cds: ... = True
    include_stop_codon: ... = False
    allow_internal_stop_codons: ... = False
    genetic_code_table: ... = None
    genetic_code: ... = None
    genetic_code_enum: ... = None
    include_transl_table_qualifier: ... = True
    include_codon_start_qualifier: ... = True
    force_translate_feature_types: ... = ()
    skip_translate_feature_types: ... = ()

    def get_genetic_code(self):
        """
        Get the free text genetic code selector, as it was given.

        Returns
        -------
        genetic_code : str or None
            The free text selector.
        """
        return self.genetic_code

    def resolve_genetic_code(self):
        """
        Get the genetic code that is actually used for translation.

        Returns
        -------
        code : GeneticCode
            The genetic code.
            If no selector is given, or the selected genetic code does
            not exist, the *Invertebrate Mitochondrial* code is used.
        """
        return resolve_genetic_code(
            self.genetic_code_table, self.genetic_code, self.genetic_code_enum
        )

    def should_translate(self, feature_type):
        """
        Check whether features of the given type are translated.

        Parameters
        ----------
        feature_type : str
            The feature type.

        Returns
        -------
        translate : bool
            True, if the feature should get a */translation* qualifier.
        """
        if not self.translate_cds:
            return False
        if feature_type in self.skip_translate_feature_types:
            return False
        return (
            feature_type == "CDS"
            or feature_type in self.force_translate_feature_types
        )


@dataclass(frozen=True)
class FeatureFormattingOptions:
    """
    Options for the rendering of features.

    The mappings are stored as read-only copies.

    Parameters
    ----------
    standardize_feature_types : bool, optional
        If true, common synonyms of feature types (e.g.
        ``'five_prime_UTR'``) are replaced by the INSDC feature key.
    feature_type_mapping : Mapping of (str -> str), optional
        A custom mapping of feature types, that is applied before the
        built-in mapping.
    include_pseudo_qualifier : bool, optional
        If true, features whose type marks a pseudogene get a
        */pseudo* qualifier.
    preserve_original_ids : bool, optional
        If true, the *ID*, *Name* and *Parent* attributes from *GFF3*
        files are kept as qualifiers.
    additional_qualifiers : Mapping of (str -> Mapping), optional
        Additional qualifiers added to all features of a type.

    Attributes
    ----------
    standardize_feature_types, feature_type_mapping, include_pseudo_qualifier, preserve_original_ids, additional_qualifiers
        Same as the parameters.
    """

    standardize_feature_types: ... = False
    feature_type_mapping: ... = field(default_factory=dict)
    include_pseudo_qualifier: ... = False
    preserve_original_ids: ... = False
    additional_qualifiers: ... = field(default_factory=dict)

    def __post_init__(self):
        _freeze(self, "feature_type_mapping")
        object.__setattr__(self, "additional_qualifiers", MappingProxyType({
            type: MappingProxyType(dict(qualifiers))
            for type, qualifiers in self.additional_qualifiers.items()
        }))


@dataclass(frozen=True)
class OutputFormattingOptions:
    """
    Options for the layout of the written *GenBank* records.

    Parameters
    ----------
    sequence_line_width : int, optional
        The number of bases per line in the *ORIGIN* section.
    lowercase_sequence : bool, optional
        Whether the sequence is written in lower case.
    include_sequence : bool, optional
        If false, the *ORIGIN* section is left empty.
    include_empty_lines_between_features : bool, optional
        If true, an empty line is put between two features.
    sort_features_by_position : bool, optional
        If true, features are written in the order of their position.
        Otherwise the input order is kept.

    Attributes
    ----------
    sequence_line_width, lowercase_sequence, include_sequence, include_empty_lines_between_features, sort_features_by_position
        Same as the parameters.
    """

    sequence_line_width: ... = 60
    lowercase_sequence: ... = True
    include_sequence: ... = True
    include_empty_lines_between_features: ... = False
    sort_features_by_position: ... = True

    def __post_init__(self):
        if self.sequence_line_width < 10:
            raise ValueError(
                f"Sequence line width must be at least 10, "
                f"not {self.sequence_line_width}"
            )


@dataclass(frozen=True)
class FeatureFilterOptions:
    """
    Options for the selection of annotations.

    Feature types and qualifier keys are compared case-sensitively.
    An empty list of types or qualifier keys is the same as giving
    none, i.e. it does not filter anything.
    The qualifier filters select whole annotations, the qualifiers of
    a kept annotation are never changed.

    Parameters
    ----------
    include_feature_types : iterable object of str, optional
        If given, only annotations of these types are kept.
    exclude_feature_types : iterable object of str, optional
        Annotations of these types are removed.
    include_qualifiers : iterable object of str, optional
        If given, only annotations that have at least one of these
        qualifiers are kept.
    exclude_qualifiers : iterable object of str, optional
        Annotations that have any of these qualifiers are removed.
    min_feature_length, max_feature_length : int, optional
        Annotations shorter or longer than the given length are
        removed.

    Attributes
    ----------
    include_feature_types, exclude_feature_types, include_qualifiers, exclude_qualifiers, min_feature_length, max_feature_length
        Same as the parameters.

    Examples
    --------

    >>> from gbconvert.sequence import Annotation
    >>> annot = Annotation("gene", 0, 90, qualifiers={"gene": "nad1"})
    >>> print(FeatureFilterOptions(include_feature_types=[]).accepts(annot))
    True
    >>> print(FeatureFilterOptions(exclude_qualifiers=["gene"]).accepts(annot))
    False
    """

    include_feature_types: ... = None
    exclude_feature_types: ... = None
    include_qualifiers: ... = None
    exclude_qualifiers: ... = None
    min_feature_length: ... = None
    max_feature_length: ... = None

    def accepts(self, annotation):
        """
        Check whether an annotation passes all filters.

        Parameters
        ----------
        annotation : Annotation
            The annotation.

        Returns
        -------
        accepted : bool
            True, if the annotation is kept.
        """
        if self.include_feature_types \
                and annotation.type not in self.include_feature_types:
            return False
        if self.exclude_feature_types \
                and annotation.type in self.exclude_feature_types:
            return False
        qualifiers = annotation.qualifiers
        if self.include_qualifiers and not any(
            key in qualifiers for key in self.include_qualifiers
        ):
            return False
        if self.exclude_qualifiers and any(
            key in qualifiers for key in self.exclude_qualifiers
        ):
            return False
        if self.min_feature_length is not None \
                and annotation.length < self.min_feature_length:
            return False
        if self.max_feature_length is not None \
                and annotation.length > self.max_feature_length:
            return False
        return True


@dataclass(frozen=True)
class ConversionOptions:
    """
    The options of a single conversion.

    Parameters
    ----------
    organism, molecule_type, topology, division : str, optional
        If given, these values override the respective properties of
        all sequences.
    annotation_format : str, optional
        The format of the annotation file, e.g. ``'GFF'``.
        By default the format is detected.
    merge_sequences : bool, optional
        If true, all sequences are concatenated into a single record.
    strict : bool, optional
        If true, a :class:`ValidationError` is raised, if the
        validation finds errors.
    header_info : HeaderInfo, optional
        Header metadata used for all records.
    translation : TranslationOptions, optional
        Options for the translation of coding features.
    feature_formatting : FeatureFormattingOptions, optional
        Options for the rendering of features.
    output_formatting : OutputFormattingOptions, optional
        Options for the layout of the records.
    feature_filter : FeatureFilterOptions, optional
        Options for the selection of annotations.
    custom_metadata : Mapping of (str -> str), optional
        Additional metadata, written as structured comment.
        It is stored as read-only copy.

    Attributes
    ----------
    organism, molecule_type, topology, division, annotation_format, merge_sequences, strict, header_info, translation, feature_formatting, output_formatting, feature_filter, custom_metadata
        Same as the parameters.

    Examples
    --------

    >>> from dataclasses import replace
    >>> options = ConversionOptions(organism="Homo sapiens")
    >>> options = replace(
    ...     options, translation=TranslationOptions(genetic_code_table=2)
    ... )
    >>> print(options.translation.resolve_genetic_code().description)
    Vertebrate Mitochondrial Code
    """

    organism: ... = None
    molecule_type: ... = None
    topology: ... = None
    division: ... = None
    annotation_format: ... = None
    merge_sequences: ... = False
    strict: ... = False
    header_info: ... = None
    translation: ... = field(default_factory=TranslationOptions)
    feature_formatting: ... = field(default_factory=FeatureFormattingOptions)
    output_formatting: ... = field(default_factory=OutputFormattingOptions)
    feature_filter: ... = field(default_factory=FeatureFilterOptions)
    custom_metadata: ... = field(default_factory=dict)

    def __post_init__(self):
        _freeze(self, "custom_metadata")


@dataclass(frozen=True)
class GenbankOptions:
    """
    Options of a :class:`GenbankConverter`, that apply to all
    conversions.

    Parameters
    ----------
    memory_efficient : bool, optional
        If true, the output is always streamed into a temporary file
        instead of being built in memory.
    memory_threshold : int, optional
        The input file size in bytes, above which the memory efficient
        mode is used automatically.
    temp_directory : str, optional
        The directory for temporary files.
    default_organism : str, optional
        The organism of sequences without organism.
    default_molecule_type, default_topology, default_division : str, optional
        The respective values for sequences that do not specify them.

    Attributes
    ----------
    memory_efficient, memory_threshold, temp_directory, default_organism, default_molecule_type, default_topology, default_division
        Same as the parameters.
    """

    memory_efficient: ... = False
    memory_threshold: ... = 10 * 1024 * 1024
    temp_directory: ... = None
    default_organism: ... = None
    default_molecule_type: ... = "DNA"
    default_topology: ... = "linear"
    default_division: ... = "UNC"


def _freeze(options, name):
    """
    Replace a dictionary field of a frozen dataclass by a read-only
    copy.
    """
    object.__setattr__(
        options, name, MappingProxyType(dict(getattr(options, name)))
    )
