# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

"""
Validation reports and the validation of parsed input data.
"""

__name__ = "gbconvert"
__author__ = "The gbconvert contributors"
__all__ = [
    "Severity",
    "ValidationIssue",
    "ValidationResult",
    "validate_sequence_data",
    "validate_annotation_data",
    "issue_location",
]

from dataclasses import dataclass
from enum import Enum

# Unambiguous and ambiguous nucleotides, gaps
_IUPAC_SYMBOLS = frozenset("ACGTURYSWKMBDHVN-.")


class Severity(Enum):
    """
    The severity of a :class:`ValidationIssue`.

        - **WARNING** - The problem does not prevent the conversion
        - **ERROR** - The affected data is excluded from the conversion
    """

    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass(frozen=True)
class ValidationIssue:
    """
    A single problem found during validation.

    Parameters
    ----------
    severity : Severity
        The severity of the problem.
    message : str
        A human-readable description.
    location : str, optional
        Where the problem occurred, e.g. a sequence ID.

    Attributes
    ----------
    severity, message, location
        Same as the parameters.
    """

    severity: ...
    message: ...
    location: ... = None

    @staticmethod
    def warning(message, location=None):
        return ValidationIssue(Severity.WARNING, message, location)

    @staticmethod
    def error(message, location=None):
        return ValidationIssue(Severity.ERROR, message, location)

    def __str__(self):
        if self.location is None:
            return f"{self.severity.value}: {self.message}"
        return f"{self.severity.value} [{self.location}]: {self.message}"


class ValidationResult:
    """
    An immutable validation report.

    Parameters
    ----------
    issues : iterable object of ValidationIssue, optional
        The problems found during validation, in the order of their
        occurrence.
    detected_format : str, optional
        The detected format of the validated input.
    sequence_count, feature_count : int, optional
        The number of valid sequences and annotations.
    valid : bool, optional
        The overall validity.
        By default, the result is valid if it contains no
        :attr:`Severity.ERROR` issue.
    summary : str, optional
        A human-readable summary.
        By default it is generated from the counts and issues.

    Attributes
    ----------
    issues, detected_format, sequence_count, feature_count, valid, summary
        Same as the parameters.
    errors, warnings : tuple of ValidationIssue
        The issues with the respective severity.

    Examples
    --------

    >>> result = ValidationResult(
    ...     [ValidationIssue.warning("Phase 5 is out of range", "seq1")],
    ...     sequence_count=1, feature_count=3
    ... )
    >>> print(result.valid)
    True
    >>> print(result.summary)
    Validation passed: 1 sequence(s), 3 feature(s), 0 error(s), 1 warning(s)
    """

    def __init__(self, issues=(), detected_format=None, sequence_count=0,
                 feature_count=0, valid=None, summary=None):
        self._issues = tuple(issues)
        self._detected_format = detected_format
        self._sequence_count = sequence_count
        self._feature_count = feature_count
        if valid is None:
            valid = len(self.errors) == 0
        self._valid = valid
        if summary is None:
            summary = (
                f"Validation {'passed' if valid else 'failed'}: "
                f"{sequence_count} sequence(s), {feature_count} feature(s), "
                f"{len(self.errors)} error(s), {len(self.warnings)} warning(s)"
            )
        self._summary = summary

    @property
    def valid(self):
        return self._valid

    @property
    def detected_format(self):
        return self._detected_format

    @property
    def sequence_count(self):
        return self._sequence_count

    @property
    def feature_count(self):
        return self._feature_count

    @property
    def issues(self):
        return self._issues

    @property
    def summary(self):
        return self._summary

    @property
    def errors(self):
        return tuple(
            issue for issue in self._issues if issue.severity == Severity.ERROR
        )

    @property
    def warnings(self):
        return tuple(
            issue for issue in self._issues
            if issue.severity == Severity.WARNING
        )

    def with_issues(self, issues):
        """
        Create a new :class:`ValidationResult` with additional issues.

        Validity and summary are determined anew.

        Parameters
        ----------
        issues : iterable object of ValidationIssue
            The issues to be appended.

        Returns
        -------
        result : ValidationResult
            The new result.
        """
        return ValidationResult(
            self._issues + tuple(issues),
            self._detected_format,
            self._sequence_count,
            self._feature_count,
        )

    def __bool__(self):
        return self._valid

    def __repr__(self):
        """Represent ValidationResult as a string for debugging."""
        return (
            f"ValidationResult(valid={self._valid}, "
            f"detected_format={self._detected_format!r}, "
            f"sequence_count={self._sequence_count}, "
            f"feature_count={self._feature_count}, "
            f"issues={list(self._issues)})"
        )

    def __str__(self):
        lines = [self._summary]
        for issue in self._issues:
            lines.append("  " + str(issue))
        return "\n".join(lines)

    def __eq__(self, item):
        if not isinstance(item, ValidationResult):
            return False
        return (
            self._valid == item._valid
            and self._detected_format == item._detected_format
            and self._sequence_count == item._sequence_count
            and self._feature_count == item._feature_count
            and self._issues == item._issues
            and self._summary == item._summary
        )


def validate_sequence_data(sequence_data, detected_format=None):
    """
    Check parsed sequences for content problems.

    Empty sequences and sequences containing symbols other than IUPAC
    nucleotide codes are reported as warnings.
    The absence of any sequence is an error.

    Parameters
    ----------
    sequence_data : SequenceData
        The sequences.
    detected_format : str, optional
        The format of the input, reported in the result.

    Returns
    -------
    result : ValidationResult
        The validation report.
    """
    issues = []
    if len(sequence_data) == 0:
        issues.append(ValidationIssue.error("No sequences found"))
    for sequence in sequence_data:
        if sequence.length == 0:
            issues.append(ValidationIssue.warning(
                "Sequence is empty", sequence.id
            ))
            continue
        invalid = sorted(set(sequence.sequence.upper()) - _IUPAC_SYMBOLS)
        if len(invalid) > 0:
            issues.append(ValidationIssue.warning(
                f"Sequence contains non-IUPAC characters: "
                f"{', '.join(repr(char) for char in invalid)}",
                sequence.id,
            ))
    return ValidationResult(
        issues, detected_format, sequence_count=len(sequence_data)
    )


def validate_annotation_data(annotation_data, detected_format=None):
    """
    Check parsed annotations for coordinate problems.

    Negative coordinates and annotations, whose start is behind its
    end, are reported as errors.

    Parameters
    ----------
    annotation_data : AnnotationData
        The annotations.
    detected_format : str, optional
        The format of the input, reported in the result.

    Returns
    -------
    result : ValidationResult
        The validation report.
    """
    issues = []
    for annot in annotation_data:
        location = issue_location(annot)
        if annot.start < 0 or annot.end < 0:
            issues.append(ValidationIssue.error(
                f"Negative coordinates in '{annot.type}' annotation",
                location,
            ))
        elif annot.start > annot.end:
            issues.append(ValidationIssue.error(
                f"Start {annot.start} is greater than end {annot.end} "
                f"in '{annot.type}' annotation",
                location,
            ))
    return ValidationResult(
        issues,
        detected_format,
        sequence_count=len(annotation_data.sequence_ids),
        feature_count=annotation_data.total_count,
    )


def issue_location(annotation):
    """
    Describe the position of an annotation in a
    :class:`ValidationIssue`.

    Parameters
    ----------
    annotation : Annotation or Feature
        The annotation the issue refers to.

    Returns
    -------
    location : str
        The sequence ID and the 0-based coordinates, followed by the
        feature ID, if the annotation has one.

    Examples
    --------

    >>> from gbconvert.sequence import Annotation
    >>> print(issue_location(Annotation("CDS", 0, 9, sequence_id="seq1")))
    seq1:0-9
    >>> print(issue_location(
    ...     Annotation("CDS", 0, 9, sequence_id="seq1", feature_id="cds1")
    ... ))
    seq1:0-9 (cds1)
    """
    location = f"{annotation.sequence_id}:{annotation.start}-{annotation.end}"
    if annotation.feature_id is not None:
        location += f" ({annotation.feature_id})"
    return location
