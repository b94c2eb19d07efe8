# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert"
__author__ = "The gbconvert contributors"
__all__ = [
    "GenbankConverterError",
    "FileProcessingError",
    "ParsingError",
    "InvalidFileFormatError",
    "ValidationError",
    "ConversionError",
    "ResourceNotFoundError",
]


class GenbankConverterError(Exception):
    """
    Base class for all exceptions raised by *gbconvert* itself.
    """
    pass


class FileProcessingError(GenbankConverterError):
    """
    Indicates that an input file could not be read or an output file
    could not be written.

    Parameters
    ----------
    message : str
        The error message.
    file : str, optional
        The affected file.
    """

    def __init__(self, message, file=None):
        if file is not None:
            message = f"{message} (file: '{file}')"
        super().__init__(message)
        self.file = file


class ParsingError(GenbankConverterError):
    """
    Indicates that a file is malformed with respect to its declared
    format.

    Parameters
    ----------
    message : str
        The error message.
    format : str, optional
        The format label of the file, e.g. ``'GFF'``.
    file : str, optional
        The affected file.
    line : int, optional
        The 1-based number of the offending line.
    """

    def __init__(self, message, format=None, file=None, line=None):
        context = []
        if format is not None:
            context.append(f"format: {format}")
        if file is not None:
            context.append(f"file: '{file}'")
        if line is not None:
            context.append(f"line: {line}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
        self.format = format
        self.file = file
        self.line = line


class InvalidFileFormatError(GenbankConverterError):
    """
    Indicates that the detected or declared format of a file is not
    supported for the requested action.

    Parameters
    ----------
    message : str
        The error message.
    format : str, optional
        The offending format label.
    """

    def __init__(self, message, format=None):
        super().__init__(message)
        self.format = format


class ValidationError(GenbankConverterError):
    """
    Raised in strict mode, if the validation of the input data found
    at least one error.

    Parameters
    ----------
    message : str
        The error message.
    result : ValidationResult, optional
        The validation report that caused the error.
    """

    def __init__(self, message, result=None):
        super().__init__(message)
        self.result = result


class ConversionError(GenbankConverterError):
    """
    Indicates an unexpected failure while merging, translating or
    formatting.
    The original exception is available as ``__cause__``.
    """
    pass


class ResourceNotFoundError(GenbankConverterError):
    """
    Indicates that a referenced resource, e.g. a genetic code table,
    does not exist.
    """
    pass
