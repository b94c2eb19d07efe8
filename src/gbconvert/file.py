# This source code is part of the gbconvert package and is distributed
# under the 3-Clause BSD License. Please see 'LICENSE.rst' for further
# information.

__name__ = "gbconvert"
__author__ = "The gbconvert contributors"
__all__ = [
    "TextFile",
    "read_text",
    "write_text",
    "append_text",
    "create_temp",
    "is_empty",
]

import abc
import io
import os
import tempfile
from os import PathLike
from .exceptions import FileProcessingError


class TextFile(metaclass=abc.ABCMeta):
    """
    Common base of the line based file formats of this package.

    The content of a file is held as a list of lines without line
    breaks, which is filled by :meth:`read()` and written by
    :meth:`write()`.
    Subclasses interpret these lines and offer access to their
    records.

    Attributes
    ----------
    lines : list of str
        The lines of the file.
        Subclasses may rely on them staying unchanged.
    """

    def __init__(self):
        self.lines = []

    @classmethod
    def read(cls, file, *args, **kwargs):
        """
        Create an instance of the subclass from the lines of a file.

        Parameters
        ----------
        file : file-like object or str
            A file object opened in text mode or a path.
        *args, **kwargs
            Passed to the constructor of the subclass.

        Returns
        -------
        file : TextFile
            The new object.
        """
        if is_open_compatible(file):
            lines = read_text(file).splitlines()
        else:
            if not is_text(file):
                raise TypeError("A file opened in 'text' mode is required")
            lines = file.read().splitlines()
        file_object = cls(*args, **kwargs)
        file_object.lines = lines
        return file_object

    @staticmethod
    def read_iter(file):
        """
        Iterate lazily over the lines of a file.

        Parameters
        ----------
        file : file-like object or str
            A file object opened in text mode or a path.

        Yields
        ------
        line : str
            The next line, including its line break.
        """
        if is_open_compatible(file):
            try:
                with open(file, "r") as f:
                    yield from f
            except OSError as e:
                raise FileProcessingError(
                    f"Cannot read file: {e.strerror}", _name(file)
                ) from e
        else:
            if not is_text(file):
                raise TypeError("A file opened in 'text' mode is required")
            yield from file

    def write(self, file):
        """
        Write the lines of this object into a file.

        Parameters
        ----------
        file : file-like object or str
            A file object or a path.
        """
        TextFile.write_iter(file, self.lines)

    @staticmethod
    def write_iter(file, lines):
        """
        Write lines into a file as they are produced.

        Unlike :meth:`write()`, no :class:`TextFile` needs to be built
        first, so a generator of lines is written without ever holding
        the complete content in memory.

        Parameters
        ----------
        file : file-like object or str
            A file object or a path.
            Binary file objects receive *UTF-8* encoded text.
        lines : iterable object of str
            The lines, each without a trailing line break.
        """
        if is_open_compatible(file):
            try:
                with open(file, "w") as f:
                    for line in lines:
                        f.write(line + "\n")
            except OSError as e:
                raise FileProcessingError(
                    f"Cannot write file: {e.strerror}", _name(file)
                ) from e
        elif is_binary(file):
            for line in lines:
                file.write((line + "\n").encode("utf-8"))
        else:
            if not is_text(file):
                raise TypeError("A file opened in 'text' mode is required")
            for line in lines:
                file.write(line + "\n")

    def __str__(self):
        return "\n".join(self.lines)


def read_text(file):
    """
    Read the complete content of a text file.

    Parameters
    ----------
    file : str or PathLike
        The path of the file.

    Returns
    -------
    text : str
        The file content.

    Raises
    ------
    FileProcessingError
        If the file does not exist or cannot be read.
    """
    try:
        with open(file, "r") as f:
            return f.read()
    except OSError as e:
        raise FileProcessingError(
            f"Cannot read file: {e.strerror}", _name(file)
        ) from e


def write_text(file, text):
    """
    Write text into a file, replacing its previous content.

    Parameters
    ----------
    file : str or PathLike
        The path of the file.
    text : str
        The text to be written.
    """
    try:
        with open(file, "w") as f:
            f.write(text)
    except OSError as e:
        raise FileProcessingError(
            f"Cannot write file: {e.strerror}", _name(file)
        ) from e


def append_text(file, text):
    """
    Append text to the end of a file.
    The file is created if it does not exist yet.

    Parameters
    ----------
    file : str or PathLike
        The path of the file.
    text : str
        The text to be appended.
    """
    try:
        with open(file, "a") as f:
            f.write(text)
    except OSError as e:
        raise FileProcessingError(
            f"Cannot write file: {e.strerror}", _name(file)
        ) from e


def create_temp(suffix="", directory=None):
    """
    Create an empty temporary file and return its path.

    The file is not removed automatically;
    the caller is responsible for deleting it.

    Parameters
    ----------
    suffix : str, optional
        Suffix of the file, e.g. ``'gb'``.
    directory : str, optional
        The directory to create the file in.
        By default the system's temporary directory is used.

    Returns
    -------
    path : str
        The path of the created file.
    """
    if suffix != "" and not suffix.startswith("."):
        suffix = "." + suffix
    try:
        fd, path = tempfile.mkstemp(
            suffix=suffix, prefix="genbank_", dir=directory
        )
    except OSError as e:
        raise FileProcessingError(
            f"Cannot create temporary file: {e.strerror}", directory
        ) from e
    os.close(fd)
    return path


def is_empty(file):
    """
    Check whether a file is missing, empty or contains only whitespace.

    Parameters
    ----------
    file : str or PathLike
        The path of the file.

    Returns
    -------
    empty : bool
        True, if the file contains no visible characters.
    """
    if not os.path.isfile(file):
        return True
    if os.path.getsize(file) == 0:
        return True
    for line in TextFile.read_iter(file):
        if line.strip():
            return False
    return True


def wrap_string(text, width):
    """
    Cut `text` into chunks of `width` characters, regardless of
    whitespace.

    Parameters
    ----------
    text : str
        The text to be wrapped.
    width : int
        The length of each chunk, except the last one.

    Returns
    -------
    lines : list of str
        The chunks.
    """
    return [text[i : i + width] for i in range(0, len(text), width)]


def wrap_words(text, width):
    """
    Wrap the given `text` at spaces, so that no line exceeds `width`
    characters.

    In contrast to `textwrap.wrap()`, consecutive spaces within a line
    are kept.
    Words that are longer than `width` are split.

    Parameters
    ----------
    text : str
        The text to be wrapped.
    width : int
        The maximum number of characters per line.

    Returns
    -------
    lines : list of str
        The wrapped lines.

    Examples
    --------

    >>> print(wrap_words("The quick brown fox", 10))
    ['The quick', 'brown fox']
    >>> print(wrap_words("MKLVAAGHRT", 4))
    ['MKLV', 'AAGH', 'RT']
    """
    lines = []
    while len(text) > width:
        split = text.rfind(" ", 0, width + 1)
        if split <= 0:
            # No space to break at
            lines.append(text[:width])
            text = text[width:]
        else:
            lines.append(text[:split])
            text = text[split + 1 :]
    lines.append(text)
    return lines


def is_binary(file):
    if isinstance(file, io.BufferedIOBase):
        return True
    # for file wrappers, e.g. 'TemporaryFile'
    return hasattr(file, "file") and isinstance(file.file, io.BufferedIOBase)


def is_text(file):
    if isinstance(file, io.TextIOBase):
        return True
    # for file wrappers, e.g. 'TemporaryFile'
    return hasattr(file, "file") and isinstance(file.file, io.TextIOBase)


def is_open_compatible(file):
    return isinstance(file, (str, bytes, PathLike))


def _name(file):
    return os.fsdecode(file) if is_open_compatible(file) else None
