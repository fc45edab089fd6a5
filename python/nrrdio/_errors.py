# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = (
    "HeaderSyntaxError",
    "MalformedValueError",
    "MissingFieldError",
    "NrrdError",
    "NrrdIOError",
    "ShapeMismatchError",
    "UnknownTypeError",
    "UnsupportedEncodingError",
    "UnsupportedFeatureError",
    "UnsupportedVersionError",
)


class NrrdError(RuntimeError):
    """Base class for all exceptions raised while reading or writing NRRD
    files.

    Parameters
    ----------
    message
        Description of the problem.
    field, optional
        Canonical name of the header field being processed, if any.
    line, optional
        One-based line number in the header, if known.
    """

    def __init__(self, message: str, *, field: str | None = None, line: int | None = None):
        original = message
        context = []
        if field is not None:
            context.append(f"field {field!r}")
        if line is not None:
            context.append(f"line {line}")
        if context:
            message = f"{message} ({', '.join(context)})"
        super().__init__(message)
        self.message = original
        self.field = field
        self.line = line


class HeaderSyntaxError(NrrdError):
    """A header line (or the magic line) could not be tokenized."""


class UnsupportedVersionError(NrrdError):
    """The magic line declares a NRRD version newer than this package
    supports.
    """


class UnknownTypeError(NrrdError):
    """An element type alias or array dtype has no NRRD equivalent."""


class MalformedValueError(NrrdError):
    """A field value does not match the grammar of its field."""


class MissingFieldError(NrrdError):
    """One of the required header fields is absent."""


class ShapeMismatchError(NrrdError):
    """The header's shape fields disagree with each other or with the
    payload.
    """


class UnsupportedEncodingError(NrrdError):
    """The payload encoding is not one of those this package implements."""


class UnsupportedFeatureError(NrrdError):
    """The file relies on a NRRD feature this package does not implement,
    such as detached data files.
    """


class NrrdIOError(NrrdError):
    """A file or resource could not be opened, read, or written."""
