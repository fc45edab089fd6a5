# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

"""Reading and writing of NRRD headers.

A NRRD file with an attached header looks like::

    NRRD0005
    # <comment>
    <field>: <value>
    ...
    <key>:= <value>
    ...

    <payload>

The magic line is followed by any number of comment, ``field: value``, and
``key:= value`` lines, and the header ends at the first empty line (or the
end of the input).  Both separators are treated identically when reading;
when writing, standard fields use ``:`` and everything else uses ``:=``.
"""

from __future__ import annotations

__all__ = ("MAGIC", "format_header", "parse_header")

import re
from logging import getLogger
from typing import IO

from ._errors import (
    HeaderSyntaxError,
    MissingFieldError,
    NrrdError,
    ShapeMismatchError,
    UnsupportedFeatureError,
    UnsupportedVersionError,
)
from ._grammar import FIELD_ORDER, REQUIRED_FIELDS, canonical_field_name, resolve_grammar
from ._header import NrrdHeader
from ._options import NrrdOptions
from ._payload import Encoding, Endian
from ._values import format_value, parse_value

_LOG = getLogger(__name__)

MAGIC = "NRRD0005"
"""Magic line written at the start of every file."""

MAX_VERSION = 5

_SEPARATOR = re.compile(r":=?\s*")

_PREAMBLE = (
    "# This NRRD file was generated by nrrdio",
    "# Complete NRRD file format specification at:",
    "# http://teem.sourceforge.net/nrrd/format.html",
)


def parse_header(stream: IO[bytes], options: NrrdOptions | None = None) -> NrrdHeader:
    """Read a NRRD header from a binary stream.

    Parameters
    ----------
    stream
        Stream positioned at the magic line.  On return it is positioned at
        the first byte of the payload.
    options, optional
        Reading options.

    Returns
    -------
    header
        Parsed and validated header.  If the file has no ``endian`` field,
        one is added from ``options``.

    Raises
    ------
    NrrdError
        Raised (via one of its subclasses) if the header is invalid.
    """
    if options is None:
        options = NrrdOptions()
    _check_magic(_read_line(stream))
    header = NrrdHeader()
    line_number = 1
    while True:
        raw_line = stream.readline()
        line_number += 1
        line = _decode_line(raw_line)
        if not line:
            # Empty line or end of input; either way the header is done.
            break
        if line.startswith("#"):
            continue
        parts = _SEPARATOR.split(line, maxsplit=1)
        if len(parts) != 2:
            raise HeaderSyntaxError(
                f"Expected 'field: value' or 'key:= value', got {line!r}.", line=line_number
            )
        name, text = parts[0].strip(), parts[1].rstrip()
        field, display = canonical_field_name(name)
        grammar = resolve_grammar(field, options.custom_field_map, options.suppress_warnings)
        try:
            value = parse_value(text, grammar, field)
        except NrrdError as err:
            raise type(err)(err.message, field=err.field, line=line_number) from None
        header[display if display is not None else field] = value
    _validate(header)
    if header.endian is None:
        header["endian"] = options.default_endian.value
    return header


def format_header(header: NrrdHeader, options: NrrdOptions | None = None) -> bytes:
    """Format a NRRD header, including its magic line and terminator.

    Parameters
    ----------
    header
        Header to write.  Fields in the standard write order come first; all
        others follow in insertion order as key/value pairs.
    options, optional
        Writing options.

    Returns
    -------
    text
        Encoded header, ending with the blank line that separates it from
        the payload.
    """
    if options is None:
        options = NrrdOptions()
    lines = [MAGIC, *_PREAMBLE]
    ordered = [field for field in FIELD_ORDER if field in header]
    ordered_set = set(ordered)
    extra = [field for field in header if field not in ordered_set]
    for separator, fields in ((": ", ordered), (":= ", extra)):
        for field in fields:
            grammar = resolve_grammar(field, options.custom_field_map, options.suppress_warnings)
            text = format_value(header[field], grammar, field, options.quote_string_lists)
            lines.append(f"{header.display_name(field)}{separator}{text}")
    lines.append("")
    return "".join(line + "\n" for line in lines).encode("latin-1")


def _read_line(stream: IO[bytes]) -> str:
    return _decode_line(stream.readline())


def _decode_line(raw_line: bytes) -> str:
    return raw_line.decode("latin-1").rstrip("\r\n")


def _check_magic(line: str) -> None:
    if not line.startswith("NRRD"):
        raise HeaderSyntaxError(f"Bad signature {line!r}; not a NRRD file.", line=1)
    try:
        version = int(line[4:])
    except ValueError:
        raise HeaderSyntaxError(f"Bad signature {line!r}; invalid NRRD version.", line=1) from None
    if version > MAX_VERSION:
        raise UnsupportedVersionError(
            f"NRRD version {version} is newer than the supported version {MAX_VERSION}.", line=1
        )


def _validate(header: NrrdHeader) -> None:
    for field in REQUIRED_FIELDS:
        if field not in header:
            raise MissingFieldError("Missing required field.", field=field)
    sizes = header.sizes
    if header.dimension != len(sizes):
        raise ShapeMismatchError(
            f"Dimension {header.dimension} does not match {len(sizes)} sizes {sizes}.", field="dimension"
        )
    if any(size <= 0 for size in sizes):
        raise ShapeMismatchError(f"Sizes {sizes} must all be positive.", field="sizes")
    if "datafile" in header:
        raise UnsupportedFeatureError("Detached data files are not supported.", field="datafile")
    Encoding.resolve(header.encoding)
    if header.endian is not None:
        Endian.resolve(header.endian)
    _LOG.debug("Parsed NRRD header: type=%s, sizes=%s, encoding=%s.", header.type, sizes, header.encoding)
