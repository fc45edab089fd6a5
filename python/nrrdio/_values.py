# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

"""Parsing and formatting of header field values.

Each `FieldGrammar` has a parser that turns the text following a field's
separator into a Python value and a formatter that does the reverse:

- ``int`` and ``double`` values are `int` and `float`;
- ``string`` values are lower-cased `str`;
- ``datatype`` values are `NrrdType` members;
- lists are `list` instances of the element type;
- vectors and matrices are 1-d and 2-d `numpy.ndarray` instances.

Vectors and matrix rows written as ``none`` (meaning "this axis has no
spatial direction") are represented by rows of NaN, which forces a floating
point array even for the integer grammars.
"""

from __future__ import annotations

__all__ = ("format_value", "parse_value")

import math
from collections.abc import Sequence
from typing import Any

import numpy as np

from ._dtypes import NrrdType
from ._errors import MalformedValueError, UnknownTypeError
from ._grammar import FieldGrammar

_NONE = "none"


def parse_value(text: str, grammar: FieldGrammar, field: str) -> Any:
    """Parse the value of a header field.

    Parameters
    ----------
    text
        Raw value text, with the field separator and line ending removed.
    grammar
        Grammar of the field.
    field
        Canonical name of the field, used in error messages.

    Returns
    -------
    value
        Parsed value; see the module documentation for types.

    Raises
    ------
    MalformedValueError
        Raised if the text does not match the grammar.
    UnknownTypeError
        Raised if a ``datatype`` value is not a recognized type alias.
    """
    match grammar:
        case FieldGrammar.int:
            return _parse_int(text, field)
        case FieldGrammar.double:
            return _parse_double(text, field)
        case FieldGrammar.string:
            return text.lower()
        case FieldGrammar.datatype:
            return NrrdType.resolve(text)
        case FieldGrammar.int_list:
            return [_parse_int(token, field) for token in _split_list(text, field)]
        case FieldGrammar.double_list:
            return [_parse_list_double(token, field) for token in _split_list(text, field)]
        case FieldGrammar.string_list:
            return _parse_string_list(text, field)
        case FieldGrammar.int_vector:
            return _parse_vector(text, field, integer=True)
        case FieldGrammar.double_vector:
            return _parse_vector(text, field, integer=False)
        case FieldGrammar.int_matrix:
            return _parse_matrix(text, field, integer=True)
        case FieldGrammar.double_matrix:
            return _parse_matrix(text, field, integer=False)
    raise AssertionError(f"Unhandled grammar {grammar!r}.")


def format_value(value: Any, grammar: FieldGrammar, field: str, quote_string_lists: bool = False) -> str:
    """Format a header field value as text.

    Parameters
    ----------
    value
        Value to format; see the module documentation for types.
    grammar
        Grammar of the field.
    field
        Canonical name of the field, used in error messages.
    quote_string_lists, optional
        Whether to wrap each element of a ``string list`` in double quotes.

    Returns
    -------
    text
        Formatted value, without the field name or separator.

    Raises
    ------
    MalformedValueError
        Raised if the value cannot be formatted with the grammar.
    """
    match grammar:
        case FieldGrammar.int:
            return _format_int(value, field)
        case FieldGrammar.double:
            return _format_double(value, field)
        case FieldGrammar.string:
            return str(value)
        case FieldGrammar.datatype:
            return _format_datatype(value, field)
        case FieldGrammar.int_list:
            return " ".join(_format_int(v, field) for v in _as_sequence(value, field))
        case FieldGrammar.double_list:
            return " ".join(_format_list_double(v, field) for v in _as_sequence(value, field))
        case FieldGrammar.string_list:
            items = [str(v) for v in _as_sequence(value, field)]
            if quote_string_lists:
                return " ".join(f'"{item}"' for item in items)
            return " ".join(items)
        case FieldGrammar.int_vector | FieldGrammar.int_matrix:
            return _format_matrix(value, field, _format_int, matrix=grammar is FieldGrammar.int_matrix)
        case FieldGrammar.double_vector | FieldGrammar.double_matrix:
            return _format_matrix(value, field, _format_double, matrix=grammar is FieldGrammar.double_matrix)
    raise AssertionError(f"Unhandled grammar {grammar!r}.")


def _parse_double(text: str, field: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise MalformedValueError(f"Expected a number, got {text!r}.", field=field) from None


def _parse_list_double(token: str, field: str) -> float:
    # Per-axis lists hold "none" for axes without a value.
    if token == _NONE:
        return math.nan
    return _parse_double(token, field)


def _parse_int(text: str, field: str) -> int:
    # Integers are parsed as floating point and truncated, so "3.9" reads as 3.
    try:
        return int(text)
    except ValueError:
        pass
    value = _parse_double(text, field)
    if not math.isfinite(value):
        raise MalformedValueError(f"Expected an integer, got {text!r}.", field=field)
    return int(value)


def _split_list(text: str, field: str) -> list[str]:
    tokens = text.split(" ")
    if not all(tokens):
        raise MalformedValueError(f"Empty element in list {text!r}.", field=field)
    return tokens


def _parse_string_list(text: str, field: str) -> list[str]:
    if '"' not in text:
        return text.lower().split(" ")
    if len(text) < 2 or not text.startswith('"') or not text.endswith('"'):
        raise MalformedValueError(f"Mixed quoting in string list {text!r}.", field=field)
    tokens = text.split('" "')
    tokens[0] = tokens[0][1:]
    tokens[-1] = tokens[-1][:-1]
    if any('"' in token for token in tokens):
        raise MalformedValueError(f"Mixed quoting in string list {text!r}.", field=field)
    return [token.lower() for token in tokens]


def _parse_row(token: str, field: str, integer: bool) -> list[float] | list[int]:
    if len(token) < 2 or not token.startswith("(") or not token.endswith(")"):
        raise MalformedValueError(f"Expected a parenthesized vector, got {token!r}.", field=field)
    elements = token[1:-1].split(",")
    if integer:
        return [_parse_int(element.strip(), field) for element in elements]
    return [_parse_double(element.strip(), field) for element in elements]


def _parse_vector(text: str, field: str, integer: bool) -> np.ndarray:
    matrix = _parse_matrix(text, field, integer)
    if matrix.shape[0] != 1:
        raise MalformedValueError(f"Expected a single vector, got {text!r}.", field=field)
    return matrix[0]


def _parse_matrix(text: str, field: str, integer: bool) -> np.ndarray:
    rows: list[list[float] | list[int] | None] = []
    for token in _split_list(text, field):
        if token == _NONE:
            rows.append(None)
        else:
            rows.append(_parse_row(token, field, integer))
    widths = {len(row) for row in rows if row is not None}
    if len(widths) > 1:
        raise MalformedValueError(f"Rows of {text!r} have different lengths.", field=field)
    width = widths.pop() if widths else 1
    has_none = any(row is None for row in rows)
    dtype = np.int64 if integer and not has_none else np.float64
    result = np.empty((len(rows), width), dtype=dtype)
    for i, row in enumerate(rows):
        result[i, :] = np.nan if row is None else row
    return result


def _format_int(value: Any, field: str) -> str:
    try:
        return str(int(value))
    except (TypeError, ValueError, OverflowError):
        raise MalformedValueError(f"Cannot format {value!r} as an integer.", field=field) from None


def _format_double(value: Any, field: str) -> str:
    try:
        return "%.16g" % float(value)
    except (TypeError, ValueError):
        raise MalformedValueError(f"Cannot format {value!r} as a number.", field=field) from None


def _format_list_double(value: Any, field: str) -> str:
    text = _format_double(value, field)
    return _NONE if text == "nan" else text


def _format_datatype(value: Any, field: str) -> str:
    if isinstance(value, NrrdType):
        return value.nrrd_name
    try:
        return NrrdType.resolve(str(value)).nrrd_name
    except UnknownTypeError:
        raise MalformedValueError(f"Cannot format {value!r} as an element type.", field=field) from None


def _as_sequence(value: Any, field: str) -> Sequence[Any]:
    if isinstance(value, str) or not isinstance(value, Sequence | np.ndarray):
        raise MalformedValueError(f"Expected a sequence, got {value!r}.", field=field)
    return value


def _format_matrix(value: Any, field: str, format_element: Any, matrix: bool) -> str:
    try:
        array = np.asarray(value)
        if array.dtype.kind not in "iu":
            array = array.astype(np.float64)
    except (TypeError, ValueError):
        raise MalformedValueError(f"Cannot format {value!r} as a numeric array.", field=field) from None
    if array.ndim == 1 and not matrix:
        array = array[np.newaxis, :]
    if array.ndim != 2:
        raise MalformedValueError(
            f"Expected a {'2' if matrix else '1'}-d array, got shape {array.shape}.", field=field
        )
    # Integer arrays are formatted exactly; only floating-point rows can be "none".
    nullable = array.dtype.kind == "f"
    rows = []
    for row in array:
        if nullable and np.isnan(row).all():
            rows.append(_NONE)
        else:
            rows.append("(" + ",".join(format_element(element, field) for element in row) + ")")
    return " ".join(rows)
