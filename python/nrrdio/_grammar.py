# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

"""Mapping from header field names to the grammars of their values."""

from __future__ import annotations

__all__ = (
    "FIELD_ORDER",
    "REQUIRED_FIELDS",
    "STANDARD_FIELDS",
    "FieldGrammar",
    "canonical_field_name",
    "resolve_grammar",
)

import enum
import re
from collections.abc import Mapping
from logging import getLogger
from types import MappingProxyType

_LOG = getLogger(__name__)


class FieldGrammar(enum.StrEnum):
    """The value grammars a header field may use.

    Member values are the names accepted in custom field maps.
    """

    int = "int"
    double = "double"
    string = "string"
    datatype = "datatype"
    int_list = "int list"
    double_list = "double list"
    string_list = "string list"
    int_vector = "int vector"
    double_vector = "double vector"
    int_matrix = "int matrix"
    double_matrix = "double matrix"


STANDARD_FIELDS: Mapping[str, FieldGrammar] = MappingProxyType(
    {
        "dimension": FieldGrammar.int,
        "lineskip": FieldGrammar.int,
        "byteskip": FieldGrammar.int,
        "spacedimension": FieldGrammar.int,
        "min": FieldGrammar.double,
        "max": FieldGrammar.double,
        "oldmin": FieldGrammar.double,
        "oldmax": FieldGrammar.double,
        "type": FieldGrammar.datatype,
        "endian": FieldGrammar.string,
        "encoding": FieldGrammar.string,
        "content": FieldGrammar.string,
        "sampleunits": FieldGrammar.string,
        "datafile": FieldGrammar.string,
        "space": FieldGrammar.string,
        "sizes": FieldGrammar.int_list,
        "spacings": FieldGrammar.double_list,
        "thicknesses": FieldGrammar.double_list,
        "axismins": FieldGrammar.double_list,
        "axismaxs": FieldGrammar.double_list,
        "kinds": FieldGrammar.string_list,
        "labels": FieldGrammar.string_list,
        "units": FieldGrammar.string_list,
        "spaceunits": FieldGrammar.string_list,
        "centerings": FieldGrammar.string_list,
        "spaceorigin": FieldGrammar.double_vector,
        "spacedirections": FieldGrammar.double_matrix,
        "measurementframe": FieldGrammar.int_matrix,
    }
)
"""Grammars of the fields defined by the NRRD format, keyed by canonical
(lower-case, whitespace-free) name.
"""

FIELD_ORDER: tuple[str, ...] = (
    "type",
    "dimension",
    "spacedimension",
    "space",
    "sizes",
    "spacedirections",
    "kinds",
    "endian",
    "encoding",
    "min",
    "max",
    "oldmin",
    "oldmax",
    "content",
    "sampleunits",
    "spacings",
    "thicknesses",
    "axismins",
    "axismaxs",
    "centerings",
    "labels",
    "units",
    "spaceunits",
    "spaceorigin",
    "measurementframe",
    "datafile",
)
"""Order in which fields are written with the ``field: value`` syntax.

Fields not in this tuple follow in insertion order as ``key:= value`` pairs.
"""

REQUIRED_FIELDS: tuple[str, ...] = ("sizes", "dimension", "encoding", "type")

_WHITESPACE = re.compile(r"\s+")


def canonical_field_name(name: str) -> tuple[str, str | None]:
    """Normalize a field name as it appears in a header.

    Parameters
    ----------
    name
        Field name, possibly with uppercase letters and spaces.

    Returns
    -------
    canonical
        Lower-case name with all whitespace removed.
    display
        The lower-cased original name if it contained whitespace (so it can be
        restored on write), or `None`.
    """
    lowered = name.lower()
    canonical = _WHITESPACE.sub("", lowered)
    if canonical != lowered:
        return canonical, lowered
    return canonical, None


def resolve_grammar(
    field: str,
    custom_field_map: Mapping[str, FieldGrammar] | None = None,
    suppress_warnings: bool = True,
) -> FieldGrammar:
    """Return the grammar used to parse and format a field.

    Parameters
    ----------
    field
        Canonical field name.
    custom_field_map, optional
        Grammars for fields outside the standard set, keyed by canonical
        name.
    suppress_warnings, optional
        If `False`, log a warning when a field is neither standard nor in
        ``custom_field_map``.

    Returns
    -------
    grammar
        The field's grammar; unknown fields are opaque strings.
    """
    if (grammar := STANDARD_FIELDS.get(field)) is not None:
        return grammar
    if custom_field_map and (grammar := custom_field_map.get(field)) is not None:
        return FieldGrammar(grammar)
    if not suppress_warnings:
        _LOG.warning(
            "Unknown field %r; reading it as a string.  If this is a known custom field, add its "
            "grammar to the custom field map.",
            field,
        )
    return FieldGrammar.string
