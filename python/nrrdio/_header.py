# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = ("NrrdHeader",)

from collections.abc import Iterable, Iterator, Mapping, MutableMapping
from typing import Any

import numpy as np

from ._dtypes import NrrdType
from ._grammar import canonical_field_name


class NrrdHeader(MutableMapping[str, Any]):
    """The metadata record of a NRRD file.

    Parameters
    ----------
    fields, optional
        Initial field values.  Keys are normalized as if they had been read
        from a header: lower-cased, with whitespace removed.
    field_map, optional
        Mapping from canonical field name to the display name (with spaces)
        to use when writing it.  Entries derived from ``fields`` keys take
        precedence.

    Notes
    -----
    Fields keep the order in which they were inserted, which is the order in
    which any non-standard fields are written.  Values are the Python types
    produced by `parse_value`; the `type`, `dimension`, `sizes`, `encoding`,
    and `endian` properties provide typed access to the fields every reader
    and writer needs.
    """

    def __init__(
        self,
        fields: Mapping[str, Any] | Iterable[tuple[str, Any]] = (),
        /,
        *,
        field_map: Mapping[str, str] | None = None,
    ):
        self._fields: dict[str, Any] = {}
        self._field_map: dict[str, str] = dict(field_map) if field_map is not None else {}
        self.update(fields)

    @property
    def field_map(self) -> Mapping[str, str]:
        """Mapping from canonical field name to the display name used in the
        header the field was read from.

        Only names that contained whitespace have entries.
        """
        return self._field_map

    def display_name(self, field: str) -> str:
        """Return the name to write for a canonical field name."""
        return self._field_map.get(field, field)

    @property
    def type(self) -> NrrdType:
        """Element type of the payload (`NrrdType`)."""
        return self["type"]

    @property
    def dimension(self) -> int:
        """Number of axes of the payload."""
        return self["dimension"]

    @property
    def sizes(self) -> list[int]:
        """Number of elements along each axis, fastest-varying first."""
        return self["sizes"]

    @property
    def shape(self) -> tuple[int, ...]:
        """`sizes` as a tuple."""
        return tuple(self.sizes)

    @property
    def encoding(self) -> str:
        """Name of the payload encoding, as written in the header."""
        return self["encoding"]

    @property
    def endian(self) -> str | None:
        """Byte order of the payload, or `None` if the field is absent."""
        return self.get("endian")

    def copy(self) -> NrrdHeader:
        """Return an independent copy of this header."""
        result = NrrdHeader(field_map=self._field_map)
        for key, value in self._fields.items():
            result._fields[key] = value.copy() if isinstance(value, np.ndarray | list) else value
        return result

    def __getitem__(self, key: str) -> Any:
        return self._fields[canonical_field_name(key)[0]]

    def __setitem__(self, key: str, value: Any) -> None:
        canonical, display = canonical_field_name(key)
        if display is not None:
            self._field_map[canonical] = display
        self._fields[canonical] = value

    def __delitem__(self, key: str) -> None:
        canonical = canonical_field_name(key)[0]
        del self._fields[canonical]
        self._field_map.pop(canonical, None)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NrrdHeader):
            return NotImplemented
        if self._fields.keys() != other._fields.keys() or self._field_map != other._field_map:
            return False
        return all(_values_equal(self._fields[k], other._fields[k]) for k in self._fields)

    def __repr__(self) -> str:
        return f"NrrdHeader({self._fields!r}, field_map={self._field_map!r})"


def _values_equal(a: Any, b: Any) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        a = np.asarray(a)
        b = np.asarray(b)
        numeric = a.dtype.kind in "iuf" and b.dtype.kind in "iuf"
        return a.shape == b.shape and bool(np.array_equal(a, b, equal_nan=numeric))
    if isinstance(a, float) and isinstance(b, float) and a != a and b != b:
        return True
    if isinstance(a, list) and isinstance(b, list):
        return len(a) == len(b) and all(_values_equal(x, y) for x, y in zip(a, b))
    return a == b
