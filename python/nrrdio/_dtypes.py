# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = ("NrrdType",)

import enum
from types import MappingProxyType

import numpy as np
import numpy.typing as npt

from ._errors import UnknownTypeError


class NrrdType(enum.StrEnum):
    """Enumeration of the array element types supported by NRRD files."""

    int8 = enum.auto()
    uint8 = enum.auto()
    int16 = enum.auto()
    uint16 = enum.auto()
    int32 = enum.auto()
    uint32 = enum.auto()
    int64 = enum.auto()
    uint64 = enum.auto()
    float32 = enum.auto()
    float64 = enum.auto()

    @classmethod
    def resolve(cls, alias: str) -> NrrdType:
        """Look up the element type for any of the C-style spellings NRRD
        allows in its ``type`` field.

        Parameters
        ----------
        alias
            Type name as written in a header, e.g. ``"unsigned char"`` or
            ``"uint8_t"``.  Matching is case-sensitive.

        Returns
        -------
        member
            Enumeration member.

        Raises
        ------
        UnknownTypeError
            Raised if the alias is not recognized.
        """
        try:
            return _ALIASES[alias]
        except KeyError:
            raise UnknownTypeError(f"Unknown NRRD element type {alias!r}.", field="type") from None

    @property
    def nrrd_name(self) -> str:
        """The canonical spelling of this type in a NRRD header."""
        match self:
            case NrrdType.float32:
                return "float"
            case NrrdType.float64:
                return "double"
        return self.value

    @property
    def itemsize(self) -> int:
        """Size of a single element in bytes."""
        return np.dtype(self.to_numpy()).itemsize

    def to_numpy(self) -> type:
        """Convert an enumeration member to the corresponding numpy scalar
        type object.

        Returns
        -------
        scalar_type
            Numpy scalar type, e.g. `numpy.int16`.
        """
        return getattr(np, self.value)

    @classmethod
    def from_numpy(cls, dtype: npt.DTypeLike) -> NrrdType:
        """Construct an enumeration member from anything that can be coerced
        to `numpy.dtype`.

        Parameters
        ----------
        dtype
            Object convertible to `numpy.dtype`.

        Returns
        -------
        member
            Enumeration member.

        Raises
        ------
        UnknownTypeError
            Raised if the dtype cannot be stored in a NRRD file.
        """
        name = np.dtype(dtype).name
        try:
            return cls(name)
        except ValueError:
            raise UnknownTypeError(f"Arrays with dtype {name!r} cannot be written to NRRD.") from None


_ALIASES = MappingProxyType(
    {
        alias: member
        for member, aliases in [
            (NrrdType.int8, ["signed char", "int8", "int8_t"]),
            (NrrdType.uint8, ["uchar", "unsigned char", "uint8", "uint8_t"]),
            (
                NrrdType.int16,
                ["short", "short int", "signed short", "signed short int", "int16", "int16_t"],
            ),
            (NrrdType.uint16, ["ushort", "unsigned short", "unsigned short int", "uint16", "uint16_t"]),
            (NrrdType.int32, ["int", "signed int", "int32", "int32_t"]),
            (NrrdType.uint32, ["uint", "unsigned int", "uint32", "uint32_t"]),
            (
                NrrdType.int64,
                [
                    "longlong",
                    "long long",
                    "long long int",
                    "signed long long",
                    "signed long long int",
                    "int64",
                    "int64_t",
                ],
            ),
            (
                NrrdType.uint64,
                ["ulonglong", "unsigned long long", "unsigned long long int", "uint64", "uint64_t"],
            ),
            (NrrdType.float32, ["float"]),
            (NrrdType.float64, ["double"]),
        ]
        for alias in aliases
    }
)
