# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

import unittest

import numpy as np

from nrrdio import NrrdType, UnknownTypeError


class NrrdTypeTestCase(unittest.TestCase):
    """Tests for the NrrdType enumeration."""

    def test_resolve_aliases(self) -> None:
        """Test that every C-style spelling maps to its canonical type."""
        self.assertIs(NrrdType.resolve("uchar"), NrrdType.uint8)
        self.assertIs(NrrdType.resolve("unsigned char"), NrrdType.uint8)
        self.assertIs(NrrdType.resolve("uint8_t"), NrrdType.uint8)
        self.assertIs(NrrdType.resolve("signed char"), NrrdType.int8)
        self.assertIs(NrrdType.resolve("signed short int"), NrrdType.int16)
        self.assertIs(NrrdType.resolve("unsigned short int"), NrrdType.uint16)
        self.assertIs(NrrdType.resolve("int"), NrrdType.int32)
        self.assertIs(NrrdType.resolve("uint"), NrrdType.uint32)
        self.assertIs(NrrdType.resolve("long long int"), NrrdType.int64)
        self.assertIs(NrrdType.resolve("ulonglong"), NrrdType.uint64)
        self.assertIs(NrrdType.resolve("float"), NrrdType.float32)
        self.assertIs(NrrdType.resolve("double"), NrrdType.float64)

    def test_resolve_failures(self) -> None:
        """Test that unknown and differently-cased aliases are rejected."""
        for alias in ["block", "UCHAR", "float32", "float64", "complex", ""]:
            with self.subTest(alias=alias):
                with self.assertRaises(UnknownTypeError) as cm:
                    NrrdType.resolve(alias)
                self.assertEqual(cm.exception.field, "type")

    def test_alias_closure(self) -> None:
        """Test that the canonical spelling of every type resolves back to
        that type.
        """
        for member in NrrdType:
            with self.subTest(member=member):
                self.assertIs(NrrdType.resolve(member.nrrd_name), member)
                self.assertIs(NrrdType.resolve(NrrdType.resolve(member.nrrd_name).nrrd_name), member)
        self.assertEqual(NrrdType.float32.nrrd_name, "float")
        self.assertEqual(NrrdType.float64.nrrd_name, "double")
        self.assertEqual(NrrdType.uint16.nrrd_name, "uint16")

    def test_numpy(self) -> None:
        """Test conversions to and from numpy types."""
        for member in NrrdType:
            with self.subTest(member=member):
                self.assertIs(NrrdType.from_numpy(member.to_numpy()), member)
                self.assertEqual(member.itemsize, np.dtype(member.to_numpy()).itemsize)
        self.assertIs(NrrdType.from_numpy(">u2"), NrrdType.uint16)
        self.assertIs(NrrdType.from_numpy(np.float32), NrrdType.float32)
        for dtype in [np.bool_, np.complex64, np.float16]:
            with self.subTest(dtype=dtype):
                with self.assertRaises(UnknownTypeError):
                    NrrdType.from_numpy(dtype)


if __name__ == "__main__":
    unittest.main()
