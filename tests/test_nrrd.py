# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

import gzip
import os
import tempfile
import unittest

import numpy as np
import pydantic

from nrrdio import (
    Endian,
    FieldGrammar,
    MalformedValueError,
    NrrdHeader,
    NrrdIOError,
    NrrdOptions,
    NrrdType,
    ShapeMismatchError,
    UnknownTypeError,
    UnsupportedEncodingError,
    UnsupportedFeatureError,
    UnsupportedVersionError,
    read,
    read_file,
    read_header,
    read_header_file,
    write,
    write_file,
)
from nrrdio.tests import SAMPLE_HEADER_2D, SAMPLE_HEADER_3D, assert_headers_equal, make_nrrd

DATA = np.arange(1, 28)


def _be(dtype: type) -> np.dtype:
    return np.dtype(dtype).newbyteorder(">")


class ReadTestCase(unittest.TestCase):
    """Tests for reading complete files from memory."""

    def test_ascii_1d(self) -> None:
        """Test a 1-d ascii file, written one value per line."""
        payload = "".join(f"{v}\n" for v in DATA).encode()
        array, header = read(make_nrrd("uint8", [27], "ascii", payload))
        self.assertEqual(array.dtype, np.dtype(np.uint8))
        self.assertEqual(array.shape, (27,))
        np.testing.assert_array_equal(array, DATA)
        self.assertEqual(header.sizes, [27])
        self.assertEqual(header.dimension, 1)

    def test_ascii_2d(self) -> None:
        """Test a 2-d ascii file, written one row per line."""
        data = DATA.astype(np.uint16).reshape(3, 9, order="F")
        payload = "".join(" ".join(str(v) for v in row) + "\n" for row in data.transpose()).encode()
        array, header = read(make_nrrd("uint16", [3, 9], "ascii", payload, extra=SAMPLE_HEADER_2D))
        self.assertEqual(array.shape, (3, 9))
        np.testing.assert_array_equal(array, data)
        self.assertEqual(header["spacedimension"], 2)
        self.assertEqual(header["spacings"], [1.0458, 2.0])
        self.assertEqual(header["spacedirections"].shape, (2, 1))
        self.assertTrue(np.isnan(header["spacedirections"]).all())
        np.testing.assert_array_equal(header["spaceorigin"], [100.0, 200.0])

    def test_raw_3d(self) -> None:
        """Test a 3-d raw file with calibration fields."""
        data = DATA.astype(np.uint32).reshape(3, 3, 3, order="F")
        payload = data.astype("<u4").tobytes(order="F")
        data_file = make_nrrd("uint32", [3, 3, 3], "raw", payload, endian="little", extra=SAMPLE_HEADER_3D)
        array, header = read(data_file)
        self.assertEqual(array.dtype, np.dtype(np.uint32))
        np.testing.assert_array_equal(array, data)
        np.testing.assert_array_equal(header["spacedirections"], np.identity(3))
        self.assertEqual(header.field_map["spacedirections"], "space directions")
        array, _ = read(
            make_nrrd("uint32", [3, 3, 3], "raw", payload, endian="little"), NrrdOptions(index_order="C")
        )
        np.testing.assert_array_equal(array, data.transpose())

    def test_gzip(self) -> None:
        data = DATA.astype(np.int16).reshape(3, 9, order="F") - 10
        payload = gzip.compress(data.astype("<i2").tobytes(order="F"))
        for encoding in ["gzip", "gz"]:
            with self.subTest(encoding=encoding):
                array, header = read(make_nrrd("short", [3, 9], encoding, payload, endian="little"))
                self.assertIs(header.type, NrrdType.int16)
                np.testing.assert_array_equal(array, data)

    def test_big_endian(self) -> None:
        """Test big-endian files with and without an endian field."""
        payload = DATA.astype(_be(np.uint16)).tobytes()
        array, header = read(make_nrrd("uint16", [27], "raw", payload, endian="big"))
        np.testing.assert_array_equal(array, DATA)
        self.assertTrue(array.dtype.isnative)
        self.assertEqual(header.endian, "big")
        data = make_nrrd("uint16", [27], "gzip", gzip.compress(payload))
        array, header = read(data, NrrdOptions(endian="big"))
        np.testing.assert_array_equal(array, DATA)
        self.assertEqual(header.endian, "big")
        array, header = read(data, NrrdOptions(endian="little", host_endian="little"))
        self.assertFalse(np.array_equal(array, DATA))
        self.assertEqual(header.endian, "little")

    def test_custom_field_map(self) -> None:
        extra = ["int vector:= (100,200,-300)", "double:= 25.5566", "version:= 2.1.0"]
        data = make_nrrd("uint8", [27], "ascii", " ".join(str(v) for v in DATA).encode(), extra=extra)
        options = NrrdOptions(custom_field_map={"Int Vector": "int vector", "double": FieldGrammar.double})
        _, header = read(data, options)
        np.testing.assert_array_equal(header["intvector"], [100, 200, -300])
        self.assertEqual(header["double"], 25.5566)
        self.assertEqual(header["version"], "2.1.0")

    def test_errors(self) -> None:
        with self.assertRaises(UnsupportedVersionError):
            read(make_nrrd("uint8", [27], "ascii", b"1", magic="NRRD0006"))
        with self.assertRaises(ShapeMismatchError):
            read(make_nrrd("uint8", [27], "ascii", b"1 2 3"))
        with self.assertRaises(ShapeMismatchError):
            read(make_nrrd("uint16", [27], "raw", b"\x00" * 53))
        with self.assertRaises(UnsupportedEncodingError):
            read(make_nrrd("uint8", [27], "bzip2", b""))

    def test_trailing_whitespace(self) -> None:
        """Test a file whose field values carry trailing spaces."""
        data = b"NRRD0004\ntype: uint8 \ndimension: 1\nsizes: 3 \nencoding: raw \n\n\x01\x02\x03"
        array, header = read(data)
        np.testing.assert_array_equal(array, [1, 2, 3])
        self.assertIs(header.type, NrrdType.uint8)
        self.assertEqual(header.encoding, "raw")

    def test_read_header(self) -> None:
        """Test reading a header without a (complete) payload."""
        data = make_nrrd("uint32", [3, 3, 3], "raw", b"\x00" * 10, endian="big", extra=SAMPLE_HEADER_3D)
        header = read_header(data)
        self.assertEqual(header.sizes, [3, 3, 3])
        self.assertEqual(header["space"], "left-posterior-superior")


class WriteTestCase(unittest.TestCase):
    """Tests for writing complete files to memory."""

    def test_round_trip(self) -> None:
        """Test writing and reading back every encoding and byte order."""
        for dtype in [np.uint8, np.int16, np.uint32, np.int64, np.float32, np.float64]:
            data = (DATA.reshape(3, 9) * 3 - 20).astype(dtype)
            for encoding in ["raw", "ascii", "gzip"]:
                for endian in ["little", "big"]:
                    with self.subTest(dtype=dtype, encoding=encoding, endian=endian):
                        written = write(data, {"encoding": encoding, "endian": endian})
                        array, header = read(written)
                        self.assertEqual(array.dtype, np.dtype(dtype))
                        np.testing.assert_array_equal(array, data)
                        self.assertEqual(header.encoding, encoding)
                        self.assertEqual(header.endian, endian)

    def test_round_trip_fractional(self) -> None:
        """Test that floating-point values with no short decimal form are
        reproduced exactly by every encoding.
        """
        rng = np.random.default_rng(11)
        values = np.concatenate([[0.1 + 0.2, 1.0 / 3.0, 2.0 / 3.0], np.arange(1, 10) / 7, rng.random(15)])
        for dtype in [np.float32, np.float64]:
            data = values.astype(dtype).reshape(3, 9)
            for encoding in ["raw", "ascii", "gzip"]:
                with self.subTest(dtype=dtype, encoding=encoding):
                    array, _ = read(write(data, {"encoding": encoding}))
                    self.assertEqual(array.dtype, np.dtype(dtype))
                    np.testing.assert_array_equal(array, data)
            with self.subTest(dtype=dtype, shape="1-d"):
                array, _ = read(write(data.ravel(), {"encoding": "ascii"}, NrrdOptions(ascii_delimiter=" ")))
                np.testing.assert_array_equal(array, data.ravel())

    def test_two_dimensional(self) -> None:
        """Test that a 3x9 array round-trips with 'sizes: 3 9'."""
        data = DATA.astype(np.uint16).reshape(3, 9)
        written = write(data, {"encoding": "ascii"})
        self.assertIn(b"\ndimension: 2\nsizes: 3 9\n", written)
        # Each line of the payload holds one value of the slowest axis.
        payload = written.split(b"\n\n", 1)[1]
        self.assertEqual(payload.splitlines()[0], " ".join(str(v) for v in data[:, 0]).encode())
        array, header = read(written)
        self.assertEqual(header.sizes, [3, 9])
        self.assertEqual(header.dimension, 2)
        np.testing.assert_array_equal(array, data)
        written = write(data, {"encoding": "raw"}, NrrdOptions(index_order="C"))
        self.assertIn(b"\nsizes: 9 3\n", written)
        array, _ = read(written, NrrdOptions(index_order="C"))
        np.testing.assert_array_equal(array, data)

    def test_defaults(self) -> None:
        """Test the fields derived from the array and the defaults of the
        others.
        """
        data = DATA.astype(_be(np.float64)).reshape(3, 3, 3)
        header = NrrdHeader({"type": "uchar", "sizes": [1], "dimension": 7, "lineskip": 3, "byteskip": -1})
        written = write(data, header, NrrdOptions(host_endian="little"))
        self.assertTrue(written.startswith(b"NRRD0005\n#"))
        read_back = read_header(written)
        self.assertIs(read_back.type, NrrdType.float64)
        self.assertEqual(read_back.dimension, 3)
        self.assertEqual(read_back.sizes, [3, 3, 3])
        self.assertEqual(read_back.encoding, "gzip")
        self.assertEqual(read_back.endian, "little")
        self.assertNotIn("lineskip", read_back)
        self.assertNotIn("byteskip", read_back)
        # The caller's header is untouched.
        self.assertEqual(header["type"], "uchar")
        self.assertEqual(header["lineskip"], 3)
        array, _ = read(written)
        np.testing.assert_array_equal(array, data)
        written = write(DATA.astype(np.uint8), options=NrrdOptions(endian="b"))
        self.assertIn(b"\nendian: big\n", written)

    def test_header_round_trip(self) -> None:
        """Test that calibration and custom fields survive a round trip."""
        data = make_nrrd("uint32", [3, 3, 3], "raw", b"\x00" * 108, endian="big", extra=SAMPLE_HEADER_3D)
        array, header = read(data)
        del header["encoding"]
        header["version"] = "2.1.0"
        header["measurement frame"] = np.array([[1.0, 0.0, 0.0], [np.nan] * 3, [0.0, 0.0, 1.0]])
        written = write(array, header)
        self.assertIn(b"\nversion:= 2.1.0\n", written)
        self.assertIn(b"\nmeasurement frame: (1,0,0) none (0,0,1)\n", written)
        new_array, new_header = read(written)
        np.testing.assert_array_equal(new_array, array)
        header["encoding"] = "gzip"
        assert_headers_equal(self, header, new_header)

    def test_errors(self) -> None:
        with self.assertRaises(UnknownTypeError):
            write(np.zeros(3, dtype=np.complex64))
        with self.assertRaises(UnsupportedFeatureError):
            write(DATA, {"data file": "other.raw"})
        with self.assertRaises(UnsupportedEncodingError):
            write(DATA, {"encoding": "bzip2"})
        with self.assertRaises(MalformedValueError):
            write(DATA, {"endian": "middle"})


class FileTestCase(unittest.TestCase):
    """Tests for reading and writing files through resource paths."""

    def setUp(self) -> None:
        self.dir = tempfile.TemporaryDirectory()
        self.addCleanup(self.dir.cleanup)

    def test_round_trip(self) -> None:
        path = os.path.join(self.dir.name, "volume.nrrd")
        data = DATA.astype(np.int32).reshape(3, 3, 3)
        write_file(path, data, {"encoding": "raw", "space": "left-posterior-superior"})
        array, header = read_file(path)
        np.testing.assert_array_equal(array, data)
        self.assertEqual(header["space"], "left-posterior-superior")
        header = read_header_file(path)
        self.assertEqual(header.sizes, [3, 3, 3])
        self.assertEqual(header.encoding, "raw")
        with self.assertRaises(NrrdIOError):
            write_file(path, data, overwrite=False)

    def test_missing(self) -> None:
        path = os.path.join(self.dir.name, "missing.nrrd")
        with self.assertRaises(NrrdIOError):
            read_file(path)
        with self.assertRaises(NrrdIOError):
            read_header_file(path)


class OptionsTestCase(unittest.TestCase):
    """Tests for NrrdOptions validation."""

    def test_defaults(self) -> None:
        options = NrrdOptions()
        self.assertTrue(options.suppress_warnings)
        self.assertEqual(options.ascii_delimiter, "\n")
        self.assertEqual(options.index_order, "F")
        self.assertIsNone(options.endian)
        self.assertIs(options.host_endian, Endian.host())
        self.assertIs(options.default_endian, Endian.host())

    def test_validation(self) -> None:
        options = NrrdOptions(
            endian="B", host_endian="l", custom_field_map={"My Field": "double matrix"}, ascii_delimiter=" "
        )
        self.assertIs(options.endian, Endian.big)
        self.assertIs(options.host_endian, Endian.little)
        self.assertIs(options.default_endian, Endian.big)
        self.assertEqual(options.custom_field_map, {"myfield": FieldGrammar.double_matrix})
        for kwargs in [
            {"ascii_delimiter": ""},
            {"ascii_delimiter": ", "},
            {"endian": "middle"},
            {"index_order": "A"},
            {"custom_field_map": {"x": "complex"}},
            {"compressor": "gzip"},
        ]:
            with self.subTest(kwargs=kwargs):
                with self.assertRaises(pydantic.ValidationError):
                    NrrdOptions(**kwargs)
        with self.assertRaises(pydantic.ValidationError):
            options.endian = Endian.little


if __name__ == "__main__":
    unittest.main()
