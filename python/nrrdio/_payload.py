# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

"""Decoding and encoding of the data that follows a NRRD header.

NRRD payloads store the fastest-varying axis first, which is the order of
`NrrdHeader.sizes`.  The decoders here produce flat arrays in that element
order; `file_to_presentation` and `presentation_to_file` convert between a
flat payload and the N-d arrays handed to callers.
"""

from __future__ import annotations

__all__ = (
    "Encoding",
    "Endian",
    "IndexOrder",
    "decode_payload",
    "encode_payload",
    "file_to_presentation",
    "presentation_to_file",
)

import enum
import math
import sys
from collections.abc import Sequence
from typing import Literal, TypeAlias

import numpy as np

from ._compression import Compressor
from ._dtypes import NrrdType
from ._errors import MalformedValueError, ShapeMismatchError, UnsupportedEncodingError

IndexOrder: TypeAlias = Literal["F", "C"]


class Encoding(enum.StrEnum):
    """Payload encodings supported by this package."""

    raw = "raw"
    ascii = "ascii"
    gzip = "gzip"

    @classmethod
    def resolve(cls, name: str) -> Encoding:
        """Look up an encoding from any of its spellings in a header.

        Raises
        ------
        UnsupportedEncodingError
            Raised if the name does not correspond to a supported encoding.
        """
        try:
            return _ENCODING_ALIASES[name.lower()]
        except KeyError:
            raise UnsupportedEncodingError(f"Unsupported encoding {name!r}.", field="encoding") from None


_ENCODING_ALIASES = {
    "raw": Encoding.raw,
    "ascii": Encoding.ascii,
    "text": Encoding.ascii,
    "txt": Encoding.ascii,
    "gzip": Encoding.gzip,
    "gz": Encoding.gzip,
}


class Endian(enum.StrEnum):
    """Byte orders of binary payloads."""

    little = "little"
    big = "big"

    @classmethod
    def resolve(cls, name: str) -> Endian:
        """Look up a byte order from ``little``, ``big``, or their one-letter
        abbreviations (either case).
        """
        match name:
            case "little" | "l" | "L":
                return cls.little
            case "big" | "b" | "B":
                return cls.big
        raise MalformedValueError(f"Invalid byte order {name!r}.", field="endian")

    @classmethod
    def host(cls) -> Endian:
        """Return the byte order of the running interpreter."""
        return cls(sys.byteorder)


def decode_payload(
    data: bytes,
    nrrd_type: NrrdType,
    count: int,
    encoding: Encoding,
    source_endian: Endian,
    host_endian: Endian,
    compressor: Compressor,
    *,
    lineskip: int = 0,
    byteskip: int = 0,
) -> np.ndarray:
    """Decode the payload of a NRRD file into a flat array.

    Parameters
    ----------
    data
        All bytes following the header's blank terminator line.
    nrrd_type
        Element type of the payload.
    count
        Number of elements (the product of the header's sizes).
    encoding
        Payload encoding.
    source_endian
        Byte order the payload was written with.
    host_endian
        Byte order of the returned array.  Binary payloads are byte-swapped
        when this differs from ``source_endian``; ASCII payloads never are.
    compressor
        Transform used to decompress ``gzip`` payloads.
    lineskip, optional
        Number of lines to discard before the payload.
    byteskip, optional
        Number of bytes to discard after any decompression.  ``-1`` means the
        binary data occupies the end of the (decompressed) payload.

    Returns
    -------
    array
        Contiguous 1-d array of ``count`` elements, in file order.
    """
    data = _skip_lines(data, lineskip)
    dtype = np.dtype(nrrd_type.to_numpy())
    match encoding:
        case Encoding.ascii:
            return _decode_ascii(data[byteskip:] if byteskip > 0 else data, dtype, count)
        case Encoding.gzip:
            data = compressor.decompress(data)
    nbytes = count * dtype.itemsize
    if byteskip == -1:
        data = data[len(data) - nbytes :] if len(data) >= nbytes else b""
    elif byteskip > 0:
        data = data[byteskip:]
    if len(data) < nbytes:
        raise ShapeMismatchError(
            f"Payload holds {len(data)} bytes; {count} elements of type {nrrd_type.nrrd_name!r} "
            f"need {nbytes}."
        )
    array = np.frombuffer(data, dtype=dtype, count=count).copy()
    if source_endian != host_endian:
        array.byteswap(inplace=True)
    return array


def encode_payload(
    flat: np.ndarray,
    encoding: Encoding,
    target_endian: Endian,
    host_endian: Endian,
    compressor: Compressor,
    *,
    ascii_delimiter: str = "\n",
    row_length: int | None = None,
) -> bytes:
    """Encode a flat array (in file order) as a NRRD payload.

    Parameters
    ----------
    flat
        1-d array of elements, fastest-varying axis first.
    encoding
        Payload encoding.
    target_endian
        Byte order to write binary payloads in.
    host_endian
        Byte order of ``flat``'s elements.
    compressor
        Transform used to compress ``gzip`` payloads.
    ascii_delimiter, optional
        Text written after each element of an ASCII payload.
    row_length, optional
        If given, ASCII payloads are written as lines of this many
        space-separated elements instead of using ``ascii_delimiter``.

    Returns
    -------
    data
        Encoded payload.
    """
    if encoding is Encoding.ascii:
        return _encode_ascii(flat, ascii_delimiter, row_length)
    array = np.ascontiguousarray(flat)
    if target_endian != host_endian:
        array = array.byteswap()
    data = array.tobytes()
    if encoding is Encoding.gzip:
        data = compressor.compress(data)
    return data


def file_to_presentation(flat: np.ndarray, sizes: Sequence[int], index_order: IndexOrder = "F") -> np.ndarray:
    """Shape a flat payload array for callers.

    Parameters
    ----------
    flat
        1-d array in file order.
    sizes
        Axis sizes, fastest-varying first.
    index_order, optional
        ``"F"`` to index the result with the fastest-varying axis first (so
        ``result.shape == tuple(sizes)``), or ``"C"`` to index it with the
        slowest-varying axis first.

    Returns
    -------
    array
        View of ``flat``.  One-dimensional payloads are returned unchanged.
    """
    if len(sizes) <= 1:
        return flat
    array = flat.reshape(tuple(reversed(sizes)))
    if index_order == "F":
        return array.transpose()
    return array


def presentation_to_file(array: np.ndarray, index_order: IndexOrder = "F") -> tuple[list[int], np.ndarray]:
    """Invert `file_to_presentation`.

    Parameters
    ----------
    array
        Array as handed to callers.
    index_order, optional
        Index order of ``array``; see `file_to_presentation`.

    Returns
    -------
    sizes
        Axis sizes, fastest-varying first.
    flat
        1-d array in file order.
    """
    if array.ndim <= 1:
        return [int(array.size)], array.reshape(-1)
    if index_order == "F":
        array = array.transpose()
    return [int(n) for n in reversed(array.shape)], np.ascontiguousarray(array).reshape(-1)


def _skip_lines(data: bytes, lineskip: int) -> bytes:
    for _ in range(lineskip):
        end = data.find(b"\n")
        if end < 0:
            return b""
        data = data[end + 1 :]
    return data


def _decode_ascii(data: bytes, dtype: np.dtype, count: int) -> np.ndarray:
    tokens = data.split()
    if len(tokens) != count:
        raise ShapeMismatchError(f"ASCII payload holds {len(tokens)} values; expected {count}.")
    try:
        if dtype.kind == "f":
            return np.array([float(token) for token in tokens], dtype=np.float64).astype(dtype)
        return np.array([_ascii_int(token) for token in tokens], dtype=dtype)
    except (ValueError, OverflowError) as err:
        raise MalformedValueError(f"Invalid value in ASCII payload: {err}.") from err


def _ascii_int(token: bytes) -> int:
    try:
        return int(token)
    except ValueError:
        pass
    value = float(token)
    if not math.isfinite(value):
        raise ValueError(f"{token.decode(errors='replace')!r} is not an integer")
    return int(value)


def _encode_ascii(flat: np.ndarray, delimiter: str, row_length: int | None) -> bytes:
    # Floats are written with the shortest digits that read back exactly.
    match flat.dtype.kind, flat.dtype.itemsize:
        case "f", 8:
            values = [repr(value) for value in flat.tolist()]
        case "f", _:
            values = [str(value) for value in flat]
        case _:
            values = ["%d" % value for value in flat.tolist()]
    if row_length is not None and row_length > 0:
        lines = [" ".join(values[i : i + row_length]) for i in range(0, len(values), row_length)]
        return "".join(line + "\n" for line in lines).encode("ascii")
    return "".join(value + delimiter for value in values).encode("ascii")
