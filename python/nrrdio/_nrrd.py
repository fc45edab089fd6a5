# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = (
    "read",
    "read_file",
    "read_header",
    "read_header_file",
    "write",
    "write_file",
)

import io
import math
from collections.abc import Mapping
from logging import getLogger
from typing import IO, Any

import fsspec
import numpy as np
import numpy.typing as npt

from lsst.resources import ResourcePath, ResourcePathExpression

from ._dtypes import NrrdType
from ._errors import NrrdIOError, UnsupportedFeatureError
from ._header import NrrdHeader
from ._header_io import format_header, parse_header
from ._options import NrrdOptions
from ._payload import (
    Encoding,
    Endian,
    decode_payload,
    encode_payload,
    file_to_presentation,
    presentation_to_file,
)

_LOG = getLogger(__name__)

# Fields that describe the layout of a payload being read; they never apply
# to the payload that is written.
_READ_ONLY_FIELDS = ("lineskip", "byteskip")


def read(data: bytes, options: NrrdOptions | None = None) -> tuple[np.ndarray, NrrdHeader]:
    """Read a NRRD file held in memory.

    Parameters
    ----------
    data
        Complete contents of a NRRD file with an attached header.
    options, optional
        Reading options.

    Returns
    -------
    array
        Payload array in native byte order.  Its shape is the header's
        ``sizes`` when ``options.index_order`` is ``"F"`` (the default), and
        ``sizes`` reversed when it is ``"C"``.
    header
        Parsed header.

    Raises
    ------
    NrrdError
        Raised (via one of its subclasses) if the file is invalid.
    """
    if options is None:
        options = NrrdOptions()
    stream = io.BytesIO(data)
    header = parse_header(stream, options)
    flat = decode_payload(
        stream.read(),
        header.type,
        math.prod(header.sizes),
        Encoding.resolve(header.encoding),
        Endian.resolve(header["endian"]),
        options.host_endian,
        options.compressor,
        lineskip=header.get("lineskip", 0),
        byteskip=header.get("byteskip", 0),
    )
    _LOG.debug("Read %s payload with sizes %s.", header.type, header.sizes)
    return file_to_presentation(flat, header.sizes, options.index_order), header


def read_header(data: bytes | IO[bytes], options: NrrdOptions | None = None) -> NrrdHeader:
    """Read only the header of a NRRD file.

    Parameters
    ----------
    data
        Contents of a NRRD file (the payload may be missing or truncated), or
        a binary stream positioned at its start.  Streams are left
        positioned at the start of the payload.
    options, optional
        Reading options.

    Returns
    -------
    header
        Parsed header.
    """
    if isinstance(data, bytes | bytearray | memoryview):
        data = io.BytesIO(data)
    return parse_header(data, options)


def write(
    array: npt.ArrayLike,
    header: Mapping[str, Any] | None = None,
    options: NrrdOptions | None = None,
) -> bytes:
    """Write a NRRD file to memory.

    Parameters
    ----------
    array
        Array to write.  One-dimensional arrays are written as vectors;
        otherwise axes are interpreted according to ``options.index_order``.
    header, optional
        Fields to write.  The ``type``, ``dimension``, and ``sizes`` fields
        are always derived from ``array``; ``encoding`` defaults to
        ``gzip`` and ``endian`` to ``options.endian`` or the host byte order.
        The given header is not modified.
    options, optional
        Writing options.

    Returns
    -------
    data
        Complete contents of the NRRD file.

    Raises
    ------
    NrrdError
        Raised (via one of its subclasses) if the array or header cannot be
        written.
    """
    if options is None:
        options = NrrdOptions()
    array = np.asarray(array)
    nrrd_type = NrrdType.from_numpy(array.dtype)
    if isinstance(header, NrrdHeader):
        out = header.copy()
    else:
        out = NrrdHeader(header if header is not None else {})
    if "datafile" in out:
        raise UnsupportedFeatureError("Detached data files are not supported.", field="datafile")
    for field in _READ_ONLY_FIELDS:
        out.pop(field, None)
    out.setdefault("encoding", Encoding.gzip.value)
    out.setdefault("endian", options.default_endian.value)
    encoding = Encoding.resolve(out.encoding)
    endian = Endian.resolve(out["endian"])
    sizes, flat = presentation_to_file(array, options.index_order)
    flat = flat.astype(flat.dtype.newbyteorder("="), copy=False)
    out["type"] = nrrd_type
    out["dimension"] = len(sizes)
    out["sizes"] = sizes
    payload = encode_payload(
        flat,
        encoding,
        endian,
        options.host_endian,
        options.compressor,
        ascii_delimiter=options.ascii_delimiter,
        row_length=sizes[0] if len(sizes) == 2 else None,
    )
    _LOG.debug("Wrote %s payload with sizes %s as %s.", nrrd_type, sizes, encoding)
    return format_header(out, options) + payload


def read_file(
    path: ResourcePathExpression, options: NrrdOptions | None = None
) -> tuple[np.ndarray, NrrdHeader]:
    """Read a NRRD file.

    Parameters
    ----------
    path
        File to read; convertible to `lsst.resources.ResourcePath`.
    options, optional
        Reading options.

    Returns
    -------
    array
        Payload array; see `read`.
    header
        Parsed header.
    """
    resource = ResourcePath(path)
    try:
        data = resource.read()
    except OSError as err:
        raise NrrdIOError(f"Could not read {resource}.") from err
    return read(data, options)


def read_header_file(path: ResourcePathExpression, options: NrrdOptions | None = None) -> NrrdHeader:
    """Read only the header of a NRRD file.

    Parameters
    ----------
    path
        File to read; convertible to `lsst.resources.ResourcePath`.
    options, optional
        Reading options.

    Returns
    -------
    header
        Parsed header.

    Notes
    -----
    Unlike `read_file`, this streams the file and stops at the end of the
    header, so the payload is never transferred.
    """
    resource = ResourcePath(path)
    try:
        fs: fsspec.AbstractFileSystem
        fs, fp = resource.to_fsspec()
        with fs.open(fp, "rb") as stream:
            return parse_header(stream, options)
    except OSError as err:
        raise NrrdIOError(f"Could not read {resource}.") from err


def write_file(
    path: ResourcePathExpression,
    array: npt.ArrayLike,
    header: Mapping[str, Any] | None = None,
    options: NrrdOptions | None = None,
    *,
    overwrite: bool = True,
) -> None:
    """Write a NRRD file.

    Parameters
    ----------
    path
        File to write; convertible to `lsst.resources.ResourcePath`.
    array
        Array to write; see `write`.
    header, optional
        Fields to write; see `write`.
    options, optional
        Writing options.
    overwrite, optional
        Whether to replace an existing file.
    """
    data = write(array, header, options)
    resource = ResourcePath(path)
    try:
        resource.write(data, overwrite=overwrite)
    except OSError as err:
        raise NrrdIOError(f"Could not write {resource}.") from err
