# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = ("Compressor", "GzipCompressor")

import dataclasses
import gzip
import zlib
from typing import Protocol, runtime_checkable

from ._errors import NrrdIOError


@runtime_checkable
class Compressor(Protocol):
    """Interface for the byte-buffer transform used by the ``gzip``
    encoding.
    """

    def compress(self, data: bytes) -> bytes:
        """Compress a raw payload."""
        ...

    def decompress(self, data: bytes) -> bytes:
        """Decompress a payload read from a file."""
        ...


@dataclasses.dataclass(frozen=True)
class GzipCompressor:
    """A `Compressor` backed by the standard library's `gzip` module."""

    level: int = 9
    """Compression level, from 0 (none) to 9 (smallest output)."""

    def compress(self, data: bytes) -> bytes:
        # A fixed mtime keeps the output deterministic.
        return gzip.compress(data, compresslevel=self.level, mtime=0)

    def decompress(self, data: bytes) -> bytes:
        try:
            return gzip.decompress(data)
        except (OSError, EOFError, zlib.error) as err:
            raise NrrdIOError("Could not decompress gzip payload.") from err
