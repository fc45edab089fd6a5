# This file is part of nrrdio.
#
# See the COPYRIGHT file at the top-level directory of this distribution
# for details of code ownership.
#
# Use of this source code is governed by a 3-clause BSD-style
# license that can be found in the LICENSE file.

from __future__ import annotations

__all__ = ("NrrdOptions",)

from typing import Annotated, Any, Literal

import pydantic

from ._compression import Compressor, GzipCompressor
from ._errors import MalformedValueError
from ._grammar import FieldGrammar, canonical_field_name
from ._payload import Endian


def _validate_endian(value: Any) -> Any:
    if isinstance(value, str) and not isinstance(value, Endian):
        try:
            return Endian.resolve(value)
        except MalformedValueError as err:
            raise ValueError(str(err)) from None
    return value


_EndianOption = Annotated[Endian, pydantic.BeforeValidator(_validate_endian)]


class NrrdOptions(pydantic.BaseModel):
    """Options that control how NRRD files are read and written.

    All options have defaults, so ``NrrdOptions()`` is always valid; the
    entry points use it when no options are passed.
    """

    suppress_warnings: bool = True
    """Whether to skip logging a warning for each field that is neither a
    standard NRRD field nor in `custom_field_map`.
    """

    ascii_delimiter: Annotated[str, pydantic.Field(min_length=1, max_length=1)] = "\n"
    """Character written after each element of an ASCII payload with other
    than two dimensions.
    """

    quote_string_lists: bool = False
    """Whether to write ``string list`` fields with each element in double
    quotes.
    """

    custom_field_map: dict[str, FieldGrammar] = pydantic.Field(default_factory=dict)
    """Grammars for non-standard fields, keyed by field name.

    Names are normalized like header field names (lower-cased, whitespace
    removed).  Values may be given as `FieldGrammar` members or their names,
    e.g. ``"int vector"``.
    """

    endian: _EndianOption | None = None
    """Byte order to assume for files with no ``endian`` field, and to write
    when the header being written has none.  `host_endian` is used if this is
    `None`.
    """

    host_endian: _EndianOption = pydantic.Field(default_factory=Endian.host)
    """Byte order of the arrays returned by reads and accepted by writes.

    Defaults to the byte order of the running interpreter.
    """

    index_order: Literal["F", "C"] = "F"
    """Axis order of arrays handed to and accepted from callers.

    With ``"F"`` an array's shape is the header's ``sizes`` (fastest-varying
    axis first); with ``"C"`` it is ``sizes`` reversed.  One-dimensional
    arrays are the same either way.
    """

    compressor: Compressor = pydantic.Field(default_factory=GzipCompressor)
    """Transform used for the ``gzip`` encoding."""

    model_config = pydantic.ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @pydantic.field_validator("custom_field_map", mode="after")
    @classmethod
    def _normalize_custom_field_names(cls, value: dict[str, FieldGrammar]) -> dict[str, FieldGrammar]:
        return {canonical_field_name(name)[0]: grammar for name, grammar in value.items()}

    @property
    def default_endian(self) -> Endian:
        """The byte order used when a header does not specify one."""
        return self.endian if self.endian is not None else self.host_endian
