"""Wire codec — length-prefixed binary records for persisted value graphs.

Layout primitives:

- header: ``b"VGRA"`` followed by a one-byte format version;
- counts: big-endian signed 32-bit integers;
- objects: a big-endian unsigned 32-bit length, then a pickle payload;
- graph type: one flag byte (see :meth:`GraphType.to_flags`).

Objects are unpickled on read, so only read streams from trusted sources.
Errors raised by the underlying stream propagate unchanged.
"""

from __future__ import annotations

import pickle
import struct
from typing import Any, BinaryIO

from valuegraph.exceptions import GraphFormatError
from valuegraph.graph.types import GraphType

MAGIC = b"VGRA"
FORMAT_VERSION = 1

_INT = struct.Struct(">i")
_LENGTH = struct.Struct(">I")
_BYTE = struct.Struct(">B")
_INT_MAX = 2**31 - 1


class GraphWriter:
    """Write wire records to a binary stream."""

    def __init__(self, stream: BinaryIO, *, protocol: int = pickle.DEFAULT_PROTOCOL) -> None:
        self._stream = stream
        self._protocol = protocol

    def write_header(self) -> None:
        self._stream.write(MAGIC + _BYTE.pack(FORMAT_VERSION))

    def write_int(self, value: int) -> None:
        """Write a non-negative count as a signed 32-bit integer."""
        if value < 0:
            msg = f"Count must be non-negative, got {value}"
            raise ValueError(msg)
        if value > _INT_MAX:
            msg = f"Count {value} does not fit in a signed 32-bit integer"
            raise OverflowError(msg)
        self._stream.write(_INT.pack(value))

    def write_object(self, obj: Any) -> None:
        payload = pickle.dumps(obj, protocol=self._protocol)
        self._stream.write(_LENGTH.pack(len(payload)))
        self._stream.write(payload)

    def write_type(self, graph_type: GraphType) -> None:
        self._stream.write(_BYTE.pack(graph_type.to_flags()))


class GraphReader:
    """Read wire records written by :class:`GraphWriter`.

    Malformed or truncated input raises ``GraphFormatError``.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream

    def read_header(self) -> int:
        """Validate magic and version.  Returns the format version."""
        magic = self._read_exact(len(MAGIC))
        if magic != MAGIC:
            msg = f"Not a value graph stream (magic {magic!r})"
            raise GraphFormatError(msg)
        (version,) = _BYTE.unpack(self._read_exact(_BYTE.size))
        if version != FORMAT_VERSION:
            msg = f"Unsupported format version: {version}"
            raise GraphFormatError(msg)
        return version

    def read_int(self) -> int:
        """Read a count.  Negative values are rejected."""
        (value,) = _INT.unpack(self._read_exact(_INT.size))
        if value < 0:
            msg = f"Negative count in stream: {value}"
            raise GraphFormatError(msg)
        return value

    def read_object(self) -> Any:
        (length,) = _LENGTH.unpack(self._read_exact(_LENGTH.size))
        payload = self._read_exact(length)
        try:
            return pickle.loads(payload)  # noqa: S301
        except (
            pickle.UnpicklingError,
            EOFError,
            ImportError,
            AttributeError,
            ValueError,
            KeyError,
            IndexError,
            TypeError,
        ) as e:
            msg = f"Corrupt object record: {e}"
            raise GraphFormatError(msg) from e

    def read_type(self) -> GraphType:
        (flags,) = _BYTE.unpack(self._read_exact(_BYTE.size))
        return GraphType.from_flags(flags)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_exact(self, size: int) -> bytes:
        """Read exactly *size* bytes, looping over short reads."""
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = self._stream.read(remaining)
            if not chunk:
                msg = f"Unexpected end of stream: wanted {size} bytes, got {size - remaining}"
                raise GraphFormatError(msg)
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)
