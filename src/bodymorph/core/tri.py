"""
TRI Morph File I/O
==================

Single responsibility: Decode (and encode) sparse per-vertex morph files.

Binary layout, little-endian throughout::

    char[4]  magic          "PIRT"
    u16      version        1
    u8       n              + n bytes UTF-8 set name
    u16      channel count
    per channel:
        u8   m              + m bytes UTF-8 channel name
        f32  scale
        u16  num affected
        num affected x {u16 index, i16 dx, i16 dy, i16 dz}

Decoding is a single linear pass. Vertex entries are copied out of the
input buffer into read-only numpy arrays, so the result does not depend on
the caller keeping the buffer alive.
"""

import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from bodymorph.core.exceptions import (
    BadMagicError,
    OverrunError,
    UnsupportedVersionError,
)
from bodymorph.utils.logging import get_logger

logger = get_logger(__name__)

TRI_MAGIC = b"PIRT"
TRI_VERSION = 1

# One sparse vertex record: u16 index followed by three i16 deltas
ENTRY_DTYPE = np.dtype([
    ('index', '<u2'),
    ('dx', '<i2'),
    ('dy', '<i2'),
    ('dz', '<i2'),
])


class TriEntry(NamedTuple):
    """A single displaced vertex of a morph channel."""
    index: int
    dx: int
    dy: int
    dz: int


def _frozen(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class MorphChannel:
    """
    One named, sparse displacement field.

    Attributes:
        name: Channel name, the join key against ``SliderDescriptor.morph_key``
        scale: Per-channel multiplier applied to the integer deltas
        indices: (K,) uint16 vertex indices
        deltas: (K, 3) int16 displacements, one row per index
    """
    name: str
    scale: float
    indices: np.ndarray
    deltas: np.ndarray

    @classmethod
    def from_entries(
        cls,
        name: str,
        scale: float,
        entries: Sequence[Tuple[int, int, int, int]]
    ) -> "MorphChannel":
        """Build a channel from ``(index, dx, dy, dz)`` tuples."""
        records = np.array([tuple(e) for e in entries], dtype=ENTRY_DTYPE)
        return cls._from_records(name, scale, records)

    @classmethod
    def _from_records(cls, name: str, scale: float, records: np.ndarray) -> "MorphChannel":
        indices = records['index'].astype(np.uint16)
        deltas = np.stack(
            [records['dx'], records['dy'], records['dz']], axis=1
        ).astype(np.int16).reshape(-1, 3)
        return cls(
            name=name,
            scale=float(scale),
            indices=_frozen(indices),
            deltas=_frozen(deltas),
        )

    @property
    def entries(self) -> List[TriEntry]:
        """Entries as plain Python tuples, in file order."""
        return [
            TriEntry(int(i), int(d[0]), int(d[1]), int(d[2]))
            for i, d in zip(self.indices, self.deltas)
        ]

    def __len__(self) -> int:
        return int(self.indices.shape[0])

    def __repr__(self) -> str:
        return f"MorphChannel(name={self.name!r}, scale={self.scale!r}, entries={len(self)})"


@dataclass(frozen=True)
class TriFile:
    """
    Decoded TRI file.

    Attributes:
        set_name: Name of the slider set the morphs were built for
        morphs: Channels in file order
    """
    set_name: str
    morphs: Tuple[MorphChannel, ...]

    def __post_init__(self):
        object.__setattr__(self, 'morphs', tuple(self.morphs))

    def __iter__(self) -> Iterator[MorphChannel]:
        return iter(self.morphs)

    @property
    def channel_names(self) -> List[str]:
        return [m.name for m in self.morphs]

    def channel(self, name: str) -> Optional[MorphChannel]:
        """Return the first channel called ``name``, or None."""
        for morph in self.morphs:
            if morph.name == name:
                return morph
        return None


class _Cursor:
    """Bounds-checked little-endian reader over a byte buffer."""

    def __init__(self, buf: bytes):
        self.buf = buf
        self.offset = 0

    def ensure(self, n: int) -> None:
        if self.offset + n > len(self.buf):
            raise OverrunError(self.offset, n, len(self.buf))

    def _unpack(self, fmt: str, size: int):
        self.ensure(size)
        value, = struct.unpack_from(fmt, self.buf, self.offset)
        self.offset += size
        return value

    def u8(self) -> int:
        return self._unpack('<B', 1)

    def u16(self) -> int:
        return self._unpack('<H', 2)

    def f32(self) -> float:
        return self._unpack('<f', 4)

    def raw(self, n: int) -> bytes:
        self.ensure(n)
        data = bytes(self.buf[self.offset:self.offset + n])
        self.offset += n
        return data

    def string(self) -> str:
        return self.raw(self.u8()).decode('utf-8', errors='replace')

    def entries(self, count: int) -> np.ndarray:
        if count == 0:
            return np.empty(0, dtype=ENTRY_DTYPE)
        size = count * ENTRY_DTYPE.itemsize
        self.ensure(size)
        records = np.frombuffer(
            self.buf, dtype=ENTRY_DTYPE, count=count, offset=self.offset
        ).copy()
        self.offset += size
        return records


def decode_tri(data: Union[bytes, bytearray, memoryview]) -> TriFile:
    """
    Decode a TRI morph buffer.

    Args:
        data: Complete file contents

    Returns:
        Decoded TriFile, independent of ``data``

    Raises:
        BadMagicError: If the buffer does not start with ``PIRT``
        UnsupportedVersionError: If the version is not 1
        OverrunError: If any field extends past the end of the buffer

    Example:
        >>> tri = decode_tri(Path("femalebody.tri").read_bytes())
        >>> tri.set_name
        'CBBE'
    """
    buf = bytes(data)
    cur = _Cursor(buf)

    magic = buf[:4]
    if magic != TRI_MAGIC:
        raise BadMagicError(magic)
    cur.offset = 4

    version = cur.u16()
    if version != TRI_VERSION:
        raise UnsupportedVersionError(version)

    set_name = cur.string()
    channel_count = cur.u16()

    morphs = []
    for _ in range(channel_count):
        name = cur.string()
        scale = cur.f32()
        num_affected = cur.u16()
        records = cur.entries(num_affected)
        morphs.append(MorphChannel._from_records(name, scale, records))

    logger.debug(
        f"Decoded TRI '{set_name}': {channel_count} channels, "
        f"{sum(len(m) for m in morphs)} entries"
    )
    if cur.offset != len(buf):
        logger.debug(f"Ignoring {len(buf) - cur.offset} trailing bytes after TRI data")

    return TriFile(set_name=set_name, morphs=tuple(morphs))


def read_tri(filepath: Union[str, Path]) -> TriFile:
    """
    Read and decode a TRI file from disk.

    Raises:
        FileNotFoundError: If the file doesn't exist
        TriFormatError: If the contents are not a valid TRI file
    """
    filepath = Path(filepath)
    logger.debug(f"Reading TRI file {filepath}")
    return decode_tri(filepath.read_bytes())


def _pack_string(value: str) -> bytes:
    encoded = value.encode('utf-8')
    if len(encoded) > 0xFF:
        raise ValueError(f"String too long for TRI u8 length prefix: {value[:32]!r}...")
    return struct.pack('<B', len(encoded)) + encoded


def encode_tri(tri: TriFile) -> bytes:
    """
    Serialize a TriFile back to the TRI binary layout.

    ``decode_tri(encode_tri(t))`` reproduces ``t`` exactly; scales are
    stored as f32 so values that came from a decoded file survive unchanged.

    Raises:
        ValueError: If a name or count does not fit its length prefix
    """
    if len(tri.morphs) > 0xFFFF:
        raise ValueError(f"Too many channels for TRI: {len(tri.morphs)}")

    parts = [TRI_MAGIC, struct.pack('<H', TRI_VERSION), _pack_string(tri.set_name)]
    parts.append(struct.pack('<H', len(tri.morphs)))

    for morph in tri.morphs:
        if len(morph) > 0xFFFF:
            raise ValueError(f"Too many entries in channel {morph.name!r}: {len(morph)}")
        parts.append(_pack_string(morph.name))
        parts.append(struct.pack('<fH', morph.scale, len(morph)))

        records = np.empty(len(morph), dtype=ENTRY_DTYPE)
        records['index'] = morph.indices
        records['dx'] = morph.deltas[:, 0]
        records['dy'] = morph.deltas[:, 1]
        records['dz'] = morph.deltas[:, 2]
        parts.append(records.tobytes())

    return b"".join(parts)
