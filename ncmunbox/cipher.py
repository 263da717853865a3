"""Stream cipher used for the audio body of an NCM container.

The key schedule is the usual RC4 swap pass. Keystream generation is not:
the permutation table is never touched after the schedule, and the byte
index restarts at zero for every chunk read from the container. The
keystream is therefore a 256-byte pattern repeated from the start of each
chunk.
"""

import os as _os_module
import typing

import numpy as np

from . import constants


def _env_int(name: str) -> "typing.Optional[int]":
    value = _os_module.getenv(name)
    if not value:
        return None
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    if parsed < 0:
        return None
    return parsed


def _fast_min() -> int:
    override = _env_int("NCMUNBOX_FAST_MIN")
    return constants.FAST_MIN_DEFAULT if override is None else override


def key_schedule(key: bytes) -> "typing.Tuple[int, ...]":
    """Build the permutation table for ``key``. The result is immutable."""
    n = len(key)
    if n == 0:
        raise ValueError("Session key is empty")
    table = list(range(constants.TABLE_SIZE))
    j = 0
    for i in range(constants.TABLE_SIZE):
        j = (j + table[i] + key[i % n]) & 0xFF
        table[i], table[j] = table[j], table[i]
    return tuple(table)


def keystream_byte(table: "typing.Sequence[int]", offset: int) -> int:
    """Keystream byte at chunk-local ``offset``."""
    i = (offset + 1) & 0xFF
    j = (table[i] + i) & 0xFF
    return table[(table[i] + table[j]) & 0xFF]


def keystream_period(table: "typing.Sequence[int]") -> bytes:
    return bytes(keystream_byte(table, k) for k in range(constants.TABLE_SIZE))


def keystream(table: "typing.Sequence[int]", length: int) -> bytes:
    """Keystream for one chunk of ``length`` bytes, starting at offset 0."""
    if length <= 0:
        return b""
    period = np.frombuffer(keystream_period(table), dtype=np.uint8)
    return np.resize(period, length).tobytes()


def xor_bytes(data: bytes, mask: int) -> bytes:
    """XOR every byte of ``data`` with the single byte ``mask``."""
    if not data:
        return b""
    arr = np.frombuffer(data, dtype=np.uint8)
    return np.bitwise_xor(arr, np.uint8(mask & 0xFF)).tobytes()


class StreamCipher:
    """Per-file cipher state: the frozen table and its 256-byte keystream."""

    def __init__(self, key: bytes) -> None:
        self._table = key_schedule(key)
        self._period = keystream_period(self._table)
        self._period_arr = np.frombuffer(self._period, dtype=np.uint8)

    @property
    def table(self) -> "typing.Tuple[int, ...]":
        return self._table

    def keystream(self, length: int) -> bytes:
        return keystream(self._table, length)

    def decrypt_chunk(self, chunk: bytes) -> bytes:
        """XOR ``chunk`` against the keystream. Offsets are local to ``chunk``."""
        if not chunk:
            return b""
        buffer = bytearray(chunk)
        n = len(buffer)
        if n >= _fast_min():
            arr = np.frombuffer(memoryview(buffer), dtype=np.uint8)
            np.bitwise_xor(arr, np.resize(self._period_arr, n), out=arr)
            return bytes(buffer)
        period = self._period
        for k in range(n):
            buffer[k] ^= period[k & 0xFF]
        return bytes(buffer)

    # Encryption and decryption are the same XOR.
    encrypt_chunk = decrypt_chunk

    def decrypt_stream(
        self,
        source: "typing.BinaryIO",
        dest: "typing.BinaryIO",
        chunk_size: int = constants.AUDIO_CHUNK_SIZE,
    ) -> int:
        """Decrypt ``source`` to EOF into ``dest``; returns bytes written."""
        written = 0
        while True:
            chunk = _read_chunk(source, chunk_size)
            if not chunk:
                break
            dest.write(self.decrypt_chunk(chunk))
            written += len(chunk)
        dest.flush()
        return written


def _read_chunk(source: "typing.BinaryIO", size: int) -> bytes:
    # Chunk boundaries drive the keystream, so short reads are topped up.
    data = source.read(size)
    if not data or len(data) == size:
        return data
    parts = [data]
    got = len(data)
    while got < size:
        more = source.read(size - got)
        if not more:
            break
        parts.append(more)
        got += len(more)
    return b"".join(parts)
