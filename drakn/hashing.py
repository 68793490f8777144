"""BLAKE3 hashing of track files."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from functools import partial

BUFFER_SIZE = 8192
OUT_LEN = 32
BLOCK_LEN = 64
CHUNK_LEN = 1024

_MASK = 0xFFFFFFFF
_IV = (
    0x6A09E667,
    0xBB67AE85,
    0x3C6EF372,
    0xA54FF53A,
    0x510E527F,
    0x9B05688C,
    0x1F83D9AB,
    0x5BE0CD19,
)
_MSG_PERMUTATION = (2, 6, 3, 10, 7, 0, 4, 13, 1, 11, 12, 5, 9, 14, 15, 8)

_CHUNK_START = 1 << 0
_CHUNK_END = 1 << 1
_PARENT = 1 << 2
_ROOT = 1 << 3

_BLOCK_WORDS = struct.Struct("<16I")
_OUT_WORDS = struct.Struct("<8I")


def _rotr(value: int, shift: int) -> int:
    return ((value >> shift) | (value << (32 - shift))) & _MASK


def _g(s: list[int], a: int, b: int, c: int, d: int, mx: int, my: int) -> None:
    s[a] = (s[a] + s[b] + mx) & _MASK
    s[d] = _rotr(s[d] ^ s[a], 16)
    s[c] = (s[c] + s[d]) & _MASK
    s[b] = _rotr(s[b] ^ s[c], 12)
    s[a] = (s[a] + s[b] + my) & _MASK
    s[d] = _rotr(s[d] ^ s[a], 8)
    s[c] = (s[c] + s[d]) & _MASK
    s[b] = _rotr(s[b] ^ s[c], 7)


def _round(s: list[int], m: tuple[int, ...]) -> None:
    _g(s, 0, 4, 8, 12, m[0], m[1])
    _g(s, 1, 5, 9, 13, m[2], m[3])
    _g(s, 2, 6, 10, 14, m[4], m[5])
    _g(s, 3, 7, 11, 15, m[6], m[7])
    _g(s, 0, 5, 10, 15, m[8], m[9])
    _g(s, 1, 6, 11, 12, m[10], m[11])
    _g(s, 2, 7, 8, 13, m[12], m[13])
    _g(s, 3, 4, 9, 14, m[14], m[15])


def _compress(
    cv: tuple[int, ...], words: tuple[int, ...], counter: int, block_len: int, flags: int
) -> list[int]:
    state = [*cv, *_IV[:4], counter & _MASK, (counter >> 32) & _MASK, block_len, flags]
    message = words
    for _ in range(6):
        _round(state, message)
        message = tuple(message[i] for i in _MSG_PERMUTATION)
    _round(state, message)

    low, high = state[:8], state[8:]
    return [x ^ y for x, y in zip(low, high)] + [y ^ c for y, c in zip(high, cv)]


def _words(block: bytes | bytearray) -> tuple[int, ...]:
    return _BLOCK_WORDS.unpack(bytes(block).ljust(BLOCK_LEN, b"\0"))


@dataclass(frozen=True)
class _Output:
    cv: tuple[int, ...]
    words: tuple[int, ...]
    counter: int
    block_len: int
    flags: int

    def chaining_value(self) -> tuple[int, ...]:
        return tuple(_compress(self.cv, self.words, self.counter, self.block_len, self.flags)[:8])

    def root_bytes(self) -> bytes:
        words = _compress(self.cv, self.words, 0, self.block_len, self.flags | _ROOT)
        return _OUT_WORDS.pack(*words[:8])


class _ChunkState:
    def __init__(self, key: tuple[int, ...], counter: int, flags: int) -> None:
        self.cv = key
        self.counter = counter
        self.flags = flags
        self.block = bytearray()
        self.blocks_compressed = 0

    def __len__(self) -> int:
        return BLOCK_LEN * self.blocks_compressed + len(self.block)

    def _start_flag(self) -> int:
        return _CHUNK_START if self.blocks_compressed == 0 else 0

    def update(self, data: memoryview) -> None:
        while data:
            if len(self.block) == BLOCK_LEN:
                self.cv = tuple(
                    _compress(
                        self.cv,
                        _words(self.block),
                        self.counter,
                        BLOCK_LEN,
                        self.flags | self._start_flag(),
                    )[:8]
                )
                self.blocks_compressed += 1
                self.block = bytearray()
            take = BLOCK_LEN - len(self.block)
            self.block += data[:take]
            data = data[take:]

    def output(self) -> _Output:
        return _Output(
            self.cv,
            _words(self.block),
            self.counter,
            len(self.block),
            self.flags | self._start_flag() | _CHUNK_END,
        )


class Blake3:
    """Incremental BLAKE3 hasher producing a 32-byte digest."""

    def __init__(self, data: bytes = b"") -> None:
        self._key = _IV
        self._chunk = _ChunkState(self._key, 0, 0)
        self._stack: list[tuple[int, ...]] = []
        if data:
            self.update(data)

    def _parent_output(self, left: tuple[int, ...], right: tuple[int, ...]) -> _Output:
        return _Output(self._key, left + right, 0, BLOCK_LEN, _PARENT)

    def _push_chunk_cv(self, cv: tuple[int, ...], total_chunks: int) -> None:
        while total_chunks & 1 == 0:
            cv = self._parent_output(self._stack.pop(), cv).chaining_value()
            total_chunks >>= 1
        self._stack.append(cv)

    def update(self, data: bytes | bytearray | memoryview) -> None:
        """Feed more input into the hash."""
        view = memoryview(data).cast("B")
        while view:
            if len(self._chunk) == CHUNK_LEN:
                cv = self._chunk.output().chaining_value()
                total_chunks = self._chunk.counter + 1
                self._push_chunk_cv(cv, total_chunks)
                self._chunk = _ChunkState(self._key, total_chunks, 0)
            take = CHUNK_LEN - len(self._chunk)
            self._chunk.update(view[:take])
            view = view[take:]

    def digest(self) -> bytes:
        """Return the digest of everything fed so far; the hasher stays usable."""
        output = self._chunk.output()
        for left in reversed(self._stack):
            output = self._parent_output(left, output.chaining_value())
        return output.root_bytes()

    def hexdigest(self) -> str:
        return self.digest().hex()


def hash_file(path: str | os.PathLike[str]) -> str:
    """Return the BLAKE3 hex digest of a file's contents."""
    hasher = Blake3()
    with open(path, "rb") as handle:
        for buffer in iter(partial(handle.read, BUFFER_SIZE), b""):
            hasher.update(buffer)
    return hasher.hexdigest()