"""Reading codec parameters from WAV, FLAC and MPEG audio files."""

from __future__ import annotations

import os
import struct
from dataclasses import dataclass
from pathlib import Path


class MetadataError(ValueError):
    """Raised when an audio file's parameters cannot be determined."""


class UnsupportedFormatError(MetadataError):
    """Raised when a file is not in a recognised container or is malformed."""


class NoSupportedAudioError(MetadataError):
    """Raised when a recognised file holds no audio in a supported codec."""


@dataclass(frozen=True)
class CodecParameters:
    """Parameters of the audio stream in a file; unknown values are None."""

    codec: str | None = None
    sample_rate: int | None = None
    n_frames: int | None = None
    channels: int | None = None
    bits_per_sample: int | None = None


_WAV_CODECS = {1: "pcm_int", 3: "pcm_float", 6: "pcm_alaw", 7: "pcm_mulaw"}
_WAVE_FORMAT_EXTENSIBLE = 0xFFFE

_BITRATES = {
    (1, 1): (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
    (1, 2): (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
    (1, 3): (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    (2, 1): (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
    (2, 2): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    (2, 3): (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
}
_SAMPLE_RATES = {
    "1": (44100, 48000, 32000),
    "2": (22050, 24000, 16000),
    "2.5": (11025, 12000, 8000),
}
_VERSIONS = {3: "1", 2: "2", 0: "2.5"}


@dataclass(frozen=True)
class _FrameHeader:
    layer: int
    sample_rate: int
    channels: int
    length: int
    samples: int
    side_info: int


def _id3v2_end(data: bytes, offset: int = 0) -> int:
    """Return the offset just past any ID3v2 tags starting at ``offset``."""
    while data[offset : offset + 3] == b"ID3" and len(data) >= offset + 10:
        flags = data[offset + 5]
        size = 0
        for byte in data[offset + 6 : offset + 10]:
            size = (size << 7) | (byte & 0x7F)
        offset += 10 + size + (10 if flags & 0x10 else 0)
    return offset


def _parse_wav(data: bytes) -> CodecParameters:
    pos = 12
    fmt: tuple[int, int, int, int, int] | None = None
    while pos + 8 <= len(data):
        chunk_id = data[pos : pos + 4]
        (size,) = struct.unpack_from("<I", data, pos + 4)
        body = pos + 8
        if chunk_id == b"fmt ":
            if size < 16 or body + 16 > len(data):
                raise UnsupportedFormatError("malformed wave format chunk")
            tag, channels, rate, _, block_align, bits = struct.unpack_from("<HHIIHH", data, body)
            if tag == _WAVE_FORMAT_EXTENSIBLE and size >= 40 and body + 26 <= len(data):
                (tag,) = struct.unpack_from("<H", data, body + 24)
            fmt = (tag, channels, rate, block_align, bits)
        elif chunk_id == b"data":
            if fmt is None:
                raise UnsupportedFormatError("wave data chunk precedes its format chunk")
            tag, channels, rate, block_align, bits = fmt
            available = min(size, len(data) - body)
            return CodecParameters(
                codec=_WAV_CODECS.get(tag),
                sample_rate=rate,
                n_frames=available // block_align if block_align else None,
                channels=channels,
                bits_per_sample=bits,
            )
        pos = body + size + (size & 1)
    raise UnsupportedFormatError("wave file has no data chunk")


def _parse_flac(data: bytes, offset: int) -> CodecParameters:
    header = offset + 4
    block = header + 4
    if block + 34 > len(data):
        raise UnsupportedFormatError("FLAC stream is truncated")
    block_type = data[header] & 0x7F
    length = int.from_bytes(data[header + 1 : header + 4], "big")
    if block_type != 0 or length < 34:
        raise UnsupportedFormatError("FLAC stream is missing its STREAMINFO block")

    packed = int.from_bytes(data[block + 10 : block + 18], "big")
    sample_rate = packed >> 44
    if sample_rate == 0:
        raise UnsupportedFormatError("FLAC stream has an invalid sample rate")
    total = packed & ((1 << 36) - 1)
    return CodecParameters(
        codec="flac",
        sample_rate=sample_rate,
        n_frames=total or None,
        channels=((packed >> 41) & 0x7) + 1,
        bits_per_sample=((packed >> 36) & 0x1F) + 1,
    )


def _frame_header(data: bytes, pos: int) -> _FrameHeader | None:
    if pos < 0 or pos + 4 > len(data):
        return None
    word = int.from_bytes(data[pos : pos + 4], "big")
    if word >> 21 != 0x7FF:
        return None
    version_bits = (word >> 19) & 0x3
    layer_bits = (word >> 17) & 0x3
    bitrate_index = (word >> 12) & 0xF
    rate_index = (word >> 10) & 0x3
    padding = (word >> 9) & 0x1
    mode = (word >> 6) & 0x3
    if version_bits == 1 or layer_bits == 0 or bitrate_index in (0, 15) or rate_index == 3:
        return None

    version = _VERSIONS[version_bits]
    layer = 4 - layer_bits
    family = 1 if version == "1" else 2
    bitrate = _BITRATES[(family, layer)][bitrate_index] * 1000
    sample_rate = _SAMPLE_RATES[version][rate_index]
    mono = mode == 3

    if layer == 1:
        samples = 384
        length = (12 * bitrate // sample_rate + padding) * 4
    else:
        samples = 1152 if layer == 2 or family == 1 else 576
        length = samples // 8 * bitrate // sample_rate + padding

    if family == 1:
        side_info = 17 if mono else 32
    else:
        side_info = 9 if mono else 17

    return _FrameHeader(
        layer=layer,
        sample_rate=sample_rate,
        channels=1 if mono else 2,
        length=length,
        samples=samples,
        side_info=side_info,
    )


def _find_frame(data: bytes, start: int) -> tuple[int, _FrameHeader] | None:
    pos = data.find(b"\xff", start)
    while pos != -1:
        header = _frame_header(data, pos)
        if header is not None:
            following = pos + header.length
            if (
                following >= len(data)
                or data[following : following + 3] == b"TAG"
                or _frame_header(data, following) is not None
            ):
                return pos, header
        pos = data.find(b"\xff", pos + 1)
    return None


def _vbr_tag(data: bytes, pos: int, header: _FrameHeader) -> tuple[bool, int | None]:
    """Return whether the frame at ``pos`` is a VBR tag frame and the frame count it holds."""
    xing = pos + 4 + header.side_info
    if data[xing : xing + 4] in (b"Xing", b"Info") and xing + 8 <= len(data):
        (flags,) = struct.unpack_from(">I", data, xing + 4)
        if flags & 0x1 and xing + 12 <= len(data):
            (frames,) = struct.unpack_from(">I", data, xing + 8)
            return True, frames
        return True, None
    vbri = pos + 36
    if data[vbri : vbri + 4] == b"VBRI" and vbri + 18 <= len(data):
        (frames,) = struct.unpack_from(">I", data, vbri + 14)
        return True, frames
    return False, None


def _parse_mpeg(data: bytes, start: int) -> CodecParameters:
    found = _find_frame(data, start)
    if found is None:
        raise UnsupportedFormatError("no recognisable audio stream")
    pos, first = found

    is_tag, tag_frames = _vbr_tag(data, pos, first)
    if tag_frames is not None:
        n_frames = tag_frames * first.samples
    else:
        if is_tag:
            pos += first.length
        count = 0
        while (header := _frame_header(data, pos)) is not None:
            count += 1
            pos += header.length
        n_frames = count * first.samples

    return CodecParameters(
        codec=f"mp{first.layer}",
        sample_rate=first.sample_rate,
        n_frames=n_frames,
        channels=first.channels,
    )


def extract_track_metadata(path: str | os.PathLike[str]) -> CodecParameters:
    """Probe an audio file and return the parameters of its audio stream."""
    data = Path(path).read_bytes()

    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        params = _parse_wav(data)
    else:
        start = _id3v2_end(data)
        if data[start : start + 4] == b"fLaC":
            params = _parse_flac(data, start)
        else:
            params = _parse_mpeg(data, start)

    if params.codec is None:
        raise NoSupportedAudioError(f"No supported audio for track {os.fspath(path)!r}")
    return params


def extract_track_duration(params: CodecParameters) -> float | None:
    """Return the stream's length in seconds, or None when it cannot be known."""
    if params.sample_rate and params.n_frames is not None:
        return params.n_frames / params.sample_rate
    return None


def extract_track_sample_rate(params: CodecParameters) -> int | None:
    return params.sample_rate


def extract_track_channels(params: CodecParameters) -> int | None:
    return params.channels