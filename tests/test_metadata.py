import struct
import wave

import pytest

from drakn.metadata import (
    CodecParameters,
    NoSupportedAudioError,
    UnsupportedFormatError,
    extract_track_channels,
    extract_track_duration,
    extract_track_metadata,
    extract_track_sample_rate,
)

MP3_FRAME_LEN = 417  # MPEG-1 layer III, 128 kbit/s, 44.1 kHz, no padding
MP3_SAMPLES_PER_FRAME = 1152


def mp3_frame(mode_byte=0x00, payload=b""):
    header = bytes([0xFF, 0xFB, 0x90, mode_byte])
    return (header + payload).ljust(MP3_FRAME_LEN, b"\0")


def xing_frame(frames):
    payload = bytes(32) + b"Xing" + struct.pack(">II", 1, frames)
    return mp3_frame(payload=payload)


def id3_prefix():
    return b"ID3" + bytes([4, 0, 0]) + bytes([0, 0, 0, 10]) + bytes(10)


def flac_bytes(sample_rate, channels, bits, total):
    packed = (sample_rate << 44) | ((channels - 1) << 41) | ((bits - 1) << 36) | total
    streaminfo = bytes(10) + packed.to_bytes(8, "big") + bytes(16)
    return b"fLaC" + bytes([0x80]) + len(streaminfo).to_bytes(3, "big") + streaminfo


def riff_wav(tag, channels, rate, bits, payload):
    block_align = channels * bits // 8
    fmt = struct.pack("<HHIIHH", tag, channels, rate, rate * block_align, block_align, bits)
    body = (
        b"WAVE"
        + b"fmt "
        + struct.pack("<I", len(fmt))
        + fmt
        + b"data"
        + struct.pack("<I", len(payload))
        + payload
    )
    return b"RIFF" + struct.pack("<I", len(body)) + body


def write_wav(path, rate, channels, frames):
    with wave.open(str(path), "wb") as handle:
        handle.setnchannels(channels)
        handle.setsampwidth(2)
        handle.setframerate(rate)
        handle.writeframes(bytes(2 * channels * frames))


def test_wav_parameters(tmp_path):
    path = tmp_path / "tone.wav"
    write_wav(path, rate=8000, channels=2, frames=8000)

    params = extract_track_metadata(path)

    assert params.sample_rate == 8000
    assert params.channels == 2
    assert params.n_frames == 8000
    assert params.bits_per_sample == 16
    assert extract_track_duration(params) == 1.0


def test_wav_with_unsupported_codec(tmp_path):
    path = tmp_path / "odd.wav"
    path.write_bytes(riff_wav(0x55, 1, 8000, 16, bytes(64)))

    with pytest.raises(NoSupportedAudioError):
        extract_track_metadata(path)


def test_wav_without_data_chunk(tmp_path):
    path = tmp_path / "empty.wav"
    path.write_bytes(b"RIFF" + struct.pack("<I", 4) + b"WAVE")

    with pytest.raises(UnsupportedFormatError):
        extract_track_metadata(path)


def test_flac_streaminfo(tmp_path):
    path = tmp_path / "song.flac"
    path.write_bytes(flac_bytes(44100, 2, 16, 88200))

    params = extract_track_metadata(path)

    assert params.codec == "flac"
    assert params.sample_rate == 44100
    assert params.channels == 2
    assert params.bits_per_sample == 16
    assert params.n_frames == 88200
    assert extract_track_duration(params) == 2.0


def test_flac_after_id3_tag(tmp_path):
    path = tmp_path / "tagged.flac"
    path.write_bytes(id3_prefix() + flac_bytes(48000, 1, 24, 48000))

    params = extract_track_metadata(path)

    assert params.sample_rate == 48000
    assert params.channels == 1
    assert extract_track_duration(params) == 1.0


def test_flac_unknown_length(tmp_path):
    path = tmp_path / "stream.flac"
    path.write_bytes(flac_bytes(44100, 2, 16, 0))

    params = extract_track_metadata(path)

    assert params.n_frames is None
    assert extract_track_duration(params) is None


def test_mp3_counts_frames(tmp_path):
    path = tmp_path / "song.mp3"
    path.write_bytes(mp3_frame() * 5)

    params = extract_track_metadata(path)

    assert params.codec == "mp3"
    assert params.sample_rate == 44100
    assert params.channels == 2
    assert params.n_frames == 5 * MP3_SAMPLES_PER_FRAME
    assert extract_track_duration(params) == params.n_frames / params.sample_rate


def test_mp3_mono(tmp_path):
    path = tmp_path / "mono.mp3"
    path.write_bytes(mp3_frame(mode_byte=0xC0) * 2)

    assert extract_track_channels(extract_track_metadata(path)) == 1


def test_mp3_xing_frame_count(tmp_path):
    path = tmp_path / "vbr.mp3"
    path.write_bytes(xing_frame(10) + mp3_frame() * 3)

    params = extract_track_metadata(path)

    assert params.n_frames == 10 * MP3_SAMPLES_PER_FRAME


def test_mp3_after_id3_tag(tmp_path):
    plain = tmp_path / "plain.mp3"
    tagged = tmp_path / "tagged.mp3"
    plain.write_bytes(mp3_frame() * 4)
    tagged.write_bytes(id3_prefix() + mp3_frame() * 4)

    assert extract_track_metadata(tagged) == extract_track_metadata(plain)


def test_unrecognised_file(tmp_path):
    path = tmp_path / "notes.mp3"
    path.write_text("hello world")

    with pytest.raises(UnsupportedFormatError):
        extract_track_metadata(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        extract_track_metadata(tmp_path / "absent.wav")


def test_duration_needs_rate_and_frames():
    assert extract_track_duration(CodecParameters(sample_rate=8000)) is None
    assert extract_track_duration(CodecParameters(n_frames=10)) is None


def test_sample_rate_and_channels_accessors():
    params = CodecParameters(codec="flac", sample_rate=32000, channels=6)

    assert extract_track_sample_rate(params) == 32000
    assert extract_track_channels(params) == 6