import pytest

from drakn.hashing import CHUNK_LEN, OUT_LEN, Blake3, hash_file


def _data(length):
    return bytes(i % 251 for i in range(length))


def test_empty_input_vector():
    assert Blake3().hexdigest() == "af1349b9f5f9a1a6a0404dea36dcc9499bcb25c9adc112b7cc9a93cae41f3262"


def test_hexdigest_matches_digest():
    hasher = Blake3(b"some audio bytes")
    assert hasher.hexdigest() == hasher.digest().hex()
    assert len(hasher.digest()) == OUT_LEN


@pytest.mark.parametrize(
    "length", [1, 63, 64, 65, 1023, 1024, 1025, 2048, 2049, 3072, 4097, 8193]
)
def test_incremental_equals_one_shot(length):
    data = _data(length)
    whole = Blake3(data).digest()
    for step in (1, 7, 64, 100, CHUNK_LEN, 3000):
        hasher = Blake3()
        for start in range(0, length, step):
            hasher.update(data[start : start + step])
        assert hasher.digest() == whole


def test_digest_does_not_consume_state():
    hasher = Blake3(b"abc")
    first = hasher.digest()
    assert hasher.digest() == first
    hasher.update(b"def")
    assert hasher.digest() == Blake3(b"abcdef").digest()


@pytest.mark.parametrize("length", [0, 1, 1024, 1025, 5000])
def test_different_inputs_differ(length):
    data = _data(length)
    assert Blake3(data).digest() != Blake3(data + b"\0").digest()


def test_accepts_bytearray_and_memoryview():
    data = _data(3000)
    expected = Blake3(data).digest()
    assert Blake3(bytearray(data)).digest() == expected
    assert Blake3(memoryview(data)).digest() == expected


def test_hash_file_matches_hasher(tmp_path):
    data = _data(20000)
    path = tmp_path / "track.mp3"
    path.write_bytes(data)
    assert hash_file(path) == Blake3(data).hexdigest()


def test_hash_empty_file(tmp_path):
    path = tmp_path / "empty.wav"
    path.write_bytes(b"")
    assert hash_file(path) == Blake3().hexdigest()


def test_hash_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        hash_file(tmp_path / "missing.flac")