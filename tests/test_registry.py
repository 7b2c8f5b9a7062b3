from pathlib import Path

import pytest

from flaclink.agents import Album
from flaclink.errors import DecodeError, EncodeError, StoreUnavailable
from flaclink.orchestrator.registry import FingerprintRegistry, decode_contents, encode_contents


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "albums.db"


# ==================== Fingerprints ====================

def test_fingerprint_is_stable():
    contents = ["01 Intro.flac", "02 Song.flac", "cover.jpg"]

    assert encode_contents(contents) == encode_contents(list(contents))


def test_fingerprint_depends_on_order_and_count():
    fingerprints = {
        encode_contents(["a.flac", "b.flac"]),
        encode_contents(["b.flac", "a.flac"]),
        encode_contents(["a.flac"]),
        encode_contents(["a.flac", "b.flac", "b.flac"]),
        encode_contents([]),
    }

    assert len(fingerprints) == 5


def test_fingerprint_keeps_name_boundaries():
    assert encode_contents(["ab", "c"]) != encode_contents(["a", "bc"])
    assert encode_contents(["abc"]) != encode_contents(["ab", "c"])


def test_decode_returns_original_contents():
    contents = ["Disc 1", "Ünïcödé – track.flac", "", "folder.jpg"]

    assert decode_contents(encode_contents(contents)) == contents


def test_decode_handles_undecodable_filenames():
    name = b"caf\xe9.flac".decode("utf-8", "surrogateescape")

    assert decode_contents(encode_contents([name])) == [name]


def test_encode_rejects_non_strings():
    with pytest.raises(EncodeError):
        encode_contents(["ok.flac", b"bytes.flac"])


@pytest.mark.parametrize("data", [
    b"",
    b"\x00\x00",
    b"\x00\x00\x00\x01\x00\x00\x00\x09short",
    encode_contents(["a.flac"]) + b"extra",
])
def test_decode_rejects_malformed_fingerprints(data):
    with pytest.raises(DecodeError):
        decode_contents(data)


# ==================== Registry ====================

def test_open_creates_database(db_path: Path, caplog):
    with caplog.at_level("INFO"):
        with FingerprintRegistry(db_path) as registry:
            assert registry.is_open
            assert len(registry) == 0

    assert db_path.is_file()
    assert not registry.is_open
    assert "Created album database" in caplog.text


def test_insert_then_contains(db_path: Path):
    album = Album("A", ["x.flac", "y.flac"])

    with FingerprintRegistry(db_path) as registry:
        assert not registry.contains(album)
        registry.insert(album)
        assert registry.contains(album)
        assert registry.contains(Album("Renamed", ["x.flac", "y.flac"]))
        assert not registry.contains(Album("A", ["y.flac", "x.flac"]))


def test_entries_survive_reopen(db_path: Path):
    with FingerprintRegistry(db_path) as registry:
        registry.insert(Album("A", ["x.flac"]))

    with FingerprintRegistry(db_path) as registry:
        assert registry.contains(Album("A", ["x.flac"]))
        assert len(registry) == 1


def test_insert_overwrites_name(db_path: Path):
    with FingerprintRegistry(db_path) as registry:
        registry.insert(Album("First", ["x.flac"]))
        registry.insert(Album("Second", ["x.flac"]))

        assert list(registry.entries()) == [(["x.flac"], "Second")]


def test_entries_in_fingerprint_order(db_path: Path):
    albums = [Album("Long", ["a.flac", "b.flac"]), Album("Short", ["z.flac"])]

    with FingerprintRegistry(db_path) as registry:
        for album in albums:
            registry.insert(album)
        seen = []
        registry.for_each(lambda name, contents: seen.append((name, contents)))

    # One entry sorts before two.
    assert seen == [("Short", ["z.flac"]), ("Long", ["a.flac", "b.flac"])]


def test_second_open_times_out(db_path: Path):
    with FingerprintRegistry(db_path):
        other = FingerprintRegistry(db_path, lock_timeout=0.05)
        with pytest.raises(StoreUnavailable):
            other.open()
        assert not other.is_open

    with FingerprintRegistry(db_path, lock_timeout=0.05) as registry:
        assert registry.is_open


def test_lock_released_when_block_raises(db_path: Path):
    with pytest.raises(ValueError):
        with FingerprintRegistry(db_path):
            raise ValueError("boom")

    with FingerprintRegistry(db_path, lock_timeout=0.05) as registry:
        assert len(registry) == 0


def test_open_rejects_non_database(db_path: Path):
    db_path.write_bytes(b"this is not a sqlite database" * 10)

    with pytest.raises(StoreUnavailable):
        FingerprintRegistry(db_path).open()


def test_open_in_missing_directory(tmp_path: Path):
    with pytest.raises(StoreUnavailable):
        FingerprintRegistry(tmp_path / "missing" / "albums.db").open()


def test_close_twice_and_use_after_close(db_path: Path):
    registry = FingerprintRegistry(db_path).open()
    registry.close()
    registry.close()

    with pytest.raises(RuntimeError):
        registry.contains(Album("A", ["x.flac"]))


def test_double_open_is_an_error(db_path: Path):
    with FingerprintRegistry(db_path) as registry:
        with pytest.raises(RuntimeError):
            registry.open()


def test_undecodable_album_name(db_path: Path):
    name = b"Caf\xe9 Album".decode("utf-8", "surrogateescape")

    with FingerprintRegistry(db_path) as registry:
        registry.insert(Album(name, ["01.flac"]))

    with FingerprintRegistry(db_path) as registry:
        assert list(registry.entries()) == [(["01.flac"], name)]
