import json

import pytest

from bookmark_store import BOOKMARK_KEY, Bookmark, BookmarkStore


def make_bookmark(chapter: int = 2, verse: int = 30) -> Bookmark:
    return Bookmark(chapter_number=chapter, chapter_name="سُورَةُ البَقَرَةِ", verse_number=verse, saved_at=1700000000000)


def test_load_missing_file_returns_none(tmp_path):
    assert BookmarkStore(tmp_path / "storage.json").load() is None


def test_save_then_load_returns_last_saved(tmp_path):
    store = BookmarkStore(tmp_path / "nested" / "storage.json")
    store.save(make_bookmark(verse=7))
    store.save(make_bookmark(chapter=18, verse=10))

    loaded = store.load()
    assert loaded == make_bookmark(chapter=18, verse=10)


def test_save_keeps_unrelated_keys(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({"other": {"a": 1}}), encoding="utf-8")

    BookmarkStore(path).save(make_bookmark())

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["other"] == {"a": 1}
    assert payload[BOOKMARK_KEY]["verse_number"] == 30
    assert payload[BOOKMARK_KEY]["chapter_name"] == "سُورَةُ البَقَرَةِ"


def test_corrupt_file_loads_as_none_and_is_replaced_on_save(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("{not json", encoding="utf-8")
    store = BookmarkStore(path)

    assert store.load() is None
    store.save(make_bookmark())
    assert store.load() == make_bookmark()


def test_malformed_record_loads_as_none(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text(json.dumps({BOOKMARK_KEY: {"chapter_number": "2"}}), encoding="utf-8")
    assert BookmarkStore(path).load() is None


def test_non_object_root_loads_as_none(tmp_path):
    path = tmp_path / "storage.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert BookmarkStore(path).load() is None


@pytest.mark.parametrize(
    "payload",
    [
        {"chapter_number": 1, "chapter_name": "x", "verse_number": 1},
        {"chapter_number": True, "chapter_name": "x", "verse_number": 1, "saved_at": 0},
        {"chapter_number": 1, "chapter_name": 5, "verse_number": 1, "saved_at": 0},
        "bookmark",
    ],
)
def test_from_dict_rejects_bad_payloads(payload):
    with pytest.raises(ValueError):
        Bookmark.from_dict(payload)
