"""Persistence of the single "last read" bookmark."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

LOGGER = logging.getLogger(__name__)

BOOKMARK_KEY = "quran_bookmark"


@dataclass(frozen=True)
class Bookmark:
    """Last read position inside a chapter."""

    chapter_number: int
    chapter_name: str
    verse_number: int
    saved_at: int  # epoch milliseconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chapter_number": self.chapter_number,
            "chapter_name": self.chapter_name,
            "verse_number": self.verse_number,
            "saved_at": self.saved_at,
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Bookmark":
        """Build a bookmark from its stored form.

        Raises ``ValueError`` when a field is missing or has the wrong type.
        """
        if not isinstance(payload, dict):
            raise ValueError(f"Bookmark payload must be an object, got {type(payload).__name__}")
        try:
            chapter_number = payload["chapter_number"]
            chapter_name = payload["chapter_name"]
            verse_number = payload["verse_number"]
            saved_at = payload["saved_at"]
        except KeyError as exc:
            raise ValueError(f"Bookmark payload missing field {exc}") from exc

        for name, value in (("chapter_number", chapter_number), ("verse_number", verse_number), ("saved_at", saved_at)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"Bookmark field {name} must be an integer")
        if not isinstance(chapter_name, str):
            raise ValueError("Bookmark field chapter_name must be a string")

        return cls(
            chapter_number=chapter_number,
            chapter_name=chapter_name,
            verse_number=verse_number,
            saved_at=saved_at,
        )


class BookmarkStore:
    """Read and write the bookmark slot of a JSON key-value file."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def load(self) -> Optional[Bookmark]:
        if not self.path.exists():
            LOGGER.debug("Bookmark storage %s not found", self.path)
            return None

        try:
            payload = self._read_all()
        except (OSError, ValueError):
            LOGGER.warning("Unable to read bookmark storage %s", self.path, exc_info=True)
            return None

        raw = payload.get(BOOKMARK_KEY)
        if raw is None:
            LOGGER.debug("No bookmark stored under key %s", BOOKMARK_KEY)
            return None

        try:
            bookmark = Bookmark.from_dict(raw)
        except ValueError:
            LOGGER.warning("Ignoring malformed bookmark record: %r", raw, exc_info=True)
            return None

        LOGGER.debug(
            "Loaded bookmark chapter=%s verse=%s",
            bookmark.chapter_number,
            bookmark.verse_number,
        )
        return bookmark

    def save(self, bookmark: Bookmark) -> None:
        payload: Dict[str, Any] = {}
        if self.path.exists():
            try:
                payload = self._read_all()
            except (OSError, ValueError):
                LOGGER.warning("Replacing unreadable bookmark storage %s", self.path, exc_info=True)
                payload = {}

        payload[BOOKMARK_KEY] = bookmark.to_dict()
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
        except OSError:
            LOGGER.exception("Failed to persist bookmark to %s", self.path)
            return

        LOGGER.info(
            "Saved bookmark %s:%s to %s",
            bookmark.chapter_number,
            bookmark.verse_number,
            self.path,
        )

    def _read_all(self) -> Dict[str, Any]:
        with self.path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
        if not isinstance(payload, dict):
            raise ValueError(f"Storage root must be an object, got {type(payload).__name__}")
        return payload


__all__ = ["BOOKMARK_KEY", "Bookmark", "BookmarkStore"]
