"""Chapter index and verse text retrieval from the alquran.cloud API."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import requests

LOGGER = logging.getLogger(__name__)

QURAN_API_BASE_URL = "https://api.alquran.cloud/v1"
DEFAULT_EDITION = "quran-uthmani"
CHAPTER_COUNT = 114


class RevelationPlace(Enum):
    MECCAN = "Meccan"
    MEDINAN = "Medinan"


@dataclass(frozen=True)
class ChapterMeta:
    number: int
    name: str
    english_name: str
    english_name_translation: str
    verse_count: int
    revelation_place: RevelationPlace


@dataclass(frozen=True)
class Verse:
    global_number: int
    text: str
    number_in_chapter: int
    juz: int
    manzil: int
    page: int
    ruku: int
    hizb_quarter: int
    is_prostration: bool


@dataclass(frozen=True)
class Edition:
    identifier: str
    language: str
    name: str
    english_name: str
    format: str
    type: str


@dataclass(frozen=True)
class ChapterDetail:
    """A chapter with its verses in a single text edition."""

    number: int
    name: str
    english_name: str
    english_name_translation: str
    verse_count: int
    revelation_place: RevelationPlace
    verses: Tuple[Verse, ...]
    edition: Edition

    @property
    def meta(self) -> ChapterMeta:
        return ChapterMeta(
            number=self.number,
            name=self.name,
            english_name=self.english_name,
            english_name_translation=self.english_name_translation,
            verse_count=self.verse_count,
            revelation_place=self.revelation_place,
        )


class QuranService:
    """Thin wrapper around the alquran.cloud REST endpoints."""

    def __init__(
        self,
        base_url: str = QURAN_API_BASE_URL,
        edition: str = DEFAULT_EDITION,
        timeout: int = 10,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.edition = edition
        self.timeout = timeout

    def list_chapters(self) -> List[ChapterMeta]:
        """Return the chapter index, or an empty list when it cannot be fetched."""
        url = f"{self.base_url}/surah"
        try:
            data = self._get_data(url)
        except (requests.RequestException, ValueError):
            LOGGER.warning("Failed to fetch chapter list from %s", url, exc_info=True)
            return []

        if not isinstance(data, list):
            LOGGER.warning("Chapter list payload is %s, expected a list", type(data).__name__)
            return []

        chapters: List[ChapterMeta] = []
        for entry in data:
            try:
                chapters.append(_parse_chapter_meta(entry))
            except (KeyError, TypeError, ValueError):
                LOGGER.warning("Skipping malformed chapter entry %r", entry, exc_info=True)
                continue

        LOGGER.debug("Parsed %d chapters", len(chapters))
        return chapters

    def get_chapter(self, number: int) -> Optional[ChapterDetail]:
        """Return one chapter with its verses, or None on any failure."""
        if not 1 <= number <= CHAPTER_COUNT:
            LOGGER.warning("Refusing to fetch chapter %s outside 1..%d", number, CHAPTER_COUNT)
            return None

        url = f"{self.base_url}/surah/{number}/{self.edition}"
        try:
            data = self._get_data(url)
            detail = _parse_chapter_detail(data)
        except (requests.RequestException, KeyError, TypeError, ValueError):
            LOGGER.warning("Failed to fetch chapter %s from %s", number, url, exc_info=True)
            return None

        LOGGER.debug("Chapter %s loaded with %d verses", detail.number, len(detail.verses))
        return detail

    def _get_data(self, url: str) -> Any:
        LOGGER.debug("Requesting %s", url)
        response = requests.get(url, timeout=self.timeout)
        LOGGER.debug("Quran API response status: %s", response.status_code)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Quran API payload is not an object")
        if payload.get("code") != 200:
            raise ValueError(f"Invalid response from Quran API: {payload.get('status')}")
        return payload.get("data")


def _parse_chapter_meta(entry: Dict[str, Any]) -> ChapterMeta:
    return ChapterMeta(
        number=int(entry["number"]),
        name=str(entry["name"]),
        english_name=str(entry.get("englishName", "")),
        english_name_translation=str(entry.get("englishNameTranslation", "")),
        verse_count=int(entry["numberOfAyahs"]),
        revelation_place=RevelationPlace(entry["revelationType"]),
    )


def _parse_verse(entry: Dict[str, Any]) -> Verse:
    # "sajda" is either false or an object describing the prostration
    sajda = entry.get("sajda", False)
    return Verse(
        global_number=int(entry["number"]),
        text=str(entry["text"]),
        number_in_chapter=int(entry["numberInSurah"]),
        juz=int(entry.get("juz", 0)),
        manzil=int(entry.get("manzil", 0)),
        page=int(entry.get("page", 0)),
        ruku=int(entry.get("ruku", 0)),
        hizb_quarter=int(entry.get("hizbQuarter", 0)),
        is_prostration=bool(sajda),
    )


def _parse_edition(entry: Optional[Dict[str, Any]]) -> Edition:
    entry = entry or {}
    return Edition(
        identifier=str(entry.get("identifier", "")),
        language=str(entry.get("language", "")),
        name=str(entry.get("name", "")),
        english_name=str(entry.get("englishName", "")),
        format=str(entry.get("format", "")),
        type=str(entry.get("type", "")),
    )


def _parse_chapter_detail(data: Dict[str, Any]) -> ChapterDetail:
    if not isinstance(data, dict):
        raise ValueError("Chapter payload is not an object")

    meta = _parse_chapter_meta(data)
    verses = sorted((_parse_verse(item) for item in data["ayahs"]), key=lambda verse: verse.number_in_chapter)
    expected = list(range(1, len(verses) + 1))
    if [verse.number_in_chapter for verse in verses] != expected:
        raise ValueError(f"Chapter {meta.number} verses are not contiguous from 1")

    return ChapterDetail(
        number=meta.number,
        name=meta.name,
        english_name=meta.english_name,
        english_name_translation=meta.english_name_translation,
        verse_count=meta.verse_count,
        revelation_place=meta.revelation_place,
        verses=tuple(verses),
        edition=_parse_edition(data.get("edition")),
    )


__all__ = [
    "CHAPTER_COUNT",
    "ChapterDetail",
    "ChapterMeta",
    "DEFAULT_EDITION",
    "Edition",
    "QURAN_API_BASE_URL",
    "QuranService",
    "RevelationPlace",
    "Verse",
]
