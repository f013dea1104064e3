"""Reading-state logic for the chapter reader: pagination, selection and appearance."""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Union

from bookmark_store import Bookmark
from quran_api import ChapterDetail, ChapterMeta, Verse

LOGGER = logging.getLogger(__name__)

VERSES_PER_PAGE = 25
OPENING_FORMULA = "بِسۡمِ ٱللَّهِ ٱلرَّحۡمَـٰنِ ٱلرَّحِيمِ"
# Chapter 9 has no opening formula; in chapter 1 the formula is verse 1 itself.
NO_FORMULA_CHAPTER = 9
FORMULA_IS_VERSE_CHAPTER = 1

_ARABIC_INDIC_DIGITS = str.maketrans("0123456789", "٠١٢٣٤٥٦٧٨٩")


def page_count(verse_count: int) -> int:
    return max(1, math.ceil(verse_count / VERSES_PER_PAGE))


def clamp_page(page: int, total_pages: int) -> int:
    return max(1, min(page, max(1, total_pages)))


def page_for_verse(verse_number: int) -> int:
    """Page (1-based) that holds the given verse number."""
    return max(1, math.ceil(verse_number / VERSES_PER_PAGE))


def page_slice(verses: Sequence[Verse], page: int) -> List[Verse]:
    """Verses numbered ``(page-1)*25+1`` through ``min(page*25, len(verses))``."""
    page = clamp_page(page, page_count(len(verses)))
    start = (page - 1) * VERSES_PER_PAGE
    end = min(start + VERSES_PER_PAGE, len(verses))
    return list(verses[start:end])


def shows_opening_header(chapter_number: int, page: int) -> bool:
    return chapter_number != NO_FORMULA_CHAPTER and page == 1


def display_text(chapter_number: int, verse: Verse) -> str:
    """Verse text as shown on the page, without a duplicated opening formula."""
    text = verse.text
    if (
        chapter_number not in (FORMULA_IS_VERSE_CHAPTER, NO_FORMULA_CHAPTER)
        and verse.number_in_chapter == 1
        and text.startswith(OPENING_FORMULA)
    ):
        text = text[len(OPENING_FORMULA):].strip()
    return text


def arabic_digits(number: int) -> str:
    return str(number).translate(_ARABIC_INDIC_DIGITS)


def filter_chapters(chapters: Iterable[ChapterMeta], term: str) -> List[ChapterMeta]:
    """Match Arabic name substring, English name substring (any case) or exact number."""
    lowered = term.lower()
    return [
        chapter
        for chapter in chapters
        if term in chapter.name
        or lowered in chapter.english_name.lower()
        or str(chapter.number) == term
    ]


@dataclass(frozen=True)
class AppearanceSettings:
    """Reader text appearance; local to one reading session."""

    font_size: int = 36
    line_height: float = 2.5
    bold: bool = False
    dark_mode: bool = False

    FONT_SIZE_MIN = 20
    FONT_SIZE_MAX = 60
    FONT_SIZE_STEP = 2
    LINE_HEIGHT_MIN = 1.5
    LINE_HEIGHT_MAX = 5.0
    LINE_HEIGHT_STEP = 0.2

    def with_font_size(self, value: int) -> "AppearanceSettings":
        value = max(self.FONT_SIZE_MIN, min(int(value), self.FONT_SIZE_MAX))
        steps = round((value - self.FONT_SIZE_MIN) / self.FONT_SIZE_STEP)
        return replace(self, font_size=self.FONT_SIZE_MIN + steps * self.FONT_SIZE_STEP)

    def with_line_height(self, value: float) -> "AppearanceSettings":
        value = max(self.LINE_HEIGHT_MIN, min(float(value), self.LINE_HEIGHT_MAX))
        steps = round((value - self.LINE_HEIGHT_MIN) / self.LINE_HEIGHT_STEP)
        snapped = round(self.LINE_HEIGHT_MIN + steps * self.LINE_HEIGHT_STEP, 1)
        return replace(self, line_height=min(snapped, self.LINE_HEIGHT_MAX))

    def toggled_bold(self) -> "AppearanceSettings":
        return replace(self, bold=not self.bold)

    def toggled_dark_mode(self) -> "AppearanceSettings":
        return replace(self, dark_mode=not self.dark_mode)


# -- Verse modal states --------------------------------------------------------
@dataclass(frozen=True)
class ModalClosed:
    pass


@dataclass(frozen=True)
class ChoosingAction:
    verse: Verse


@dataclass(frozen=True)
class LoadingExplanation:
    verse: Verse


@dataclass(frozen=True)
class ShowingExplanation:
    verse: Verse
    text: str


@dataclass(frozen=True)
class ExplanationFailed:
    verse: Verse


ModalState = Union[ModalClosed, ChoosingAction, LoadingExplanation, ShowingExplanation, ExplanationFailed]


class ReaderSession:
    """State of one chapter in the reader: current page and the verse modal."""

    def __init__(self, chapter_number: int) -> None:
        self.chapter_number = chapter_number
        self.chapter: Optional[ChapterDetail] = None
        self.loading = True
        self.page = 1
        self.modal: ModalState = ModalClosed()
        self._pending_scroll: Optional[int] = None

    # ------------------------------------------------------------------
    @property
    def load_failed(self) -> bool:
        return not self.loading and self.chapter is None

    @property
    def total_pages(self) -> int:
        if self.chapter is None:
            return 1
        return page_count(len(self.chapter.verses))

    @property
    def selected_verse(self) -> Optional[Verse]:
        return getattr(self.modal, "verse", None)

    def load(self, chapter: Optional[ChapterDetail], bookmark: Optional[Bookmark] = None) -> None:
        """Install a fetched chapter and pick the initial page."""
        self.loading = False
        self.chapter = chapter
        self.page = 1
        self.modal = ModalClosed()
        self._pending_scroll = None
        if chapter is None:
            LOGGER.debug("Chapter %s failed to load", self.chapter_number)
            return

        if bookmark and bookmark.chapter_number == chapter.number:
            self.page = clamp_page(page_for_verse(bookmark.verse_number), self.total_pages)
            self._pending_scroll = bookmark.verse_number
            LOGGER.debug(
                "Restoring bookmark %s:%s on page %s",
                chapter.number,
                bookmark.verse_number,
                self.page,
            )

    def take_pending_scroll(self) -> Optional[int]:
        """Return the bookmarked verse to center on, once per load."""
        verse_number, self._pending_scroll = self._pending_scroll, None
        return verse_number

    def visible_verses(self) -> List[Verse]:
        if self.chapter is None:
            return []
        return page_slice(self.chapter.verses, self.page)

    def go_to_page(self, page: int) -> bool:
        target = clamp_page(page, self.total_pages)
        if target == self.page:
            return False
        self.page = target
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self.page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self.page - 1)

    # -- Modal ---------------------------------------------------------------
    def open_verse(self, verse: Verse) -> None:
        self.modal = ChoosingAction(verse)

    def close_modal(self) -> None:
        self.modal = ModalClosed()

    def back_to_actions(self) -> None:
        verse = self.selected_verse
        self.modal = ChoosingAction(verse) if verse is not None else ModalClosed()

    def begin_explanation(self) -> Optional[Verse]:
        if self.chapter is None or not isinstance(self.modal, (ChoosingAction, ExplanationFailed)):
            return None
        verse = self.modal.verse
        self.modal = LoadingExplanation(verse)
        return verse

    def resolve_explanation(self, verse: Verse, text: Optional[str]) -> bool:
        """Apply an explanation result; stale results for other verses are dropped."""
        if not isinstance(self.modal, LoadingExplanation) or self.modal.verse != verse:
            LOGGER.debug("Dropping stale explanation for verse %s", verse.number_in_chapter)
            return False
        if text is None:
            self.modal = ExplanationFailed(verse)
        else:
            self.modal = ShowingExplanation(verse, text)
        return True

    def create_bookmark(self, now_ms: int) -> Optional[Bookmark]:
        verse = self.selected_verse
        if self.chapter is None or verse is None:
            return None
        bookmark = Bookmark(
            chapter_number=self.chapter.number,
            chapter_name=self.chapter.name,
            verse_number=verse.number_in_chapter,
            saved_at=now_ms,
        )
        self.close_modal()
        return bookmark


def is_bookmarked(bookmark: Optional[Bookmark], chapter_number: int, verse: Verse) -> bool:
    return (
        bookmark is not None
        and bookmark.chapter_number == chapter_number
        and bookmark.verse_number == verse.number_in_chapter
    )


__all__ = [
    "AppearanceSettings",
    "ChoosingAction",
    "ExplanationFailed",
    "LoadingExplanation",
    "ModalClosed",
    "ModalState",
    "OPENING_FORMULA",
    "ReaderSession",
    "ShowingExplanation",
    "VERSES_PER_PAGE",
    "arabic_digits",
    "clamp_page",
    "display_text",
    "filter_chapters",
    "is_bookmarked",
    "page_count",
    "page_for_verse",
    "page_slice",
    "shows_opening_header",
]
