"""Searchable chapter index with the "continue reading" shortcut."""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

try:
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

try:
    Signal = QtCore.pyqtSignal  # type: ignore[attr-defined]
except AttributeError:  # pragma: no cover - PySide compatibility
    Signal = QtCore.Signal  # type: ignore[attr-defined]

from bookmark_store import Bookmark
from quran_api import ChapterMeta, QuranService, RevelationPlace
from reading import arabic_digits, filter_chapters

LOGGER = logging.getLogger(__name__)

HERO_VERSE = "كِتَـٰبٌ أَنزَلۡنَـٰهُ إِلَيۡكَ مُبَـٰرَكٞ لِّيَدَّبَّرُوٓاْ ءَايَـٰتِهِۦ وَلِيَتَذَكَّرَ أُوْلُواْ ٱلۡأَلۡبَـٰبِ"


class SurahListPage(QtWidgets.QWidget):
    """Display all chapters, filter them, and surface the saved bookmark."""

    surah_selected = Signal(int)

    def __init__(
        self,
        quran_service: QuranService,
        runner: Callable[..., None],
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._quran_service = quran_service
        self._run_async = runner
        self._strings: Dict[str, Any] = {}
        self._chapters: List[ChapterMeta] = []
        self._bookmark: Optional[Bookmark] = None
        self._loaded = False
        self._loading = False

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(16)

        self.hero_label = QtWidgets.QLabel(HERO_VERSE)
        self.hero_label.setObjectName("quranHero")
        self.hero_label.setAlignment(QtCore.Qt.AlignCenter)
        self.hero_label.setWordWrap(True)
        hero_font = QtGui.QFont(self.hero_label.font())
        hero_font.setPointSize(20)
        self.hero_label.setFont(hero_font)
        layout.addWidget(self.hero_label)

        self.bookmark_card = QtWidgets.QFrame()
        self.bookmark_card.setObjectName("bookmarkCard")
        bookmark_layout = QtWidgets.QHBoxLayout(self.bookmark_card)
        bookmark_layout.setContentsMargins(18, 12, 18, 12)
        bookmark_layout.setSpacing(12)

        self.bookmark_status = QtWidgets.QLabel()
        self.bookmark_status.setObjectName("quranStatusLabel")
        self.bookmark_status.setWordWrap(True)
        bookmark_layout.addWidget(self.bookmark_status, stretch=1)

        self.continue_button = QtWidgets.QPushButton("أكمل القراءة")
        self.continue_button.setObjectName("quranSaveButton")
        self.continue_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.continue_button.clicked.connect(self._continue_reading)  # type: ignore
        bookmark_layout.addWidget(self.continue_button)
        self.bookmark_card.hide()
        layout.addWidget(self.bookmark_card)

        self.search_input = QtWidgets.QLineEdit()
        self.search_input.setObjectName("quranSearch")
        self.search_input.setPlaceholderText("ابحث عن اسم السورة...")
        self.search_input.setClearButtonEnabled(True)
        self.search_input.textChanged.connect(self._apply_filter)  # type: ignore
        layout.addWidget(self.search_input)

        self.message_label = QtWidgets.QLabel()
        self.message_label.setObjectName("quranMessage")
        self.message_label.setAlignment(QtCore.Qt.AlignCenter)
        self.message_label.hide()
        layout.addWidget(self.message_label)

        self.surah_list = QtWidgets.QListWidget()
        self.surah_list.setObjectName("quranList")
        self.surah_list.setSelectionMode(QtWidgets.QAbstractItemView.SingleSelection)
        self.surah_list.setUniformItemSizes(True)
        self.surah_list.itemClicked.connect(self._on_item_activated)  # type: ignore
        layout.addWidget(self.surah_list, stretch=1)

    # ------------------------------------------------------------------
    def apply_translations(self, translations: Dict[str, Any]) -> None:
        self._strings = translations
        self.continue_button.setText(translations.get("quran_continue", "أكمل القراءة"))
        self.search_input.setPlaceholderText(translations.get("quran_search_placeholder", "ابحث عن اسم السورة..."))
        self._update_bookmark_status()
        self._update_message()

    def set_bookmark(self, bookmark: Optional[Bookmark]) -> None:
        self._bookmark = bookmark
        self._update_bookmark_status()

    def ensure_loaded(self) -> None:
        """Fetch the chapter index the first time the page is shown."""
        if self._loaded or self._loading:
            return
        self._loading = True
        self._update_message()
        LOGGER.debug("Loading chapter index")
        self._run_async(self._quran_service.list_chapters, self._on_chapters_loaded, self._on_chapters_error)

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        self.ensure_loaded()

    @property
    def visible_chapters(self) -> List[ChapterMeta]:
        return [
            self.surah_list.item(index).data(QtCore.Qt.UserRole)
            for index in range(self.surah_list.count())
        ]

    # ------------------------------------------------------------------
    def _on_chapters_loaded(self, chapters: List[ChapterMeta]) -> None:
        self._loading = False
        self._loaded = True
        self._chapters = list(chapters)
        LOGGER.info("Chapter index ready with %d entries", len(self._chapters))
        self._apply_filter(self.search_input.text())

    def _on_chapters_error(self, error: Exception) -> None:
        LOGGER.error("Chapter index task failed", exc_info=error)
        self._on_chapters_loaded([])

    def _apply_filter(self, term: str) -> None:
        matches = filter_chapters(self._chapters, term)
        self.surah_list.clear()
        for chapter in matches:
            item = QtWidgets.QListWidgetItem(self._format_chapter(chapter))
            item.setData(QtCore.Qt.UserRole, chapter)
            item.setSizeHint(QtCore.QSize(0, 56))
            self.surah_list.addItem(item)
        self._update_message()

    def _format_chapter(self, chapter: ChapterMeta) -> str:
        place = (
            self._strings.get("quran_meccan", "مكية")
            if chapter.revelation_place is RevelationPlace.MECCAN
            else self._strings.get("quran_medinan", "مدنية")
        )
        verses_label = self._strings.get("quran_verse_count", "{count} آية").format(
            count=arabic_digits(chapter.verse_count)
        )
        return (
            f"{arabic_digits(chapter.number)} · {chapter.name}  ({chapter.english_name})\n"
            f"{place} · {verses_label}"
        )

    def _update_message(self) -> None:
        if self._loading:
            text = self._strings.get("loading", "جاري التحميل...")
        elif self._loaded and not self._chapters:
            text = self._strings.get("quran_list_error", "تعذر تحميل قائمة السور.")
        elif self._loaded and self.surah_list.count() == 0:
            text = self._strings.get("quran_no_results", "لا توجد نتائج مطابقة.")
        else:
            text = ""
        self.message_label.setText(text)
        self.message_label.setVisible(bool(text))

    def _update_bookmark_status(self) -> None:
        bookmark = self._bookmark
        if not bookmark:
            self.bookmark_card.hide()
            return
        template = self._strings.get("quran_status", "آخر قراءة: سورة {surah} · آية {ayah}")
        self.bookmark_status.setText(
            template.format(surah=bookmark.chapter_name, ayah=arabic_digits(bookmark.verse_number))
        )
        self.bookmark_card.show()

    def _continue_reading(self) -> None:
        if self._bookmark:
            self.surah_selected.emit(self._bookmark.chapter_number)

    def _on_item_activated(self, item: Optional[QtWidgets.QListWidgetItem]) -> None:
        if item is None:
            return
        chapter: ChapterMeta = item.data(QtCore.Qt.UserRole)
        self.surah_selected.emit(chapter.number)


__all__ = ["SurahListPage"]
