"""Paginated chapter reader with the verse action dialog."""
from __future__ import annotations

import html
import logging
import time
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Tuple

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
from explanations import ExplanationService
from quran_api import ChapterDetail, QuranService, Verse
from reading import (
    OPENING_FORMULA,
    AppearanceSettings,
    ChoosingAction,
    ExplanationFailed,
    LoadingExplanation,
    ModalClosed,
    ModalState,
    ReaderSession,
    ShowingExplanation,
    arabic_digits,
    display_text,
    is_bookmarked,
    shows_opening_header,
)

LOGGER = logging.getLogger(__name__)

VERSE_LINK_SCHEME = "ayah"

PREFERRED_FONTS = [
    "KFGQPC Uthman Taha Naskh",
    "KFGQPC Hafs",
    "Amiri Quran",
    "Scheherazade New",
    "Traditional Arabic",
]


class VerseDialog(QtWidgets.QDialog):
    """Action sheet for one verse: bookmark it or ask for an explanation."""

    bookmark_requested = Signal()
    explanation_requested = Signal()
    back_requested = Signal()

    def __init__(self, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self.setObjectName("verseDialog")
        self.setModal(True)
        self.setLayoutDirection(QtCore.Qt.RightToLeft)
        self.setMinimumWidth(520)
        self._strings: Dict[str, Any] = {}

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(20, 20, 20, 20)
        layout.setSpacing(14)

        self.title_label = QtWidgets.QLabel()
        self.title_label.setObjectName("verseDialogTitle")
        title_font = QtGui.QFont(self.title_label.font())
        title_font.setPointSize(15)
        title_font.setBold(True)
        self.title_label.setFont(title_font)
        layout.addWidget(self.title_label)

        self.verse_label = QtWidgets.QLabel()
        self.verse_label.setObjectName("verseDialogText")
        self.verse_label.setWordWrap(True)
        self.verse_label.setAlignment(QtCore.Qt.AlignCenter)
        verse_font = QtGui.QFont(self.verse_label.font())
        verse_font.setPointSize(20)
        self.verse_label.setFont(verse_font)
        layout.addWidget(self.verse_label)

        self.actions_widget = QtWidgets.QWidget()
        actions_layout = QtWidgets.QHBoxLayout(self.actions_widget)
        actions_layout.setContentsMargins(0, 0, 0, 0)
        actions_layout.setSpacing(12)

        self.bookmark_button = QtWidgets.QPushButton("حفظ كآخر قراءة")
        self.bookmark_button.setObjectName("quranSaveButton")
        self.bookmark_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.bookmark_button.clicked.connect(self.bookmark_requested.emit)  # type: ignore
        actions_layout.addWidget(self.bookmark_button)

        self.explain_button = QtWidgets.QPushButton("تفسير الآية")
        self.explain_button.setObjectName("SecondaryButton")
        self.explain_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.explain_button.clicked.connect(self.explanation_requested.emit)  # type: ignore
        actions_layout.addWidget(self.explain_button)
        layout.addWidget(self.actions_widget)

        self.status_label = QtWidgets.QLabel()
        self.status_label.setObjectName("verseDialogStatus")
        self.status_label.setAlignment(QtCore.Qt.AlignCenter)
        self.status_label.setWordWrap(True)
        layout.addWidget(self.status_label)

        self.explanation_text = QtWidgets.QTextBrowser()
        self.explanation_text.setObjectName("verseExplanation")
        self.explanation_text.setLayoutDirection(QtCore.Qt.RightToLeft)
        self.explanation_text.setMinimumHeight(220)
        layout.addWidget(self.explanation_text, stretch=1)

        self.back_button = QtWidgets.QPushButton("العودة للخيارات")
        self.back_button.setObjectName("GhostButton")
        self.back_button.clicked.connect(self.back_requested.emit)  # type: ignore
        layout.addWidget(self.back_button)

    def apply_translations(self, translations: Dict[str, Any]) -> None:
        self._strings = translations
        self.bookmark_button.setText(translations.get("reader_save_bookmark", "حفظ كآخر قراءة"))
        self.explain_button.setText(translations.get("reader_explain", "تفسير الآية"))
        self.back_button.setText(translations.get("reader_back_to_actions", "العودة للخيارات"))

    def render(self, chapter_name: str, state: ModalState) -> None:
        verse = getattr(state, "verse", None)
        if verse is None:
            return

        template = self._strings.get("reader_dialog_title", "{surah} - آية {ayah}")
        self.title_label.setText(template.format(surah=chapter_name, ayah=arabic_digits(verse.number_in_chapter)))
        self.verse_label.setText(verse.text)

        choosing = isinstance(state, (ChoosingAction, ExplanationFailed))
        self.actions_widget.setVisible(choosing)

        if isinstance(state, LoadingExplanation):
            self.status_label.setText(self._strings.get("reader_explanation_loading", "جاري جلب التفسير..."))
        elif isinstance(state, ExplanationFailed):
            self.status_label.setText(
                self._strings.get("reader_explanation_error", "تعذر جلب التفسير. حاول مرة أخرى.")
            )
        else:
            self.status_label.setText("")
        self.status_label.setVisible(bool(self.status_label.text()))

        showing = isinstance(state, ShowingExplanation)
        self.explanation_text.setVisible(showing)
        self.back_button.setVisible(showing)
        if showing:
            self.explanation_text.setPlainText(state.text)
        else:
            self.explanation_text.clear()


class SurahReaderPage(QtWidgets.QWidget):
    """Render one chapter page by page and handle verse actions."""

    back_requested = Signal()
    bookmark_created = Signal(object)

    def __init__(
        self,
        quran_service: QuranService,
        explanation_service: ExplanationService,
        runner: Callable[..., None],
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._quran_service = quran_service
        self._explanation_service = explanation_service
        self._run_async = runner
        self._strings: Dict[str, Any] = {}
        self._session: Optional[ReaderSession] = None
        self._bookmark: Optional[Bookmark] = None
        self._appearance = AppearanceSettings()
        self._deferred_center: Optional[int] = None
        self._rendered_page: Optional[Tuple[int, int]] = None
        self._font_family = self._choose_font_family()

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(12)

        header_row = QtWidgets.QHBoxLayout()
        header_row.setSpacing(12)

        self.back_button = QtWidgets.QPushButton("رجوع")
        self.back_button.setObjectName("quranBackButton")
        self.back_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.back_button.clicked.connect(self.back_requested.emit)  # type: ignore
        header_row.addWidget(self.back_button, 0)

        title_column = QtWidgets.QVBoxLayout()
        title_column.setSpacing(2)
        self.title_label = QtWidgets.QLabel()
        self.title_label.setObjectName("quranReadingTitle")
        self.title_label.setAlignment(QtCore.Qt.AlignCenter)
        title_font = QtGui.QFont(self.title_label.font())
        title_font.setPointSize(18)
        title_font.setBold(True)
        self.title_label.setFont(title_font)
        title_column.addWidget(self.title_label)

        self.page_info_label = QtWidgets.QLabel()
        self.page_info_label.setObjectName("quranPageInfo")
        self.page_info_label.setAlignment(QtCore.Qt.AlignCenter)
        title_column.addWidget(self.page_info_label)
        header_row.addLayout(title_column, stretch=1)

        self.settings_button = QtWidgets.QPushButton("⚙")
        self.settings_button.setObjectName("SecondaryButton")
        self.settings_button.setCheckable(True)
        self.settings_button.setToolTip("إعدادات النص")
        self.settings_button.toggled.connect(self._toggle_settings_panel)  # type: ignore
        header_row.addWidget(self.settings_button, 0)
        layout.addLayout(header_row)

        self.settings_panel = self._build_settings_panel()
        self.settings_panel.hide()
        layout.addWidget(self.settings_panel)

        self.reading_text = QtWidgets.QTextBrowser()
        self.reading_text.setObjectName("quranText")
        self.reading_text.setReadOnly(True)
        self.reading_text.setOpenLinks(False)
        self.reading_text.setOpenExternalLinks(False)
        self.reading_text.setLayoutDirection(QtCore.Qt.RightToLeft)
        self.reading_text.setWordWrapMode(QtGui.QTextOption.WrapAtWordBoundaryOrAnywhere)
        self.reading_text.anchorClicked.connect(self._on_anchor_clicked)  # type: ignore
        layout.addWidget(self.reading_text, stretch=1)

        pager_row = QtWidgets.QHBoxLayout()
        pager_row.setSpacing(12)
        self.previous_button = QtWidgets.QPushButton("السابقة")
        self.previous_button.setObjectName("GhostButton")
        self.previous_button.clicked.connect(self.previous_page)  # type: ignore
        pager_row.addWidget(self.previous_button)

        self.page_label = QtWidgets.QLabel()
        self.page_label.setObjectName("quranPageLabel")
        self.page_label.setAlignment(QtCore.Qt.AlignCenter)
        pager_row.addWidget(self.page_label, stretch=1)

        self.next_button = QtWidgets.QPushButton("التالية")
        self.next_button.setObjectName("PrimaryButton")
        self.next_button.clicked.connect(self.next_page)  # type: ignore
        pager_row.addWidget(self.next_button)
        layout.addLayout(pager_row)

        self.dialog = VerseDialog(self)
        self.dialog.bookmark_requested.connect(self._create_bookmark)  # type: ignore
        self.dialog.explanation_requested.connect(self._request_explanation)  # type: ignore
        self.dialog.back_requested.connect(self._back_to_actions)  # type: ignore
        self.dialog.finished.connect(self._on_dialog_finished)  # type: ignore

        self._render()

    # ------------------------------------------------------------------
    @property
    def session(self) -> Optional[ReaderSession]:
        return self._session

    @property
    def appearance(self) -> AppearanceSettings:
        return self._appearance

    def apply_translations(self, translations: Dict[str, Any]) -> None:
        self._strings = translations
        self.back_button.setText(translations.get("quran_back", "رجوع"))
        self.previous_button.setText(translations.get("reader_previous", "السابقة"))
        self.next_button.setText(translations.get("reader_next", "التالية"))
        self.settings_button.setToolTip(translations.get("reader_settings", "إعدادات النص"))
        self.font_size_label.setText(translations.get("reader_font_size", "حجم الخط"))
        self.line_height_label.setText(translations.get("reader_line_height", "تباعد الأسطر"))
        self.bold_check.setText(translations.get("reader_bold", "خط عريض"))
        self.dark_check.setText(translations.get("reader_dark_mode", "الوضع الليلي"))
        self.dialog.apply_translations(translations)
        self._render()

    def set_bookmark(self, bookmark: Optional[Bookmark]) -> None:
        self._bookmark = bookmark
        if self._session and self._session.chapter:
            self._render_text()

    def open_chapter(self, chapter_number: int, bookmark: Optional[Bookmark] = None) -> None:
        """Start a fresh reading session and fetch the chapter."""
        LOGGER.info("Opening chapter %s", chapter_number)
        if self.dialog.isVisible():
            self.dialog.reject()
        self._bookmark = bookmark
        self._session = ReaderSession(chapter_number)
        self._set_appearance(AppearanceSettings())
        self._deferred_center = None
        self._render()
        self._run_async(
            partial(self._quran_service.get_chapter, chapter_number),
            partial(self._on_chapter_loaded, chapter_number),
            partial(self._on_chapter_error, chapter_number),
        )

    def next_page(self) -> None:
        if self._session and self._session.next_page():
            self._render()
            self._scroll_to_top()

    def previous_page(self) -> None:
        if self._session and self._session.previous_page():
            self._render()
            self._scroll_to_top()

    def open_verse(self, verse_number: int) -> None:
        session = self._session
        if session is None or session.chapter is None:
            return
        if not 1 <= verse_number <= len(session.chapter.verses):
            LOGGER.warning("Ignoring click on unknown verse %s", verse_number)
            return
        verse = session.chapter.verses[verse_number - 1]
        session.open_verse(verse)
        self._render_dialog()
        self.dialog.open()

    def close_verse(self) -> None:
        if self.dialog.isVisible():
            self.dialog.reject()
        elif self._session:
            self._session.close_modal()

    # -- Async results -------------------------------------------------------
    def _on_chapter_loaded(self, chapter_number: int, chapter: Optional[ChapterDetail]) -> None:
        session = self._session
        if session is None or session.chapter_number != chapter_number:
            LOGGER.debug("Dropping late result for chapter %s", chapter_number)
            return
        session.load(chapter, self._bookmark)
        self._render()
        target = session.take_pending_scroll()
        if target is not None:
            self._center_on_verse(target)
        else:
            self._scroll_to_top()

    def _on_chapter_error(self, chapter_number: int, error: Exception) -> None:
        LOGGER.error("Chapter %s task failed", chapter_number, exc_info=error)
        self._on_chapter_loaded(chapter_number, None)

    def _request_explanation(self) -> None:
        session = self._session
        if session is None or session.chapter is None:
            return
        verse = session.begin_explanation()
        if verse is None:
            return
        self._render_dialog()
        chapter_name = session.chapter.name
        self._run_async(
            partial(
                self._explanation_service.get_verse_explanation,
                chapter_name,
                verse.number_in_chapter,
                verse.text,
            ),
            partial(self._on_explanation_ready, session, verse),
            partial(self._on_explanation_error, session, verse),
        )

    def _on_explanation_ready(self, session: ReaderSession, verse: Verse, text: Optional[str]) -> None:
        if session is not self._session:
            return
        if session.resolve_explanation(verse, text):
            self._render_dialog()

    def _on_explanation_error(self, session: ReaderSession, verse: Verse, error: Exception) -> None:
        LOGGER.error("Explanation task failed for verse %s", verse.number_in_chapter, exc_info=error)
        self._on_explanation_ready(session, verse, None)

    # -- Dialog actions ------------------------------------------------------
    def _create_bookmark(self) -> None:
        if self._session is None:
            return
        bookmark = self._session.create_bookmark(int(time.time() * 1000))
        if bookmark is None:
            return
        self._bookmark = bookmark
        self.dialog.accept()
        self._render_text()
        self.bookmark_created.emit(bookmark)

    def _back_to_actions(self) -> None:
        if self._session:
            self._session.back_to_actions()
            self._render_dialog()

    def _on_dialog_finished(self, _result: int) -> None:
        if self._session:
            self._session.close_modal()

    def _on_anchor_clicked(self, url: QtCore.QUrl) -> None:
        if url.scheme() != VERSE_LINK_SCHEME:
            return
        try:
            verse_number = int(url.path())
        except ValueError:
            LOGGER.warning("Unexpected verse link %s", url.toString())
            return
        self.open_verse(verse_number)

    # -- Appearance ----------------------------------------------------------
    def _build_settings_panel(self) -> QtWidgets.QWidget:
        panel = QtWidgets.QFrame()
        panel.setObjectName("readerSettings")
        grid = QtWidgets.QGridLayout(panel)
        grid.setContentsMargins(16, 12, 16, 12)
        grid.setHorizontalSpacing(16)
        grid.setVerticalSpacing(8)

        self.font_size_label = QtWidgets.QLabel("حجم الخط")
        self.font_size_spin = QtWidgets.QSpinBox()
        self.font_size_spin.setRange(AppearanceSettings.FONT_SIZE_MIN, AppearanceSettings.FONT_SIZE_MAX)
        self.font_size_spin.setSingleStep(AppearanceSettings.FONT_SIZE_STEP)
        self.font_size_spin.valueChanged.connect(self._on_font_size_changed)  # type: ignore
        grid.addWidget(self.font_size_label, 0, 0)
        grid.addWidget(self.font_size_spin, 0, 1)

        self.line_height_label = QtWidgets.QLabel("تباعد الأسطر")
        self.line_height_spin = QtWidgets.QDoubleSpinBox()
        self.line_height_spin.setDecimals(1)
        self.line_height_spin.setRange(AppearanceSettings.LINE_HEIGHT_MIN, AppearanceSettings.LINE_HEIGHT_MAX)
        self.line_height_spin.setSingleStep(AppearanceSettings.LINE_HEIGHT_STEP)
        self.line_height_spin.valueChanged.connect(self._on_line_height_changed)  # type: ignore
        grid.addWidget(self.line_height_label, 1, 0)
        grid.addWidget(self.line_height_spin, 1, 1)

        self.bold_check = QtWidgets.QCheckBox("خط عريض")
        self.bold_check.toggled.connect(self._on_bold_toggled)  # type: ignore
        grid.addWidget(self.bold_check, 2, 0)

        self.dark_check = QtWidgets.QCheckBox("الوضع الليلي")
        self.dark_check.toggled.connect(self._on_dark_mode_toggled)  # type: ignore
        grid.addWidget(self.dark_check, 2, 1)

        self._sync_settings_widgets()
        return panel

    def _toggle_settings_panel(self, checked: bool) -> None:
        self.settings_panel.setVisible(checked)

    def _set_appearance(self, appearance: AppearanceSettings) -> None:
        self._appearance = appearance
        self._sync_settings_widgets()
        self._render_text()

    def _sync_settings_widgets(self) -> None:
        widgets = (self.font_size_spin, self.line_height_spin, self.bold_check, self.dark_check)
        for widget in widgets:
            widget.blockSignals(True)
        self.font_size_spin.setValue(self._appearance.font_size)
        self.line_height_spin.setValue(self._appearance.line_height)
        self.bold_check.setChecked(self._appearance.bold)
        self.dark_check.setChecked(self._appearance.dark_mode)
        for widget in widgets:
            widget.blockSignals(False)

    def _on_font_size_changed(self, value: int) -> None:
        self._set_appearance(self._appearance.with_font_size(value))

    def _on_line_height_changed(self, value: float) -> None:
        self._set_appearance(self._appearance.with_line_height(value))

    def _on_bold_toggled(self, checked: bool) -> None:
        if checked != self._appearance.bold:
            self._set_appearance(self._appearance.toggled_bold())

    def _on_dark_mode_toggled(self, checked: bool) -> None:
        if checked != self._appearance.dark_mode:
            self._set_appearance(self._appearance.toggled_dark_mode())

    # -- Rendering -----------------------------------------------------------
    def _render(self) -> None:
        session = self._session
        chapter = session.chapter if session else None
        if chapter is not None and session is not None:
            self.title_label.setText(chapter.name)
            template = self._strings.get("reader_page_of", "صفحة {page} من {total}")
            self.page_info_label.setText(
                template.format(page=arabic_digits(session.page), total=arabic_digits(session.total_pages))
            )
            self.page_label.setText(f"{arabic_digits(session.page)} / {arabic_digits(session.total_pages)}")
            self.previous_button.setEnabled(session.page > 1)
            self.next_button.setEnabled(session.page < session.total_pages)
        else:
            self.title_label.setText("")
            self.page_info_label.setText("")
            self.page_label.setText("")
            self.previous_button.setEnabled(False)
            self.next_button.setEnabled(False)
        self.settings_button.setEnabled(chapter is not None)
        self._render_text()

    def _render_text(self) -> None:
        session = self._session
        self._apply_text_styles()
        if session is None or session.loading:
            self._rendered_page = None
            self.reading_text.setHtml(self._placeholder_html(self._strings.get("loading", "جاري التحميل...")))
            return
        if session.chapter is None:
            self._rendered_page = None
            message = self._strings.get("reader_error", "تعذر تحميل السورة. يرجى المحاولة مرة أخرى.")
            self.reading_text.setHtml(self._placeholder_html(message))
            return
        # setHtml resets the scroll bar; a re-render of the same page keeps the reader's place.
        rendered_page = (session.chapter_number, session.page)
        bar = self.reading_text.verticalScrollBar()
        previous_value = bar.value() if rendered_page == self._rendered_page else None
        self._rendered_page = rendered_page
        self.reading_text.setHtml(self._chapter_page_html(session))
        if previous_value is not None:
            self._ensure_layout()
            bar.setValue(previous_value)

    def _chapter_page_html(self, session: ReaderSession) -> str:
        chapter = session.chapter
        assert chapter is not None
        parts: List[str] = []
        if shows_opening_header(chapter.number, session.page):
            parts.append(f"<p class='basmala'>{html.escape(OPENING_FORMULA)}</p>")

        verse_parts: List[str] = []
        for verse in session.visible_verses():
            number = verse.number_in_chapter
            css_class = "ayah bookmarked" if is_bookmarked(self._bookmark, chapter.number, verse) else "ayah"
            verse_parts.append(
                f"<a name='ayah-{number}' href='{VERSE_LINK_SCHEME}:{number}' class='{css_class}'>"
                f"{html.escape(display_text(chapter.number, verse))}</a>"
                f" <span class='ayah-number'>﴿{arabic_digits(number)}﴾</span> "
            )
        parts.append(f"<p class='verses'>{''.join(verse_parts)}</p>")
        return "".join(parts)

    def _apply_text_styles(self) -> None:
        appearance = self._appearance
        if appearance.dark_mode:
            text_color, background, border, accent, highlight = "#e7e5e4", "#292524", "#44403c", "#34d399", "#78350f"
        else:
            text_color, background, border, accent, highlight = "#1c1917", "#ffffff", "#e7e5e4", "#047857", "#fef3c7"
        weight = 700 if appearance.bold else 400
        line_height = int(round(appearance.line_height * 100))

        stylesheet = (
            "body {"
            f" font-family: '{self._font_family}';"
            f" font-size: {appearance.font_size}px;"
            f" font-weight: {weight};"
            f" color: {text_color};"
            "}"
            "p.verses {"
            " text-align: justify;"
            f" line-height: {line_height}%;"
            "}"
            "p.basmala {"
            " text-align: center;"
            f" color: {accent};"
            " margin: 12px 0 24px 0;"
            "}"
            "a.ayah {"
            f" color: {text_color};"
            " text-decoration: none;"
            "}"
            "a.bookmarked {"
            f" background-color: {highlight};"
            "}"
            "span.ayah-number {"
            f" color: {accent};"
            f" font-size: {max(appearance.font_size - 8, 14)}px;"
            "}"
            ".placeholder {"
            " text-align: center;"
            f" color: {accent};"
            "}"
        )
        self.reading_text.document().setDefaultStyleSheet(stylesheet)
        self.reading_text.setStyleSheet(
            "QTextBrowser#quranText {"
            f" background: {background};"
            f" border: 2px solid {border};"
            " border-radius: 18px;"
            " padding: 24px 18px;"
            "}"
        )

    def _render_dialog(self) -> None:
        session = self._session
        if session is None or session.chapter is None or isinstance(session.modal, ModalClosed):
            return
        self.dialog.render(session.chapter.name, session.modal)

    def _scroll_to_top(self) -> None:
        self.reading_text.verticalScrollBar().setValue(0)

    def _ensure_layout(self) -> None:
        # Laying out the last block lays out the whole page and updates the scroll range.
        document = self.reading_text.document()
        document.documentLayout().blockBoundingRect(document.lastBlock())

    def _verse_position(self, verse_number: int) -> Optional[int]:
        href = f"{VERSE_LINK_SCHEME}:{verse_number}"
        block = self.reading_text.document().begin()
        while block.isValid():
            it = block.begin()
            while not it.atEnd():
                fragment = it.fragment()
                if fragment.isValid() and fragment.charFormat().anchorHref() == href:
                    return fragment.position()
                it += 1
            block = block.next()
        return None

    def verse_cursor_rect(self, verse_number: int) -> Optional[QtCore.QRect]:
        """Viewport rectangle of the first character of a rendered verse."""
        position = self._verse_position(verse_number)
        if position is None:
            return None
        cursor = QtGui.QTextCursor(self.reading_text.document())
        cursor.setPosition(position)
        return self.reading_text.cursorRect(cursor)

    def _center_on_verse(self, verse_number: int) -> None:
        if not self.reading_text.isVisible():
            # Qt lays out the text on show; finish the scroll from showEvent.
            self._deferred_center = verse_number
            return
        self._deferred_center = None
        self._ensure_layout()
        rect = self.verse_cursor_rect(verse_number)
        if rect is None:
            LOGGER.warning("Verse %s is not on the current page", verse_number)
            return
        bar = self.reading_text.verticalScrollBar()
        verse_y = rect.top() + bar.value()
        target = verse_y - self.reading_text.viewport().height() // 2 + rect.height() // 2
        bar.setValue(max(0, min(target, bar.maximum())))
        LOGGER.debug("Centered verse %s at scroll offset %s", verse_number, bar.value())

    def showEvent(self, event: QtGui.QShowEvent) -> None:  # type: ignore[override]
        super().showEvent(event)
        if self._deferred_center is not None:
            self._center_on_verse(self._deferred_center)

    @staticmethod
    def _placeholder_html(message: str) -> str:
        return f"<div class='placeholder' dir='rtl'><p>{html.escape(message)}</p></div>"

    @staticmethod
    def _choose_font_family() -> str:
        available = set(QtGui.QFontDatabase().families())
        for family in PREFERRED_FONTS:
            if family in available:
                return family
        return PREFERRED_FONTS[-1]


__all__ = ["SurahReaderPage", "VerseDialog"]
