"""Main window for the Qur'an reader and hadith application."""
from __future__ import annotations

import textwrap
from enum import Enum
from typing import Any, Callable, Dict, Optional

try:  # Prefer PyQt5, fall back to Qt for Python
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

from bookmark_store import Bookmark
from explanations import ExplanationService
from quran_api import QuranService
from ui.hadith import HadithPage
from ui.reader import SurahReaderPage
from ui.surah_list import SurahListPage

ACCENT_COLOR_HEX = "#047857"


class View(Enum):
    HOME = "home"
    HADITH = "hadith"
    READER = "reader"


class MainWindow(QtWidgets.QMainWindow):
    """Navigation rail plus the chapter list, reader and hadith pages."""

    def __init__(
        self,
        quran_service: QuranService,
        explanation_service: ExplanationService,
        runner: Callable[..., None],
    ) -> None:
        super().__init__()
        self.translations: Dict[str, Any] = {}
        self._is_rtl = False
        self._theme: str = "light"
        self._accent_color = QtGui.QColor(ACCENT_COLOR_HEX)
        self._current_view = View.HOME
        self._selected_chapter: Optional[int] = None
        self._bookmark: Optional[Bookmark] = None

        self.setObjectName("NoorWindow")
        self.setWindowTitle("نور الهدى")
        self.setAttribute(QtCore.Qt.WA_StyledBackground, True)
        self.resize(1180, 760)

        central = QtWidgets.QWidget()
        self.setCentralWidget(central)

        root_layout = QtWidgets.QHBoxLayout(central)
        root_layout.setContentsMargins(24, 24, 24, 24)
        root_layout.setSpacing(24)

        self._nav_group = QtWidgets.QButtonGroup(self)
        self._nav_group.setExclusive(True)
        self._nav_buttons: Dict[View, QtWidgets.QToolButton] = {}
        self._nav_items: Dict[View, tuple[str, str, str]] = {}

        self.content_container = QtWidgets.QWidget()
        self.content_container.setObjectName("ContentContainer")
        content_layout = QtWidgets.QVBoxLayout(self.content_container)
        content_layout.setContentsMargins(0, 0, 0, 0)
        content_layout.setSpacing(16)

        self.page_stack = QtWidgets.QStackedWidget()
        content_layout.addWidget(self.page_stack, stretch=1)

        self.surah_list_page = SurahListPage(quran_service, runner)
        self.hadith_page = HadithPage(explanation_service, runner)
        self.reader_page = SurahReaderPage(quran_service, explanation_service, runner)

        self._pages: Dict[View, QtWidgets.QWidget] = {
            View.HOME: self.surah_list_page,
            View.HADITH: self.hadith_page,
            View.READER: self.reader_page,
        }
        for page in self._pages.values():
            self.page_stack.addWidget(page)

        self.status_label = QtWidgets.QLabel()
        self.status_label.setObjectName("statusLabel")
        self.status_label.setWordWrap(True)
        content_layout.addWidget(self.status_label)

        self.nav_bar = self._build_nav_bar()
        root_layout.addWidget(self.nav_bar, alignment=QtCore.Qt.AlignTop)
        root_layout.addWidget(self.content_container, stretch=1)

        self._language_handler: Optional[Callable[[], None]] = None
        self._bookmark_handler: Optional[Callable[[Bookmark], None]] = None

        self.language_button.clicked.connect(self._emit_language_toggle)  # type: ignore
        self.surah_list_page.surah_selected.connect(self.open_chapter)  # type: ignore
        self.reader_page.back_requested.connect(lambda: self.show_view(View.HOME))  # type: ignore
        self.reader_page.bookmark_created.connect(self._emit_bookmark)  # type: ignore

        self.show_view(View.HOME)
        self.apply_theme("light")

    # -- Builders -----------------------------------------------------------
    def _build_nav_bar(self) -> QtWidgets.QWidget:
        bar = QtWidgets.QFrame()
        bar.setObjectName("NavBar")
        bar.setSizePolicy(QtWidgets.QSizePolicy.Fixed, QtWidgets.QSizePolicy.Expanding)
        bar.setFixedWidth(160)

        layout = QtWidgets.QVBoxLayout(bar)
        layout.setContentsMargins(12, 12, 12, 12)
        layout.setSpacing(16)

        self.brand_label = QtWidgets.QLabel("نور الهدى")
        self.brand_label.setObjectName("brandLabel")
        self.brand_label.setAlignment(QtCore.Qt.AlignCenter)
        brand_font = QtGui.QFont(self.brand_label.font())
        brand_font.setPointSize(16)
        brand_font.setBold(True)
        self.brand_label.setFont(brand_font)
        layout.addWidget(self.brand_label)

        buttons = [
            (View.HOME, "nav_quran", "القرآن الكريم", "quran"),
            (View.HADITH, "nav_hadith", "الأحاديث الشريفة", "hadith"),
        ]

        for view, translation_key, fallback, kind in buttons:
            button = QtWidgets.QToolButton()
            button.setCheckable(True)
            button.setAutoExclusive(True)
            button.setToolButtonStyle(QtCore.Qt.ToolButtonTextUnderIcon)
            button.setIconSize(QtCore.QSize(40, 40))
            button.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Fixed)
            button.setMinimumHeight(110)
            button.setObjectName("NavButton")
            button.setCursor(QtCore.Qt.PointingHandCursor)
            button.clicked.connect(lambda _checked=False, target=view: self.show_view(target))  # type: ignore

            self._nav_group.addButton(button)
            self._nav_buttons[view] = button
            self._nav_items[view] = (translation_key, fallback, kind)
            button.setText(self.translations.get(translation_key, fallback))
            layout.addWidget(button)

        layout.addStretch(1)

        action_widget = QtWidgets.QWidget()
        action_widget.setObjectName("NavActions")
        action_layout = QtWidgets.QVBoxLayout(action_widget)
        action_layout.setContentsMargins(0, 0, 0, 0)
        action_layout.setSpacing(12)

        self.language_button = QtWidgets.QPushButton(self.translations.get("language_toggle", "English"))
        self.language_button.setObjectName("GhostButton")
        self.language_button.setSizePolicy(QtWidgets.QSizePolicy.Expanding, QtWidgets.QSizePolicy.Fixed)
        self.language_button.setMinimumHeight(44)
        self.language_button.setCursor(QtCore.Qt.PointingHandCursor)
        action_layout.addWidget(self.language_button)

        layout.addWidget(action_widget)
        self._update_nav_icons()
        return bar

    def _glyph_icon_for_nav(self, kind: str, color: Optional[QtGui.QColor] = None) -> QtGui.QIcon:
        glyphs = {"quran": "\U0001F4D6", "hadith": "✧"}
        glyph = glyphs.get(kind, "")
        if not glyph:
            return QtGui.QIcon()

        size = QtCore.QSize(48, 48)
        font = QtGui.QFont("Segoe UI Symbol", 28)
        font.setBold(True)

        icon = QtGui.QIcon()
        for state, pen_color, background in (
            (QtGui.QIcon.Off, color or self._accent_color, None),
            (QtGui.QIcon.On, QtGui.QColor("#ffffff"), self._accent_color),
        ):
            pixmap = QtGui.QPixmap(size)
            pixmap.fill(QtCore.Qt.transparent)
            painter = QtGui.QPainter(pixmap)
            painter.setRenderHint(QtGui.QPainter.Antialiasing)
            if background is not None:
                painter.fillRect(pixmap.rect(), background)
            painter.setPen(QtGui.QPen(pen_color))
            painter.setFont(font)
            painter.drawText(pixmap.rect(), QtCore.Qt.AlignCenter, glyph)
            painter.end()
            icon.addPixmap(pixmap, QtGui.QIcon.Normal, state)
        return icon

    # -- Navigation -----------------------------------------------------------
    @property
    def current_view(self) -> View:
        return self._current_view

    @property
    def selected_chapter(self) -> Optional[int]:
        return self._selected_chapter

    def show_view(self, view: View) -> None:
        """Switch pages; the reader needs a selected chapter or HOME is shown instead."""
        if view is View.READER and self._selected_chapter is None:
            view = View.HOME
        if view is not View.READER:
            self.reader_page.close_verse()
        self._current_view = view
        self.page_stack.setCurrentWidget(self._pages[view])

        # the reader stays under the Qur'an tab
        nav_view = View.HOME if view is View.READER else view
        button = self._nav_buttons.get(nav_view)
        if button and not button.isChecked():
            button.setChecked(True)

    def open_chapter(self, chapter_number: int) -> None:
        self._selected_chapter = chapter_number
        self.reader_page.open_chapter(chapter_number, self._bookmark)
        self.show_view(View.READER)

    # -- Event handler wiring -------------------------------------------------
    def on_language_toggle(self, handler: Callable[[], None]) -> None:
        self._language_handler = handler

    def on_bookmark(self, handler: Callable[[Bookmark], None]) -> None:
        self._bookmark_handler = handler

    def _emit_language_toggle(self) -> None:
        if self._language_handler:
            self._language_handler()

    def _emit_bookmark(self, bookmark: Bookmark) -> None:
        if self._bookmark_handler:
            self._bookmark_handler(bookmark)

    def set_bookmark(self, bookmark: Optional[Bookmark]) -> None:
        self._bookmark = bookmark
        self.surah_list_page.set_bookmark(bookmark)
        self.reader_page.set_bookmark(bookmark)

    # -- UI updates -----------------------------------------------------------
    def apply_translations(self, translations: Dict[str, Any], is_rtl: bool) -> None:
        self.translations = translations
        self.setWindowTitle(translations.get("app_title", "نور الهدى"))
        self.brand_label.setText(translations.get("app_title", "نور الهدى"))

        language_text = translations.get("language_toggle", "English")
        self.language_button.setText(language_text)
        self.language_button.setToolTip(language_text)
        self.language_button.setAccessibleName(language_text)

        for view, (translation_key, fallback, _) in self._nav_items.items():
            self._nav_buttons[view].setText(translations.get(translation_key, fallback))

        self.surah_list_page.apply_translations(translations)
        self.hadith_page.apply_translations(translations)
        self.reader_page.apply_translations(translations)
        self._set_layout_direction(is_rtl)

    def set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def _set_layout_direction(self, rtl: bool) -> None:
        if rtl == self._is_rtl:
            return
        self.setLayoutDirection(QtCore.Qt.RightToLeft if rtl else QtCore.Qt.LeftToRight)
        # scripture text is always right-to-left
        self.reader_page.reading_text.setLayoutDirection(QtCore.Qt.RightToLeft)
        self._is_rtl = rtl

    def apply_theme(self, theme: str) -> None:
        """Apply the selected theme stylesheet and refresh glyph colors."""
        if theme not in {"light", "dark"}:
            theme = "light"
        self._theme = theme
        self.setStyleSheet(self._stylesheet_for_theme(theme))
        self._update_nav_icons()

    def _update_nav_icons(self) -> None:
        nav_color = self._accent_color if self._theme == "light" else QtGui.QColor("#34d399")
        for view, button in self._nav_buttons.items():
            _, _, kind = self._nav_items[view]
            icon = self._glyph_icon_for_nav(kind, nav_color)
            if not icon.isNull():
                button.setIcon(icon)

    def _stylesheet_for_theme(self, theme: str) -> str:
        if theme == "dark":
            return textwrap.dedent(
                """
                QWidget {
                    font-family: 'Ubuntu', 'Segoe UI', sans-serif;
                    color: #e7e5e4;
                }

                #NoorWindow {
                    background-color: #1c1917;
                }

                #NavBar {
                    background-color: #292524;
                    border-radius: 24px;
                    border: 1px solid #44403c;
                    padding: 16px 12px;
                }

                QWidget#NavActions {
                    border-top: 1px solid #44403c;
                    margin-top: 12px;
                    padding-top: 16px;
                }

                QLabel#brandLabel {
                    color: #34d399;
                }

                QToolButton#NavButton {
                    color: #e7e5e4;
                    font-weight: 600;
                    padding: 12px 6px;
                    margin: 4px 0;
                    border-radius: 16px;
                    background-color: transparent;
                }

                QToolButton#NavButton:hover {
                    background-color: #44403c;
                }

                QToolButton#NavButton:checked {
                    background-color: #047857;
                    color: #ffffff;
                    border: none;
                }

                QLabel#statusLabel, QLabel#quranStatusLabel, QLabel#quranPageInfo, QLabel#hadithSubtitle {
                    color: #a8a29e;
                    font-size: 13px;
                }

                QLabel#quranHero, QLabel#hadithTitle, QLabel#quranReadingTitle {
                    color: #34d399;
                }

                QPushButton#PrimaryButton, QPushButton#quranSaveButton {
                    padding: 10px 20px;
                    border-radius: 8px;
                    background-color: #047857;
                    color: #f8fafc;
                    border: none;
                    font-weight: 600;
                }

                QPushButton#PrimaryButton:hover, QPushButton#quranSaveButton:hover {
                    background-color: #065f46;
                }

                QPushButton#PrimaryButton:disabled, QPushButton#SecondaryButton:disabled {
                    background-color: #44403c;
                    color: #78716c;
                }

                QPushButton#SecondaryButton, QPushButton#quranBackButton {
                    padding: 10px 20px;
                    border-radius: 8px;
                    border: 1px solid #44403c;
                    background-color: #292524;
                    color: #e7e5e4;
                    font-weight: 600;
                }

                QPushButton#SecondaryButton:hover, QPushButton#quranBackButton:hover {
                    border-color: #34d399;
                }

                QPushButton#GhostButton {
                    padding: 10px 18px;
                    border-radius: 8px;
                    border: none;
                    background-color: transparent;
                    color: #e7e5e4;
                    font-weight: 600;
                }

                QPushButton#GhostButton:hover {
                    background-color: #44403c;
                }

                QFrame#bookmarkCard, QFrame#readerSettings {
                    background-color: #292524;
                    border-radius: 16px;
                    border: 1px solid #44403c;
                }

                QLineEdit#quranSearch, QLineEdit#hadithTopic {
                    background-color: #292524;
                    border: 1px solid #44403c;
                    border-radius: 12px;
                    padding: 10px 14px;
                    color: #e7e5e4;
                }

                QListWidget#quranList {
                    background-color: #292524;
                    border: 1px solid #44403c;
                    border-radius: 12px;
                    padding: 8px;
                    color: #e7e5e4;
                }

                QListWidget#quranList::item:selected {
                    background-color: #047857;
                    color: #ffffff;
                }

                QListWidget#quranList::item:hover {
                    background-color: #44403c;
                }

                QLabel#quranMessage, QLabel#hadithMessage {
                    color: #a8a29e;
                    padding: 12px;
                }

                QLabel#hadithMessage[state="error"] {
                    background-color: #450a0a;
                    color: #fecaca;
                    border-radius: 12px;
                }

                QFrame#hadithCard {
                    background-color: #292524;
                    border-radius: 20px;
                    border: 1px solid #065f46;
                }

                QFrame#hadithCard[grade="weak"] {
                    border-color: #b91c1c;
                }

                QLabel#hadithCardTitle {
                    color: #34d399;
                    font-weight: 600;
                }

                QLabel#hadithGrade {
                    padding: 4px 12px;
                    border-radius: 10px;
                    background-color: #064e3b;
                    color: #a7f3d0;
                    font-weight: 600;
                }

                QLabel#hadithGrade[weak="true"] {
                    background-color: #7f1d1d;
                    color: #fecaca;
                }

                QLabel#hadithSource {
                    color: #a8a29e;
                }

                QTextBrowser#hadithExplanation, QTextBrowser#verseExplanation {
                    background-color: #1c1917;
                    border: 1px solid #44403c;
                    border-radius: 12px;
                    padding: 12px;
                    color: #e7e5e4;
                    font-size: 15px;
                }

                QDialog#verseDialog {
                    background-color: #292524;
                }
                """
            ).strip()

        return textwrap.dedent(
            """
            QWidget {
                font-family: 'Ubuntu', 'Segoe UI', sans-serif;
            }

            #NoorWindow {
                background-color: #fafaf9;
            }

            #NavBar {
                background-color: #ffffff;
                border-radius: 24px;
                border: 1px solid #a7f3d0;
                padding: 16px 12px;
            }

            QWidget#NavActions {
                border-top: 1px solid #a7f3d0;
                margin-top: 12px;
                padding-top: 16px;
            }

            QLabel#brandLabel {
                color: #047857;
            }

            QToolButton#NavButton {
                color: #064e3b;
                font-weight: 600;
                padding: 12px 6px;
                margin: 4px 0;
                border-radius: 16px;
                background-color: transparent;
            }

            QToolButton#NavButton:hover {
                background-color: #d1fae5;
            }

            QToolButton#NavButton:checked {
                background-color: #047857;
                color: #ffffff;
                border: none;
            }

            QLabel#statusLabel, QLabel#quranStatusLabel, QLabel#quranPageInfo, QLabel#hadithSubtitle {
                color: #57534e;
                font-size: 13px;
            }

            QLabel#quranHero, QLabel#hadithTitle, QLabel#quranReadingTitle {
                color: #065f46;
            }

            QPushButton#PrimaryButton, QPushButton#quranSaveButton {
                padding: 10px 20px;
                border-radius: 8px;
                background-color: #047857;
                color: #ffffff;
                border: none;
                font-weight: 600;
            }

            QPushButton#PrimaryButton:hover, QPushButton#quranSaveButton:hover {
                background-color: #065f46;
            }

            QPushButton#PrimaryButton:disabled, QPushButton#SecondaryButton:disabled {
                background-color: #e7e5e4;
                color: #a8a29e;
            }

            QPushButton#SecondaryButton, QPushButton#quranBackButton {
                padding: 10px 20px;
                border-radius: 8px;
                border: 1px solid #a7f3d0;
                background-color: #ffffff;
                color: #064e3b;
                font-weight: 600;
            }

            QPushButton#SecondaryButton:hover, QPushButton#quranBackButton:hover {
                border-color: #34d399;
            }

            QPushButton#GhostButton {
                padding: 10px 18px;
                border-radius: 8px;
                border: none;
                background-color: transparent;
                color: #064e3b;
                font-weight: 600;
            }

            QPushButton#GhostButton:hover {
                background-color: #d1fae5;
            }

            QFrame#bookmarkCard, QFrame#readerSettings {
                background-color: #ecfdf5;
                border-radius: 16px;
                border: 1px solid #a7f3d0;
            }

            QLineEdit#quranSearch, QLineEdit#hadithTopic {
                background-color: #ffffff;
                border: 1px solid #d6d3d1;
                border-radius: 12px;
                padding: 10px 14px;
                color: #1c1917;
            }

            QListWidget#quranList {
                background-color: #ffffff;
                border: 1px solid #e7e5e4;
                border-radius: 12px;
                padding: 8px;
                color: #1c1917;
            }

            QListWidget#quranList::item:selected {
                background-color: #047857;
                color: #ffffff;
            }

            QListWidget#quranList::item:hover {
                background-color: #d1fae5;
            }

            QLabel#quranMessage, QLabel#hadithMessage {
                color: #57534e;
                padding: 12px;
            }

            QLabel#hadithMessage[state="error"] {
                background-color: #fef2f2;
                color: #b91c1c;
                border-radius: 12px;
            }

            QFrame#hadithCard {
                background-color: #ffffff;
                border-radius: 20px;
                border: 1px solid #a7f3d0;
            }

            QFrame#hadithCard[grade="weak"] {
                border-color: #fca5a5;
            }

            QLabel#hadithCardTitle {
                color: #047857;
                font-weight: 600;
            }

            QLabel#hadithGrade {
                padding: 4px 12px;
                border-radius: 10px;
                background-color: #d1fae5;
                color: #065f46;
                font-weight: 600;
            }

            QLabel#hadithGrade[weak="true"] {
                background-color: #fee2e2;
                color: #b91c1c;
            }

            QLabel#hadithSource {
                color: #57534e;
            }

            QTextBrowser#hadithExplanation, QTextBrowser#verseExplanation {
                background-color: #fafaf9;
                border: 1px solid #e7e5e4;
                border-radius: 12px;
                padding: 12px;
                color: #1c1917;
                font-size: 15px;
            }

            QDialog#verseDialog {
                background-color: #ffffff;
            }
            """
        ).strip()


__all__ = ["MainWindow", "View"]
