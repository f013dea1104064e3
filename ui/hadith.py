"""Hadith lookup by topic, or at random, with its grade and explanation."""
from __future__ import annotations

import logging
from functools import partial
from typing import Any, Callable, Dict, Optional

try:
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

from explanations import ExplanationService, HadithRecord

LOGGER = logging.getLogger(__name__)


class HadithPage(QtWidgets.QWidget):
    """Ask the explanation service for a hadith and render the answer."""

    def __init__(
        self,
        explanation_service: ExplanationService,
        runner: Callable[..., None],
        parent: Optional[QtWidgets.QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self._explanation_service = explanation_service
        self._run_async = runner
        self._strings: Dict[str, Any] = {}
        self._loading = False
        self._record: Optional[HadithRecord] = None
        self._error: Optional[str] = None
        self._request_id = 0

        layout = QtWidgets.QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(16)

        self.title_label = QtWidgets.QLabel("الأحاديث النبوية وشرحها")
        self.title_label.setObjectName("hadithTitle")
        self.title_label.setAlignment(QtCore.Qt.AlignCenter)
        title_font = QtGui.QFont(self.title_label.font())
        title_font.setPointSize(20)
        title_font.setBold(True)
        self.title_label.setFont(title_font)
        layout.addWidget(self.title_label)

        self.subtitle_label = QtWidgets.QLabel("اسأل عن موضوع معين أو احصل على حديث عشوائي مع الشرح")
        self.subtitle_label.setObjectName("hadithSubtitle")
        self.subtitle_label.setAlignment(QtCore.Qt.AlignCenter)
        self.subtitle_label.setWordWrap(True)
        layout.addWidget(self.subtitle_label)

        search_row = QtWidgets.QHBoxLayout()
        search_row.setSpacing(12)
        self.topic_input = QtWidgets.QLineEdit()
        self.topic_input.setObjectName("hadithTopic")
        self.topic_input.setPlaceholderText("اكتب موضوعاً (مثلاً: الصبر، الصلاة، بر الوالدين)...")
        self.topic_input.returnPressed.connect(self.search)  # type: ignore
        search_row.addWidget(self.topic_input, stretch=1)

        self.search_button = QtWidgets.QPushButton("بحث عن حديث")
        self.search_button.setObjectName("PrimaryButton")
        self.search_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.search_button.clicked.connect(self.search)  # type: ignore
        search_row.addWidget(self.search_button)

        self.random_button = QtWidgets.QPushButton("حديث عشوائي")
        self.random_button.setObjectName("SecondaryButton")
        self.random_button.setCursor(QtCore.Qt.PointingHandCursor)
        self.random_button.clicked.connect(self.random)  # type: ignore
        search_row.addWidget(self.random_button)
        layout.addLayout(search_row)

        self.message_label = QtWidgets.QLabel()
        self.message_label.setObjectName("hadithMessage")
        self.message_label.setAlignment(QtCore.Qt.AlignCenter)
        self.message_label.setWordWrap(True)
        self.message_label.setProperty("state", "info")
        self.message_label.hide()
        layout.addWidget(self.message_label)

        self.result_card = QtWidgets.QFrame()
        self.result_card.setObjectName("hadithCard")
        self.result_card.setProperty("grade", "authentic")
        card_layout = QtWidgets.QVBoxLayout(self.result_card)
        card_layout.setContentsMargins(20, 18, 20, 18)
        card_layout.setSpacing(12)

        header_row = QtWidgets.QHBoxLayout()
        self.card_title_label = QtWidgets.QLabel("الحديث الشريف")
        self.card_title_label.setObjectName("hadithCardTitle")
        header_row.addWidget(self.card_title_label, stretch=1)
        self.grade_label = QtWidgets.QLabel()
        self.grade_label.setObjectName("hadithGrade")
        self.grade_label.setProperty("weak", False)
        header_row.addWidget(self.grade_label)
        card_layout.addLayout(header_row)

        self.text_label = QtWidgets.QLabel()
        self.text_label.setObjectName("hadithText")
        self.text_label.setWordWrap(True)
        self.text_label.setAlignment(QtCore.Qt.AlignCenter)
        self.text_label.setTextInteractionFlags(QtCore.Qt.TextSelectableByMouse)
        text_font = QtGui.QFont(self.text_label.font())
        text_font.setPointSize(18)
        self.text_label.setFont(text_font)
        card_layout.addWidget(self.text_label)

        self.source_label = QtWidgets.QLabel()
        self.source_label.setObjectName("hadithSource")
        self.source_label.setWordWrap(True)
        card_layout.addWidget(self.source_label)

        self.explanation_title_label = QtWidgets.QLabel("الشرح")
        self.explanation_title_label.setObjectName("hadithCardTitle")
        card_layout.addWidget(self.explanation_title_label)

        self.explanation_text = QtWidgets.QTextBrowser()
        self.explanation_text.setObjectName("hadithExplanation")
        self.explanation_text.setLayoutDirection(QtCore.Qt.RightToLeft)
        card_layout.addWidget(self.explanation_text, stretch=1)

        self.result_card.hide()
        layout.addWidget(self.result_card, stretch=1)
        layout.addStretch(0)

    # ------------------------------------------------------------------
    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def record(self) -> Optional[HadithRecord]:
        return self._record

    def apply_translations(self, translations: Dict[str, Any]) -> None:
        self._strings = translations
        self.title_label.setText(translations.get("hadith_title", "الأحاديث النبوية وشرحها"))
        self.subtitle_label.setText(
            translations.get("hadith_subtitle", "اسأل عن موضوع معين أو احصل على حديث عشوائي مع الشرح")
        )
        self.topic_input.setPlaceholderText(
            translations.get("hadith_placeholder", "اكتب موضوعاً (مثلاً: الصبر، الصلاة، بر الوالدين)...")
        )
        self.random_button.setText(translations.get("hadith_random", "حديث عشوائي"))
        self.card_title_label.setText(translations.get("hadith_card_title", "الحديث الشريف"))
        self.explanation_title_label.setText(translations.get("hadith_explanation", "الشرح"))
        self._render()

    def search(self) -> None:
        """Request a hadith about the typed topic; a blank topic asks for a random one."""
        self._request(self.topic_input.text().strip() or None)

    def random(self) -> None:
        self.topic_input.clear()
        self._request(None)

    # ------------------------------------------------------------------
    def _request(self, topic: Optional[str]) -> None:
        if self._loading:
            return
        self._loading = True
        self._error = None
        self._record = None
        self._request_id += 1
        request_id = self._request_id
        LOGGER.info("Requesting hadith (topic=%r)", topic)
        self._render()
        self._run_async(
            partial(self._explanation_service.get_hadith, topic),
            partial(self._on_hadith_ready, request_id),
            partial(self._on_hadith_error, request_id),
        )

    def _on_hadith_ready(self, request_id: int, record: Optional[HadithRecord]) -> None:
        if request_id != self._request_id:
            return
        self._loading = False
        self._record = record
        if record is None:
            self._error = self._strings.get("hadith_error", "تعذر جلب الحديث. حاول مرة أخرى.")
        self._render()

    def _on_hadith_error(self, request_id: int, error: Exception) -> None:
        if request_id != self._request_id:
            return
        LOGGER.error("Hadith task failed", exc_info=error)
        self._loading = False
        self._record = None
        self._error = self._strings.get("hadith_unexpected_error", "حدث خطأ غير متوقع.")
        self._render()

    def _render(self) -> None:
        loading = self._loading
        self.topic_input.setEnabled(not loading)
        self.search_button.setEnabled(not loading)
        self.random_button.setEnabled(not loading)
        self.search_button.setText(
            self._strings.get("hadith_searching", "جاري البحث...")
            if loading
            else self._strings.get("hadith_search", "بحث عن حديث")
        )

        if loading:
            self._set_message(self._strings.get("loading", "جاري التحميل..."), "info")
        elif self._error:
            self._set_message(self._error, "error")
        else:
            self._set_message("", "info")

        record = self._record
        if record is None:
            self.result_card.hide()
            return

        self.grade_label.setText(record.grade)
        self.text_label.setText(record.arabic_text)
        source_template = self._strings.get("hadith_source", "المصدر: {source}")
        self.source_label.setText(source_template.format(source=record.source))
        self.explanation_text.setPlainText(record.explanation)
        self._set_grade_style(record.is_weak)
        self.result_card.show()

    def _set_message(self, text: str, state: str) -> None:
        self.message_label.setText(text)
        self.message_label.setProperty("state", state)
        self._repolish(self.message_label)
        self.message_label.setVisible(bool(text))

    def _set_grade_style(self, weak: bool) -> None:
        self.result_card.setProperty("grade", "weak" if weak else "authentic")
        self.grade_label.setProperty("weak", weak)
        self._repolish(self.result_card)
        self._repolish(self.grade_label)

    @staticmethod
    def _repolish(widget: QtWidgets.QWidget) -> None:
        widget.style().unpolish(widget)
        widget.style().polish(widget)


__all__ = ["HadithPage"]
