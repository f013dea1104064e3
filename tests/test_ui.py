import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:
    from PyQt5 import QtCore, QtWidgets
except Exception:  # pragma: no cover - fallback path
    try:
        from PySide2 import QtCore, QtWidgets
    except Exception:  # pragma: no cover - fallback path
        from PySide6 import QtCore, QtWidgets

import pytest

from bookmark_store import Bookmark
from explanations import HadithRecord
from quran_api import ChapterDetail, ChapterMeta, Edition, RevelationPlace, Verse
from reading import ChoosingAction, ExplanationFailed, ModalClosed, ShowingExplanation
from ui import HadithPage, MainWindow, SurahListPage, SurahReaderPage, View


@pytest.fixture(scope="module")
def qt_app():
    app = QtWidgets.QApplication.instance()
    if app is None:
        app = QtWidgets.QApplication([])
    yield app


def run_now(func, on_success, on_error):
    try:
        result = func()
    except Exception as exc:
        on_error(exc)
    else:
        on_success(result)


class _DeferredRunner:
    """Hold tasks until the test releases them, to model late results."""

    def __init__(self) -> None:
        self.pending = []

    def __call__(self, func, on_success, on_error) -> None:
        self.pending.append((func, on_success, on_error))

    def release(self, index: int) -> None:
        func, on_success, on_error = self.pending.pop(index)
        run_now(func, on_success, on_error)


def make_chapter(number: int, verse_count: int) -> ChapterDetail:
    verses = tuple(
        Verse(
            global_number=n,
            text=f"نص الآية {n}",
            number_in_chapter=n,
            juz=1,
            manzil=1,
            page=1,
            ruku=1,
            hizb_quarter=1,
            is_prostration=False,
        )
        for n in range(1, verse_count + 1)
    )
    return ChapterDetail(
        number=number,
        name=f"سورة {number}",
        english_name=f"Chapter {number}",
        english_name_translation="",
        verse_count=verse_count,
        revelation_place=RevelationPlace.MECCAN,
        verses=verses,
        edition=Edition("quran-uthmani", "ar", "", "", "text", "quran"),
    )


class _FakeQuranService:
    def __init__(self, chapters=None, index=None) -> None:
        self.chapters = chapters or {}
        self.index = index if index is not None else []
        self.requested = []
        self.list_calls = 0

    def list_chapters(self):
        self.list_calls += 1
        return list(self.index)

    def get_chapter(self, number):
        self.requested.append(number)
        return self.chapters.get(number)


class _FakeExplanationService:
    def __init__(self, explanation="شرح مختصر", hadith=None, hadith_error=None) -> None:
        self.explanation = explanation
        self.hadith = hadith
        self.hadith_error = hadith_error
        self.hadith_topics = []
        self.explained = []

    def get_verse_explanation(self, chapter_name, verse_number, verse_text):
        self.explained.append(verse_number)
        return self.explanation

    def get_hadith(self, topic=None):
        self.hadith_topics.append(topic)
        if self.hadith_error is not None:
            raise self.hadith_error
        return self.hadith


INDEX = [
    ChapterMeta(1, "سُورَةُ ٱلْفَاتِحَةِ", "Al-Faatiha", "The Opening", 7, RevelationPlace.MECCAN),
    ChapterMeta(2, "سُورَةُ البَقَرَةِ", "Al-Baqara", "The Cow", 286, RevelationPlace.MEDINAN),
    ChapterMeta(36, "سُورَةُ يسٓ", "Yaseen", "Yaseen", 83, RevelationPlace.MECCAN),
]


# -- Chapter list ------------------------------------------------------------------
def test_surah_list_loads_once_and_filters(qt_app):
    service = _FakeQuranService(index=INDEX)
    page = SurahListPage(service, run_now)
    page.ensure_loaded()
    page.ensure_loaded()

    assert service.list_calls == 1
    assert [c.number for c in page.visible_chapters] == [1, 2, 36]

    page.search_input.setText("baq")
    assert [c.number for c in page.visible_chapters] == [2]

    page.search_input.setText("36")
    assert [c.number for c in page.visible_chapters] == [36]

    page.search_input.setText("nothing")
    assert page.visible_chapters == []
    assert page.message_label.text() == "لا توجد نتائج مطابقة."


def test_surah_list_shows_error_when_index_empty(qt_app):
    page = SurahListPage(_FakeQuranService(index=[]), run_now)
    page.ensure_loaded()
    assert page.message_label.text() == "تعذر تحميل قائمة السور."


def test_surah_list_continue_reading_emits_bookmarked_chapter(qt_app):
    page = SurahListPage(_FakeQuranService(index=INDEX), run_now)
    selected = []
    page.surah_selected.connect(selected.append)

    assert page.bookmark_card.isHidden()
    page.set_bookmark(Bookmark(36, "سُورَةُ يسٓ", 12, 0))
    assert not page.bookmark_card.isHidden()
    assert "يسٓ" in page.bookmark_status.text()
    assert "١٢" in page.bookmark_status.text()

    page.continue_button.click()
    assert selected == [36]


# -- Reader ------------------------------------------------------------------------
def test_reader_opens_bookmarked_page(qt_app):
    service = _FakeQuranService(chapters={2: make_chapter(2, 30)})
    page = SurahReaderPage(service, _FakeExplanationService(), run_now)

    page.open_chapter(2, Bookmark(2, "سورة 2", 30, 0))

    assert service.requested == [2]
    assert page.session.page == 2
    assert [v.number_in_chapter for v in page.session.visible_verses()] == [26, 27, 28, 29, 30]
    assert not page.next_button.isEnabled()
    assert page.previous_button.isEnabled()

    page.previous_page()
    assert page.session.page == 1
    assert "نص الآية 1" in page.reading_text.toPlainText()


def test_reader_shows_error_for_failed_chapter(qt_app):
    page = SurahReaderPage(_FakeQuranService(), _FakeExplanationService(), run_now)
    page.open_chapter(5)

    assert page.session.load_failed
    assert "تعذر تحميل السورة" in page.reading_text.toPlainText()
    assert not page.next_button.isEnabled()


def test_reader_drops_late_chapter_result(qt_app):
    runner = _DeferredRunner()
    service = _FakeQuranService(chapters={2: make_chapter(2, 30), 3: make_chapter(3, 10)})
    page = SurahReaderPage(service, _FakeExplanationService(), runner)

    page.open_chapter(2)
    page.open_chapter(3)
    runner.release(1)
    runner.release(0)

    assert page.session.chapter.number == 3


def test_reader_omits_opening_header_for_chapter_nine(qt_app):
    service = _FakeQuranService(chapters={9: make_chapter(9, 3), 2: make_chapter(2, 3)})
    page = SurahReaderPage(service, _FakeExplanationService(), run_now)

    page.open_chapter(9)
    assert "بِسۡمِ" not in page.reading_text.toPlainText()

    page.open_chapter(2)
    assert "بِسۡمِ" in page.reading_text.toPlainText()


def test_reader_verse_explanation_and_bookmark(qt_app):
    explanations = _FakeExplanationService(explanation="تفسير الآية الثالثة")
    page = SurahReaderPage(_FakeQuranService(chapters={2: make_chapter(2, 30)}), explanations, run_now)
    created = []
    page.bookmark_created.connect(created.append)
    page.open_chapter(2)

    page.open_verse(3)
    assert isinstance(page.session.modal, ChoosingAction)

    page.dialog.explain_button.click()
    assert explanations.explained == [3]
    assert page.session.modal == ShowingExplanation(page.session.chapter.verses[2], "تفسير الآية الثالثة")
    assert page.dialog.explanation_text.toPlainText() == "تفسير الآية الثالثة"

    page.dialog.back_button.click()
    assert isinstance(page.session.modal, ChoosingAction)

    page.dialog.bookmark_button.click()
    assert len(created) == 1
    assert (created[0].chapter_number, created[0].verse_number) == (2, 3)
    assert page.session.modal == ModalClosed()


def test_reader_explanation_failure_keeps_actions(qt_app):
    page = SurahReaderPage(
        _FakeQuranService(chapters={2: make_chapter(2, 5)}),
        _FakeExplanationService(explanation=None),
        run_now,
    )
    page.open_chapter(2)
    page.open_verse(1)
    page.dialog.explain_button.click()

    assert isinstance(page.session.modal, ExplanationFailed)
    assert page.dialog.status_label.text() == "تعذر جلب التفسير. حاول مرة أخرى."
    assert not page.dialog.actions_widget.isHidden()
    page.close_verse()


def test_reader_ignores_explanation_for_previous_verse(qt_app):
    runner = _DeferredRunner()
    page = SurahReaderPage(
        _FakeQuranService(chapters={2: make_chapter(2, 5)}),
        _FakeExplanationService(explanation="شرح"),
        runner,
    )
    page.open_chapter(2)
    runner.release(0)

    page.open_verse(1)
    page.dialog.explain_button.click()
    page.close_verse()
    page.open_verse(2)
    runner.release(0)

    assert page.session.modal == ChoosingAction(page.session.chapter.verses[1])
    page.close_verse()


def test_reader_appearance_resets_for_new_chapter(qt_app):
    service = _FakeQuranService(chapters={1: make_chapter(1, 7), 2: make_chapter(2, 5)})
    page = SurahReaderPage(service, _FakeExplanationService(), run_now)
    page.open_chapter(1)

    page.font_size_spin.setValue(60)
    page.dark_check.setChecked(True)
    assert page.appearance.font_size == 60
    assert page.appearance.dark_mode is True

    page.open_chapter(2)
    assert page.appearance.font_size == 36
    assert page.appearance.dark_mode is False
    assert page.font_size_spin.value() == 36


def _shown_reader(qt_app, chapter_number=2, verse_count=50):
    page = SurahReaderPage(
        _FakeQuranService(chapters={chapter_number: make_chapter(chapter_number, verse_count)}),
        _FakeExplanationService(),
        run_now,
    )
    page.resize(800, 500)
    page.show()
    qt_app.processEvents()
    return page


@pytest.mark.parametrize("verse_number", [30, 40, 48])
def test_reader_centers_bookmarked_verse_in_viewport(qt_app, verse_number):
    page = _shown_reader(qt_app)
    page.open_chapter(2, Bookmark(2, "سورة 2", verse_number, 0))
    qt_app.processEvents()

    bar = page.reading_text.verticalScrollBar()
    viewport_height = page.reading_text.viewport().height()
    rect = page.verse_cursor_rect(verse_number)

    assert page.session.page == 2
    assert bar.maximum() > 0
    assert rect.top() >= 0
    assert rect.bottom() <= viewport_height
    if 0 < bar.value() < bar.maximum():
        assert abs(rect.center().y() - viewport_height // 2) <= rect.height()
    page.close()


def test_reader_centers_bookmarked_verse_once_shown(qt_app):
    page = SurahReaderPage(_FakeQuranService(chapters={2: make_chapter(2, 50)}), _FakeExplanationService(), run_now)
    page.resize(800, 500)
    page.open_chapter(2, Bookmark(2, "سورة 2", 48, 0))
    assert page.reading_text.verticalScrollBar().value() == 0

    page.show()
    qt_app.processEvents()
    rect = page.verse_cursor_rect(48)
    assert page.reading_text.verticalScrollBar().value() > 0
    assert 0 <= rect.top()
    assert rect.bottom() <= page.reading_text.viewport().height()
    page.close()


def test_reader_centers_once_and_pages_start_at_top(qt_app):
    page = _shown_reader(qt_app)
    page.open_chapter(2, Bookmark(2, "سورة 2", 48, 0))
    qt_app.processEvents()
    bar = page.reading_text.verticalScrollBar()
    assert bar.value() > 0

    page.previous_page()
    qt_app.processEvents()
    assert page.session.page == 1
    assert bar.value() == 0

    page.next_page()
    qt_app.processEvents()
    assert page.session.page == 2
    assert bar.value() == 0
    page.close()


def test_reader_next_page_scrolls_to_top(qt_app):
    page = _shown_reader(qt_app)
    page.open_chapter(2)
    bar = page.reading_text.verticalScrollBar()
    bar.setValue(bar.maximum() // 2)
    assert bar.value() > 0

    page.next_page()
    qt_app.processEvents()
    assert bar.value() == 0
    page.close()


def test_reader_bookmarking_keeps_scroll_position(qt_app):
    page = _shown_reader(qt_app)
    page.open_chapter(2)
    bar = page.reading_text.verticalScrollBar()
    bar.setValue(bar.maximum() // 2)
    before = bar.value()
    assert before > 0

    page.open_verse(15)
    page.dialog.bookmark_button.click()
    qt_app.processEvents()

    assert page.session.modal == ModalClosed()
    assert bar.value() == before
    page.set_bookmark(Bookmark(2, "سورة 2", 15, 0))
    assert bar.value() == before
    page.close()


def test_reader_appearance_change_keeps_scroll_position(qt_app):
    page = _shown_reader(qt_app)
    page.open_chapter(2)
    bar = page.reading_text.verticalScrollBar()
    bar.setValue(bar.maximum() // 2)
    before = bar.value()
    assert before > 0

    page.font_size_spin.setValue(38)
    qt_app.processEvents()
    assert page.appearance.font_size == 38
    assert bar.value() == before

    page.dark_check.setChecked(True)
    qt_app.processEvents()
    assert bar.value() == before
    page.close()


# -- Hadith --------------------------------------------------------------------------
def test_hadith_search_renders_record(qt_app):
    record = HadithRecord("إِنَّمَا الأَعْمَالُ بِالنِّيَّاتِ", "صحيح البخاري", "صحيح", "شرح الحديث")
    service = _FakeExplanationService(hadith=record)
    page = HadithPage(service, run_now)

    page.topic_input.setText("  النية ")
    page.search_button.click()

    assert service.hadith_topics == ["النية"]
    assert page.record == record
    assert not page.result_card.isHidden()
    assert page.source_label.text() == "المصدر: صحيح البخاري"
    assert page.result_card.property("grade") == "authentic"
    assert page.search_button.isEnabled()


def test_hadith_weak_grade_styling(qt_app):
    record = HadithRecord("نص", "سنن", "ضعيف", "شرح")
    page = HadithPage(_FakeExplanationService(hadith=record), run_now)
    page.search()
    assert page.result_card.property("grade") == "weak"


def test_hadith_random_clears_topic_and_requests_without_topic(qt_app):
    service = _FakeExplanationService(hadith=HadithRecord("نص", "مسلم", "صحيح", "شرح"))
    page = HadithPage(service, run_now)
    page.topic_input.setText("الصبر")

    page.random_button.click()

    assert page.topic_input.text() == ""
    assert service.hadith_topics == [None]


def test_hadith_controls_disabled_while_pending(qt_app):
    runner = _DeferredRunner()
    page = HadithPage(_FakeExplanationService(hadith=None), runner)

    page.search()
    assert page.is_loading
    assert not page.topic_input.isEnabled()
    assert not page.search_button.isEnabled()
    assert not page.random_button.isEnabled()
    assert page.search_button.text() == "جاري البحث..."

    page.random()
    assert len(runner.pending) == 1

    runner.release(0)
    assert page.message_label.text() == "تعذر جلب الحديث. حاول مرة أخرى."
    assert page.search_button.isEnabled()


def test_hadith_unexpected_error_banner(qt_app):
    page = HadithPage(_FakeExplanationService(hadith_error=RuntimeError("boom")), run_now)
    page.search()
    assert page.message_label.text() == "حدث خطأ غير متوقع."
    assert page.result_card.isHidden()


# -- Window ------------------------------------------------------------------------------
def test_window_reader_requires_selected_chapter(qt_app):
    window = MainWindow(_FakeQuranService(index=INDEX), _FakeExplanationService(), run_now)

    window.show_view(View.READER)
    assert window.current_view is View.HOME

    window.show_view(View.HADITH)
    assert window.page_stack.currentWidget() is window.hadith_page


def test_window_opens_chapter_and_returns_home(qt_app):
    service = _FakeQuranService(index=INDEX, chapters={36: make_chapter(36, 83)})
    window = MainWindow(service, _FakeExplanationService(), run_now)
    window.set_bookmark(Bookmark(36, "سورة 36", 60, 0))

    window.surah_list_page.surah_selected.emit(36)
    assert window.current_view is View.READER
    assert window.selected_chapter == 36
    assert window.reader_page.session.page == 3

    window.reader_page.back_button.click()
    assert window.current_view is View.HOME


def test_window_forwards_new_bookmark(qt_app):
    window = MainWindow(
        _FakeQuranService(index=INDEX, chapters={1: make_chapter(1, 7)}), _FakeExplanationService(), run_now
    )
    received = []
    window.on_bookmark(received.append)
    window.open_chapter(1)

    window.reader_page.open_verse(4)
    window.reader_page.dialog.bookmark_button.click()

    assert [(b.chapter_number, b.verse_number) for b in received] == [(1, 4)]


def test_window_language_toggle_and_direction(qt_app):
    window = MainWindow(_FakeQuranService(), _FakeExplanationService(), run_now)
    toggles = []
    window.on_language_toggle(lambda: toggles.append(True))

    window.apply_translations({"language_toggle": "English", "nav_hadith": "الأحاديث"}, True)
    assert window.layoutDirection() == QtCore.Qt.RightToLeft
    assert window.language_button.text() == "English"

    window.language_button.click()
    assert toggles == [True]

    window.apply_translations({"language_toggle": "العربية"}, False)
    assert window.layoutDirection() == QtCore.Qt.LeftToRight
