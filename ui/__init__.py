"""UI components for the Qur'an reader and hadith application."""

from .window import MainWindow, View
from .hadith import HadithPage
from .reader import SurahReaderPage, VerseDialog
from .surah_list import SurahListPage

__all__ = ["MainWindow", "View", "HadithPage", "SurahReaderPage", "VerseDialog", "SurahListPage"]
