"""Entry point for the Noor al-Huda Qur'an reader and hadith desktop application."""
from __future__ import annotations

import json
import logging
import os
import sys
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Set

try:  # Prefer PyQt5, fall back to Qt for Python if available
    from PyQt5 import QtCore, QtGui, QtWidgets  # type: ignore
except Exception:  # pragma: no cover - fallback only used when PyQt5 missing
    try:
        from PySide2 import QtCore, QtGui, QtWidgets  # type: ignore
    except Exception:
        from PySide6 import QtCore, QtGui, QtWidgets  # type: ignore

try:  # Compatibility alias for Qt signal and slot decorators
    Signal = QtCore.pyqtSignal  # type: ignore[attr-defined]
    Slot = QtCore.pyqtSlot  # type: ignore[attr-defined]
except AttributeError:  # pragma: no cover - PySide compatibility
    Signal = QtCore.Signal  # type: ignore[attr-defined]
    Slot = QtCore.Slot  # type: ignore[attr-defined]

try:  # pragma: no cover - platform specific import
    import winreg
except ImportError:  # pragma: no cover - non-Windows fallback
    winreg = None  # type: ignore

from bookmark_store import Bookmark, BookmarkStore
from explanations import DEFAULT_MODEL, GEMINI_API_BASE_URL, ExplanationService
from quran_api import DEFAULT_EDITION, QURAN_API_BASE_URL, QuranService
from reading import arabic_digits
from ui import MainWindow

APP_ROOT = Path(__file__).parent
CONFIG_PATH = APP_ROOT / "config.json"
TRANSLATIONS_PATH = APP_ROOT / "translations.json"
STORAGE_PATH = APP_ROOT / "storage.json"
DEFAULT_API_KEY_ENV = "GEMINI_API_KEY"
LEGACY_API_KEY_ENV = "API_KEY"

logging.basicConfig(level=logging.DEBUG, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
LOGGER = logging.getLogger(__name__)


class _AsyncDispatcher(QtCore.QObject):
    """Provide main-thread delivery for background task callbacks."""

    success = Signal(object)
    error = Signal(object)

    def __init__(
        self,
        owner: "NoorApp",
        on_success: Callable[[Any], None],
        on_error: Callable[[Exception], None],
    ) -> None:
        super().__init__()
        self._owner = owner
        self._on_success = on_success
        self._on_error = on_error
        self.success.connect(self._handle_success)  # type: ignore[attr-defined]
        self.error.connect(self._handle_error)  # type: ignore[attr-defined]

    @Slot(object)
    def _handle_success(self, result: Any) -> None:
        LOGGER.debug("Dispatcher invoking success handler %s", getattr(self._on_success, "__name__", self._on_success))
        try:
            self._on_success(result)
        finally:
            self._owner._async_dispatchers.discard(self)
            self.deleteLater()

    @Slot(object)
    def _handle_error(self, exc: Exception) -> None:
        LOGGER.debug("Dispatcher invoking error handler %s", getattr(self._on_error, "__name__", self._on_error))
        try:
            self._on_error(exc)
        finally:
            self._owner._async_dispatchers.discard(self)
            self.deleteLater()


class NoorApp(QtWidgets.QApplication):
    """Owns configuration, services and the bookmark, and wires them to the window."""

    def __init__(self, argv: list[str]) -> None:
        super().__init__(argv)
        self.setApplicationName("Noor al-Huda")
        self.setFont(QtGui.QFont("Ubuntu", 10))

        self._executor = ThreadPoolExecutor(max_workers=2)
        self._config = self._load_json(CONFIG_PATH, default={})
        self._translations = self._load_json(TRANSLATIONS_PATH, default={})
        self._async_dispatchers: Set[_AsyncDispatcher] = set()

        LOGGER.debug("Loaded config keys: %s", list(self._config.keys()))
        LOGGER.debug("Languages available: %s", list(self._translations.keys()))

        self.current_language = str(self._config.get("language", "ar"))
        self.theme_preference = str(self._config.get("theme", "system")).lower()
        if self.theme_preference not in {"light", "dark", "system"}:
            self.theme_preference = "system"
        self.active_theme = ""

        storage_path = self._config.get("storage_path")
        self.bookmark_store = BookmarkStore(Path(storage_path) if storage_path else STORAGE_PATH)
        self.current_bookmark: Optional[Bookmark] = None

        quran_cfg = self._config.get("quran_api", {}) if isinstance(self._config, dict) else {}
        self.quran_service = QuranService(
            base_url=str(quran_cfg.get("base_url", QURAN_API_BASE_URL)),
            edition=str(quran_cfg.get("edition", DEFAULT_EDITION)),
        )

        gemini_cfg = self._config.get("gemini", {}) if isinstance(self._config, dict) else {}
        self.explanation_service = ExplanationService(
            api_key=self._resolve_api_key(str(gemini_cfg.get("api_key_env", DEFAULT_API_KEY_ENV))),
            model=str(gemini_cfg.get("model", DEFAULT_MODEL)),
            base_url=str(gemini_cfg.get("base_url", GEMINI_API_BASE_URL)),
        )

        self.window = MainWindow(self.quran_service, self.explanation_service, self._run_async)
        self._apply_theme_preference(self.theme_preference)
        self.window.on_language_toggle(self.toggle_language)
        self.window.on_bookmark(self._handle_bookmark)

        self.aboutToQuit.connect(self._cleanup)  # type: ignore

        self._apply_language(self.current_language)
        self._load_bookmark()
        self.window.show()

    # ------------------------------------------------------------------
    def toggle_language(self) -> None:
        languages = list(self._translations.keys()) or ["ar"]
        if len(languages) < 2:
            return
        current_index = languages.index(self.current_language) if self.current_language in languages else 0
        next_language = languages[(current_index + 1) % len(languages)]
        self.current_language = next_language
        self._config["language"] = next_language
        self._save_json(CONFIG_PATH, self._config)
        self._apply_language(next_language)

    def _load_bookmark(self) -> None:
        self.current_bookmark = self.bookmark_store.load()
        self.window.set_bookmark(self.current_bookmark)

    def _handle_bookmark(self, bookmark: Bookmark) -> None:
        self.current_bookmark = bookmark
        self.bookmark_store.save(bookmark)
        self.window.set_bookmark(bookmark)
        template = self._strings_for_language().get("bookmark_saved", "تم الحفظ: سورة {surah} · آية {ayah}")
        self.window.set_status(
            template.format(surah=bookmark.chapter_name, ayah=arabic_digits(bookmark.verse_number))
        )

    def _apply_language(self, language_code: str) -> None:
        strings = self._strings_for_language(language_code)
        is_rtl = language_code.startswith("ar")
        self.window.apply_translations(strings, is_rtl)

    def _strings_for_language(self, language_code: Optional[str] = None) -> Dict[str, Any]:
        language_code = language_code or self.current_language
        LOGGER.debug("Fetching translations for language %s", language_code)
        return self._translations.get(language_code, self._translations.get("ar", {}))

    @staticmethod
    def _resolve_api_key(env_name: str) -> Optional[str]:
        key = os.environ.get(env_name) or os.environ.get(LEGACY_API_KEY_ENV)
        if not key:
            LOGGER.warning("Neither %s nor %s is set; AI explanations are unavailable", env_name, LEGACY_API_KEY_ENV)
        return key

    def _apply_theme_preference(self, preference: Optional[str]) -> None:
        resolved = self._resolve_theme_choice(preference)
        if self.active_theme == resolved:
            return
        LOGGER.debug("Applying theme preference '%s' resolved to '%s'", preference, resolved)
        self.active_theme = resolved
        self.window.apply_theme(resolved)

    def _resolve_theme_choice(self, preference: Optional[str]) -> str:
        pref = str(preference or "system").lower()
        if pref not in {"light", "dark", "system"}:
            pref = "system"
        if pref == "system":
            return self._detect_system_theme()
        return pref

    def _detect_system_theme(self) -> str:
        if sys.platform.startswith("win") and winreg:
            try:
                with winreg.OpenKey(
                    winreg.HKEY_CURRENT_USER,
                    r"Software\Microsoft\Windows\CurrentVersion\Themes\Personalize",
                ) as key:
                    value, _ = winreg.QueryValueEx(key, "AppsUseLightTheme")
                    return "light" if int(value) else "dark"
            except OSError:
                LOGGER.debug("Windows theme detection failed; falling back to palette", exc_info=True)

        palette = self.palette()
        window_color = palette.color(QtGui.QPalette.Window)
        return "dark" if window_color.lightness() < 128 else "light"

    def _run_async(self, func, on_success, on_error) -> None:
        LOGGER.debug("Submitting background task %s", getattr(func, "__name__", func))
        dispatcher = _AsyncDispatcher(self, on_success, on_error)
        self._async_dispatchers.add(dispatcher)
        future = self._executor.submit(func)

        def _done(future_result) -> None:
            try:
                result = future_result.result()
                LOGGER.debug("Background task %s completed successfully", getattr(func, "__name__", func))
            except Exception as exc:  # pragma: no cover - UI glue
                LOGGER.exception("Background task %s raised an exception", getattr(func, "__name__", func), exc_info=exc)
                dispatcher.error.emit(exc)
            else:
                dispatcher.success.emit(result)

        future.add_done_callback(_done)

    @staticmethod
    def _load_json(path: Path, default: Dict[str, Any]) -> Dict[str, Any]:
        if not path.exists():
            return default
        try:
            with path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, ValueError):
            LOGGER.warning("Unable to read %s; using defaults", path, exc_info=True)
            return default
        return payload if isinstance(payload, dict) else default

    @staticmethod
    def _save_json(path: Path, payload: Dict[str, Any]) -> None:
        try:
            with path.open("w", encoding="utf-8") as handle:
                json.dump(payload, handle, ensure_ascii=False, indent=2)
        except OSError:
            LOGGER.exception("Failed to write %s", path)

    def _cleanup(self) -> None:
        self._executor.shutdown(wait=False)


def main() -> int:
    app = NoorApp(sys.argv)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
