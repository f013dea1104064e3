"""AI-generated hadith lookups and verse explanations via the Gemini REST API."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests

LOGGER = logging.getLogger(__name__)

GEMINI_API_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_MODEL = "gemini-2.5-flash"

NO_EXPLANATION_TEXT = "عذراً، لم يتم العثور على تفسير في الوقت الحالي."

WEAK_GRADE_MARKERS_AR = ("ضعيف", "موضوع")
WEAK_GRADE_MARKERS_LATIN = ("weak", "daif")

HADITH_RESPONSE_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "hadithArabic": {
            "type": "STRING",
            "description": "The text of the hadith in Arabic with diacritics (tashkeel)",
        },
        "source": {
            "type": "STRING",
            "description": "The source book of the hadith (e.g. Sahih Muslim)",
        },
        "grade": {
            "type": "STRING",
            "description": "The grade of the hadith in Arabic (e.g., صحيح, حسن, ضعيف)",
        },
        "explanation": {
            "type": "STRING",
            "description": "A detailed explanation of the hadith in Arabic",
        },
    },
    "required": ["hadithArabic", "source", "grade", "explanation"],
}


@dataclass(frozen=True)
class HadithRecord:
    arabic_text: str
    source: str
    grade: str
    explanation: str

    @property
    def is_weak(self) -> bool:
        return is_weak_grade(self.grade)


def is_weak_grade(grade: str) -> bool:
    """Return True when the grade label marks the hadith as weak or fabricated."""
    if any(marker in grade for marker in WEAK_GRADE_MARKERS_AR):
        return True
    lowered = grade.lower()
    return any(marker in lowered for marker in WEAK_GRADE_MARKERS_LATIN)


def build_hadith_prompt(topic: Optional[str] = None) -> str:
    topic = (topic or "").strip()
    if topic:
        return (
            f'Provide a Hadith about "{topic}" in Arabic (with Tashkeel). '
            "Include the source (e.g., Sahih Bukhari), the grade (Authentic/Sahih, Hasan, or Weak/Da'if), "
            "and a detailed explanation in Arabic."
        )
    return (
        "Provide a random authentic Hadith (Sahih) in Arabic (with Tashkeel) about good character or worship. "
        "Include the source, grade (Sahih), and a detailed explanation in Arabic."
    )


def build_verse_prompt(chapter_name: str, verse_number: int, verse_text: str) -> str:
    return (
        "Provide a clear, simple, and concise Tafsir (explanation) in Arabic for the following verse "
        "from the Holy Quran.\n\n"
        f"Surah: {chapter_name}\n"
        f"Ayah Number: {verse_number}\n"
        f'Ayah Text: "{verse_text}"\n\n'
        "The explanation should be easy to understand for a general reader. If applicable, reference "
        "well-known Tafsir scholars (like Al-Sa'di or Ibn Kathir) briefly."
    )


class ExplanationService:
    """Single-shot completions against the Gemini ``generateContent`` endpoint."""

    def __init__(
        self,
        api_key: Optional[str],
        model: str = DEFAULT_MODEL,
        base_url: str = GEMINI_API_BASE_URL,
        timeout: int = 60,
    ) -> None:
        self.api_key = api_key or ""
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        if not self.api_key:
            LOGGER.warning("No Gemini API key configured; explanation requests will fail")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def get_hadith(self, topic: Optional[str] = None) -> Optional[HadithRecord]:
        prompt = build_hadith_prompt(topic)
        generation_config = {
            "responseMimeType": "application/json",
            "responseSchema": HADITH_RESPONSE_SCHEMA,
        }
        try:
            text = self._generate(prompt, generation_config)
        except (requests.RequestException, ValueError):
            LOGGER.warning("Hadith request failed (topic=%r)", topic, exc_info=True)
            return None

        if not text:
            LOGGER.warning("Hadith response carried no text (topic=%r)", topic)
            return None

        try:
            payload = json.loads(text)
            record = HadithRecord(
                arabic_text=_required_text(payload, "hadithArabic"),
                source=_required_text(payload, "source"),
                grade=_required_text(payload, "grade"),
                explanation=_required_text(payload, "explanation"),
            )
        except (KeyError, TypeError, ValueError):
            LOGGER.warning("Unable to parse hadith response: %r", text[:200], exc_info=True)
            return None

        LOGGER.debug("Hadith received from %s graded %s", record.source, record.grade)
        return record

    def get_verse_explanation(self, chapter_name: str, verse_number: int, verse_text: str) -> Optional[str]:
        """Return the explanation, the fallback text for an empty reply, or None on failure."""
        prompt = build_verse_prompt(chapter_name, verse_number, verse_text)
        try:
            text = self._generate(prompt)
        except (requests.RequestException, ValueError):
            LOGGER.warning("Explanation request failed for %s:%s", chapter_name, verse_number, exc_info=True)
            return None

        if not text:
            LOGGER.info("Empty explanation for %s:%s, using fallback text", chapter_name, verse_number)
            return NO_EXPLANATION_TEXT
        return text

    def _generate(self, prompt: str, generation_config: Optional[Dict[str, Any]] = None) -> str:
        body: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        if generation_config:
            body["generationConfig"] = generation_config

        LOGGER.debug("Requesting completion from %s (structured=%s)", self.endpoint, bool(generation_config))
        response = requests.post(
            self.endpoint,
            headers={"x-goog-api-key": self.api_key, "Content-Type": "application/json"},
            json=body,
            timeout=self.timeout,
        )
        LOGGER.debug("Gemini response status: %s", response.status_code)
        response.raise_for_status()

        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("Gemini payload is not an object")
        return _response_text(payload)


def _response_text(payload: Dict[str, Any]) -> str:
    candidates = payload.get("candidates") or []
    if not candidates or not isinstance(candidates[0], dict):
        return ""
    content = candidates[0].get("content") or {}
    parts = content.get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def _required_text(payload: Dict[str, Any], key: str) -> str:
    value = payload[key]
    if not isinstance(value, str):
        raise TypeError(f"Field {key} must be a string")
    return value


__all__ = [
    "DEFAULT_MODEL",
    "ExplanationService",
    "GEMINI_API_BASE_URL",
    "HadithRecord",
    "NO_EXPLANATION_TEXT",
    "build_hadith_prompt",
    "build_verse_prompt",
    "is_weak_grade",
]
