"""Languages a SchemeSaathi session may be conducted in.

Language is a presentation attribute only: it selects scheme name
translations and explanation templates, never eligibility or
application state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

__all__ = [
    "LanguageConfig",
    "LANGUAGES",
    "LANGUAGE_CODE_MAP",
    "get_language",
    "get_supported_languages",
    "is_supported",
]


@dataclass(frozen=True, slots=True)
class LanguageConfig:
    """Immutable descriptor for a single supported language."""

    code: str
    """ISO 639-1 code."""

    name_english: str
    """Language name in English."""

    name_native: str
    """Language name in its own script."""

    script: str
    """Primary script used for the language."""

    has_explanations: bool = False
    """Whether eligibility explanations are templated in this language."""


# ---------------------------------------------------------------------------
# Language registry
# ---------------------------------------------------------------------------

LANGUAGES: Final[dict[str, LanguageConfig]] = {
    "en": LanguageConfig("en", "English", "English", "Latin", has_explanations=True),
    "hi": LanguageConfig("hi", "Hindi", "हिन्दी", "Devanagari", has_explanations=True),
    "bn": LanguageConfig("bn", "Bengali", "বাংলা", "Bengali"),
    "te": LanguageConfig("te", "Telugu", "తెలుగు", "Telugu"),
    "mr": LanguageConfig("mr", "Marathi", "मराठी", "Devanagari"),
    "ta": LanguageConfig("ta", "Tamil", "தமிழ்", "Tamil"),
    "gu": LanguageConfig("gu", "Gujarati", "ગુજરાતી", "Gujarati"),
    "kn": LanguageConfig("kn", "Kannada", "ಕನ್ನಡ", "Kannada"),
    "ml": LanguageConfig("ml", "Malayalam", "മലയാളം", "Malayalam"),
    "pa": LanguageConfig("pa", "Punjabi", "ਪੰਜਾਬੀ", "Gurmukhi"),
    "or": LanguageConfig("or", "Odia", "ଓଡ଼ିଆ", "Odia"),
}

# BCP-47 regional tags accepted from clients, mapped to registry codes.
LANGUAGE_CODE_MAP: Final[dict[str, str]] = {
    "en-IN": "en",
    "en-US": "en",
    "hi-IN": "hi",
    "bn-IN": "bn",
    "te-IN": "te",
    "mr-IN": "mr",
    "ta-IN": "ta",
    "gu-IN": "gu",
    "kn-IN": "kn",
    "ml-IN": "ml",
    "pa-IN": "pa",
    "or-IN": "or",
}


# ---------------------------------------------------------------------------
# Helper functions
# ---------------------------------------------------------------------------


def get_language(code: str) -> LanguageConfig | None:
    """Return the ``LanguageConfig`` for *code*, checking aliases.

    Returns ``None`` if the language is not found.
    """
    canonical = LANGUAGE_CODE_MAP.get(code, code)
    return LANGUAGES.get(canonical)


def get_supported_languages() -> list[LanguageConfig]:
    """Return all supported languages, English first, then by code."""
    return sorted(LANGUAGES.values(), key=lambda lang: (lang.code != "en", lang.code))


def is_supported(code: str) -> bool:
    return get_language(code) is not None
