"""Message catalogs for user-facing cart notifications"""

import json
from pathlib import Path
from typing import Any

from shopcart.logging import get_logger

logger = get_logger(__name__)

# Supported languages with their names
SUPPORTED_LANGUAGES = {
    "en": "English",
    "pt": "Português",
}

DEFAULT_LANGUAGE = "en"

LOCALES_PATH = Path(__file__).parent.parent / "locales"

# Cache for loaded translations
_translations: dict[str, dict[str, Any]] = {}


def _load_translations(lang: str) -> dict[str, Any]:
    """Load translations for a language"""
    if lang in _translations:
        return _translations[lang]

    file_path = LOCALES_PATH / f"{lang}.json"

    if not file_path.exists():
        if lang != DEFAULT_LANGUAGE:
            return _load_translations(DEFAULT_LANGUAGE)
        return {}

    try:
        with open(file_path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Cannot load locale {lang}: {e}")
        return {}

    _translations[lang] = data if isinstance(data, dict) else {}
    return _translations[lang]


def _lookup(translations: dict[str, Any], key: str) -> Any:
    # Nested keys with dot notation (e.g., "cart.add_failed")
    current: Any = translations
    for part in key.split("."):
        if not isinstance(current, dict) or part not in current:
            return None
        current = current[part]
    return current


def get_text(key: str, lang: str = DEFAULT_LANGUAGE, default: str | None = None, **kwargs) -> str:
    """
    Get translated text by key.

    Args:
        key: Translation key (e.g., "cart.add_failed")
        lang: Language code (e.g., "pt", "pt-BR", "en")
        default: Default value if key not found (instead of returning key)
        **kwargs: Variables to format into the string

    Returns:
        Translated string or key/default if not found
    """
    lang = detect_language(lang)

    text = _lookup(_load_translations(lang), key)

    # Fallback to English if key not found
    if text is None and lang != DEFAULT_LANGUAGE:
        text = _lookup(_load_translations(DEFAULT_LANGUAGE), key)

    if not isinstance(text, str):
        return default if default is not None else key

    if kwargs:
        try:
            return text.format(**kwargs)
        except (KeyError, ValueError, AttributeError):
            return text

    return text


def detect_language(language_code: str | None) -> str:
    """Normalize a language code ("pt-BR" -> "pt"), defaulting to English."""
    if not language_code:
        return DEFAULT_LANGUAGE
    lang = language_code.split("-")[0].lower()
    return lang if lang in SUPPORTED_LANGUAGES else DEFAULT_LANGUAGE


def reload_translations() -> None:
    """Clear translation cache and reload"""
    _translations.clear()
