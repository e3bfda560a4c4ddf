"""Translation with provider fallback.

Order: Lingo.dev (when LINGODOTDEV_API_KEY is set), then OpenAI (when
OPENAI_API_KEY is set), then a clearly marked demo translation.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import requests
from flask import current_app

from docbridge.services.openai_service import get_client, model_name

LANGUAGES = [
    "English", "Hindi", "Arabic", "Spanish", "French", "Mandarin", "Portuguese",
    "Bengali", "Russian", "Urdu", "Japanese", "Swahili", "Turkish",
    "Korean", "Vietnamese", "Thai", "Tagalog", "Amharic", "Somali",
    "Haitian Creole", "Pashto", "Dari", "Tigrinya", "Burmese", "Nepali",
    "Khmer", "Lao", "Hmong", "Yoruba", "Igbo", "Zulu", "Malay",
    "Indonesian", "Persian", "Punjabi", "Tamil", "Telugu", "Gujarati",
    "Marathi", "Kannada", "Malayalam", "Sinhala", "Ukrainian", "Polish",
    "Romanian", "Dutch", "Swedish", "Norwegian", "German", "Italian",
]

DOCUMENT_TYPES = {
    "healthcare": "Healthcare",
    "legal": "Legal",
    "housing": "Housing",
    "civic": "Civic",
    "other": "Other",
}

MOCK_PREFIXES = {
    "Hindi": "[हिंदी अनुवाद Demo]",
    "Spanish": "[Traducción Demo]",
    "French": "[Traduction Demo]",
}

SELECTION_MIN_CHARS = 3
SELECTION_MAX_CHARS = 5000


def translator_prompt(source_language: str, target_language: str) -> str:
    source = "English" if source_language == "en" else source_language
    return f"""You are a professional translator.
Translate the following text from {source} into {target_language}.
- Maintain the original tone and formatting.
- Do not add any introductory or concluding remarks.
- Provide ONLY the translated text.
- If the target language is English, refine the text for clarity and flow."""


def lingo_translate(text: str, target_language: str, source_language: str) -> Optional[str]:
    key = (current_app.config.get("LINGODOTDEV_API_KEY") or "").strip()
    if not key:
        return None
    try:
        r = requests.post(
            current_app.config["LINGO_API_URL"],
            json={"text": text, "sourceLocale": source_language, "targetLocale": target_language},
            headers={"Authorization": f"Bearer {key}"},
            timeout=current_app.config.get("TRANSLATION_TIMEOUT", 30),
        )
    except requests.RequestException as e:
        current_app.logger.warning(f"Lingo.dev translation failed, falling back: {e}")
        return None
    if not r.ok:
        current_app.logger.warning(f"Lingo.dev returned {r.status_code}, falling back")
        return None
    try:
        data = r.json()
    except ValueError:
        current_app.logger.warning("Lingo.dev returned invalid JSON, falling back")
        return None
    if not isinstance(data, dict):
        return text
    for key_name in ("translatedText", "text"):
        if data.get(key_name) is not None:
            return str(data[key_name])
    return text


def openai_translate(text: str, target_language: str, source_language: str) -> Optional[str]:
    client = get_client()
    if client is None:
        return None
    try:
        res = client.chat.completions.create(
            model=model_name(),
            messages=[
                {"role": "system", "content": translator_prompt(source_language, target_language)},
                {"role": "user", "content": text},
            ],
            temperature=0.3,
        )
        return (res.choices[0].message.content or "").strip() or None
    except Exception as e:
        current_app.logger.error(f"OpenAI translation failed: {type(e).__name__}: {e}")
        return None


def mock_translation(text: str, target_language: str) -> str:
    prefix = MOCK_PREFIXES.get(target_language)
    if prefix:
        return f"{prefix} {text[:100]}... (Real translation requires API key)"
    return (
        f"[{target_language} Translation Demo] {text[:200]}... "
        "(Please add OPENAI_API_KEY or LINGODOTDEV_API_KEY to the environment)"
    )


def translate_text(text: str, target_language: str, source_language: str = "en") -> Dict[str, Any]:
    result: Dict[str, Any] = {
        "sourceLanguage": source_language,
        "targetLanguage": target_language,
    }

    translated = lingo_translate(text, target_language, source_language)
    if translated is not None:
        result.update(translatedText=translated, provider="lingo")
        return result

    translated = openai_translate(text, target_language, source_language)
    if translated:
        result.update(translatedText=translated, provider="openai")
        return result

    current_app.logger.warning("No translation provider available. Using mock.")
    result.update(translatedText=mock_translation(text, target_language), provider="mock", isMock=True)
    return result
