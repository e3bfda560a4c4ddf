"""Per-user translation history (documents + translations)."""
from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Optional

from docbridge import db
from docbridge.models import Document, Translation
from docbridge.services.translation_service import DOCUMENT_TYPES

HISTORY_LIMIT = 50
TOP_N = 5


class HistoryError(ValueError):
    pass


def _clean_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v is not None]


def _text(payload: Dict[str, Any], name: str, default: str = "") -> str:
    value = payload.get(name)
    if value is None:
        return default
    if not isinstance(value, str):
        raise HistoryError(f"{name} must be a string")
    return value.strip()


def save_translation(user, payload: Dict[str, Any]) -> Translation:
    """Persist a document and its translation in one commit."""
    original_text = _text(payload, "originalText")
    translated_text = _text(payload, "translatedText")
    target_language = _text(payload, "targetLanguage")
    if not original_text or not translated_text or not target_language:
        raise HistoryError("Missing required fields: originalText, translatedText, targetLanguage")

    document_type = (_text(payload, "documentType") or "other").lower()
    if document_type not in DOCUMENT_TYPES:
        document_type = "other"

    doc = Document(
        user_id=user.id,
        original_text=original_text,
        file_name=_text(payload, "fileName") or "Pasted text",
        document_type=document_type,
    )
    translation = Translation(
        document=doc,
        user_id=user.id,
        source_language=_text(payload, "sourceLanguage") or "en",
        target_language=target_language,
        translated_text=translated_text,
        simplified_text=_text(payload, "simplifiedText"),
        key_points=_clean_list(payload.get("keyPoints")),
        urgent_actions=_clean_list(payload.get("urgentActions")),
        provider=_text(payload, "provider")[:20] or None,
        is_mock=bool(payload.get("isMock")),
    )
    db.session.add(doc)
    db.session.add(translation)
    db.session.commit()
    return translation


def list_history(user, limit: int = HISTORY_LIMIT) -> Dict[str, Any]:
    rows = (
        Translation.query.filter_by(user_id=user.id)
        .order_by(Translation.created_at.desc(), Translation.id.desc())
        .limit(limit)
        .all()
    )
    languages = Counter(t.target_language for t in rows)
    doc_types = Counter((t.document.document_type if t.document else None) or "other" for t in rows)
    return {
        "translations": [t.to_dict() for t in rows],
        "stats": {
            "count": len(rows),
            "top_languages": [lang for lang, _ in languages.most_common(TOP_N)],
            "top_document_types": [
                DOCUMENT_TYPES.get(dt, dt) for dt, _ in doc_types.most_common(TOP_N)
            ],
        },
    }


def get_translation(user, translation_id: int) -> Optional[Translation]:
    return Translation.query.filter_by(id=translation_id, user_id=user.id).first()


def delete_translation(user, translation_id: int) -> bool:
    translation = get_translation(user, translation_id)
    if translation is None:
        return False
    doc = translation.document
    db.session.delete(translation)
    if doc is not None:
        db.session.delete(doc)
    db.session.commit()
    return True
