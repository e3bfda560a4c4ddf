"""OpenAI wrapper.

Client setup, tolerant JSON parsing of model output, and the plain-language
simplification used after translation.
"""
from __future__ import annotations

import json
import re
from typing import Any, Dict, List, Optional, Tuple

from flask import current_app
from openai import OpenAI


def client_ready() -> Tuple[bool, str]:
    key = (current_app.config.get("OPENAI_API_KEY") or "").strip()
    if not key:
        return False, "OPENAI_API_KEY is missing"
    return True, ""


def model_name() -> str:
    return (current_app.config.get("OPENAI_MODEL") or "").strip() or "gpt-4o-mini"


def get_client():
    ok, _ = client_ready()
    if not ok:
        return None
    key = current_app.config["OPENAI_API_KEY"].strip()
    return OpenAI(api_key=key, timeout=60)


def safe_json_loads(s: str) -> Tuple[Optional[Dict[str, Any]], str]:
    if not s:
        return None, "Empty model output"

    # Strip markdown code blocks if present
    text = s.strip()
    if text.startswith("```"):
        lines = text.split("\n", 1)
        if len(lines) > 1:
            text = lines[1]
        if text.endswith("```"):
            text = text[:-3].strip()
        elif "```" in text:
            text = text.rsplit("```", 1)[0].strip()

    try:
        obj = json.loads(text)
        if isinstance(obj, dict):
            return obj, ""
    except ValueError:
        pass

    # Fallback: extract first JSON object from text
    m = re.search(r"\{.*\}", text, flags=re.DOTALL)
    if m:
        try:
            obj = json.loads(m.group(0))
            if isinstance(obj, dict):
                return obj, ""
        except ValueError:
            pass
    return None, "Model did not return valid json"


SIMPLIFY_SCHEMA: Dict[str, Any] = {
    "simple_explanation": "",
    "key_points": [],
    "urgent_actions": [],
}

MOCK_KEY_POINTS = [
    "This is an official document that requires your attention.",
    "Please review all sections carefully and note any deadlines.",
    "You may need to provide additional documentation.",
    "Contact the issuing authority if you have questions.",
    "Keep a copy of this document for your records.",
]

MOCK_URGENT_ACTIONS = [
    "Check for any deadlines mentioned in the text.",
    "Prepare your identification documents.",
]


def simplify_prompt(target_language: str) -> str:
    return f"""You are a helpful assistant that simplifies complex official documents for immigrants and refugees.
Your job is to:
1. Explain the document in simple, plain language
2. Extract the 3-5 most important key points
3. Highlight any urgent actions required
4. Respond in {target_language or "English"} if possible, otherwise in English

Output MUST be valid JSON with the following keys:
- "simple_explanation": A clear, 2-3 paragraph explanation.
- "key_points": An array of 3-5 strings (bullet points).
- "urgent_actions": An array of strings (actions user must take), or empty array if none."""


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def validate_and_repair_simplification(obj: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Coerce model output into the simplification schema.

    Missing keys become empty values and non-list point fields are dropped,
    so callers can rely on the shape.
    """
    result = dict(SIMPLIFY_SCHEMA)
    if not obj or not isinstance(obj, dict):
        return result
    explanation = obj.get("simple_explanation")
    result["simple_explanation"] = explanation.strip() if isinstance(explanation, str) else ""
    result["key_points"] = _string_list(obj.get("key_points"))
    result["urgent_actions"] = _string_list(obj.get("urgent_actions"))
    return result


def mock_simplification(document_type: str) -> Dict[str, Any]:
    doc = document_type or "official"
    text = (
        f"This is a {doc} document that has been translated for your understanding. "
        "The document contains important information that may affect your rights, "
        "benefits, or obligations.\n\n"
        "Please read through the translated content carefully. If there are any "
        "deadlines or required actions mentioned, make sure to complete them on time. "
        "If you are unsure about anything, consider seeking help from a local community "
        "organization or legal aid service."
    )
    return {
        "simplifiedText": text,
        "keyPoints": list(MOCK_KEY_POINTS),
        "urgentActions": list(MOCK_URGENT_ACTIONS),
        "isMock": True,
    }


def simplify_document(translated_text: str, document_type: str, target_language: str) -> Dict[str, Any]:
    """Explain a translated document in plain language.

    Falls back to a canned explanation when no OpenAI key is configured.
    Provider errors propagate to the caller.
    """
    client = get_client()
    if client is None:
        current_app.logger.info("OpenAI not configured, returning mock simplification")
        return mock_simplification(document_type)

    limit = int(current_app.config.get("SIMPLIFY_MAX_CHARS", 3000))
    user_prompt = f"Please simplify this {document_type or 'official'} document:\n\n{translated_text[:limit]}"

    res = client.chat.completions.create(
        model=model_name(),
        messages=[
            {"role": "system", "content": simplify_prompt(target_language)},
            {"role": "user", "content": user_prompt},
        ],
        response_format={"type": "json_object"},
        max_tokens=1000,
        temperature=0.3,
    )
    content = (res.choices[0].message.content or "").strip() or "{}"
    obj, err = safe_json_loads(content)
    if err:
        current_app.logger.warning(f"Simplification JSON parse error: {err}")
        obj = {"simple_explanation": content, "key_points": [], "urgent_actions": []}

    repaired = validate_and_repair_simplification(obj)
    return {
        "simplifiedText": repaired["simple_explanation"],
        "keyPoints": repaired["key_points"],
        "urgentActions": repaired["urgent_actions"],
    }
