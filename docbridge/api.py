"""
API Blueprint

- /api/extract-pdf: PDF upload -> normalized text (isolated worker process)
- /api/translate, /api/translate-selection: provider-fallback translation
- /api/simplify: plain-language explanation, key points, urgent actions
- /api/legal-aid: language-aware legal aid referrals
- /api/history: per-user saved translations
"""
from typing import Any, Dict

from flask import Blueprint, jsonify, request, current_app
from flask_login import login_required, current_user
from werkzeug.exceptions import RequestEntityTooLarge

from docbridge.services.history_service import (
    HistoryError, delete_translation, get_translation, list_history, save_translation,
)
from docbridge.services.legal_aid_service import match_contacts
from docbridge.services.openai_service import simplify_document
from docbridge.services.pdf_service import (
    ExtractionFailure, ExtractionResult, PdfTextExtractor, extract_text_from_upload,
)
from docbridge.services.translation_service import (
    DOCUMENT_TYPES, LANGUAGES, SELECTION_MAX_CHARS, SELECTION_MIN_CHARS, translate_text,
)

api_bp = Blueprint('api', __name__)

LEGAL_AID_MAX_LIMIT = 20


# ============ Helper Functions ============

def get_extractor() -> PdfTextExtractor:
    return PdfTextExtractor.from_config(current_app.config)


def json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def text_field(payload: Dict[str, Any], name: str, default: str = "") -> str:
    value = payload.get(name)
    if not isinstance(value, str):
        return default
    return value.strip()


# ============ API Routes ============

@api_bp.errorhandler(RequestEntityTooLarge)
def request_too_large(e):
    max_bytes = int(current_app.config["PDF_MAX_UPLOAD_BYTES"])
    current_app.logger.info(f"Request body over MAX_CONTENT_LENGTH on {request.path}")
    result = ExtractionResult.failure(ExtractionFailure.TOO_LARGE, "request body too large")
    return jsonify({"error": result.error_message(max_bytes)}), result.status_code


@api_bp.route("/api/extract-pdf", methods=["POST"])
def extract_pdf():
    file = request.files.get("file")
    if not file:
        return jsonify({"error": "No file provided"}), 400

    filename = file.filename or ""
    max_bytes = int(current_app.config["PDF_MAX_UPLOAD_BYTES"])
    try:
        result = extract_text_from_upload(file.stream, filename, file.content_type, get_extractor(), max_bytes)
    except Exception as e:
        current_app.logger.exception("PDF extraction error")
        return jsonify({
            "error": f"Failed to read the PDF: {type(e).__name__}. Please try again, or switch to "
                     "'Paste Text' and copy-paste the content manually."
        }), 500

    if not result.ok:
        current_app.logger.info(f"PDF rejected ({result.reason.value}): {filename!r} {result.detail}")
        return jsonify({"error": result.error_message(max_bytes)}), result.status_code

    return jsonify({
        "text": result.text,
        "pages": result.page_count,
        "fileName": filename,
        "charCount": len(result.text),
    }), 200


@api_bp.route("/api/translate", methods=["POST"])
def translate():
    payload = json_payload()
    text = text_field(payload, "text")
    target_language = text_field(payload, "targetLanguage")
    if not text or not target_language:
        return jsonify({"error": "Missing required fields: text, targetLanguage"}), 400

    source_language = text_field(payload, "sourceLanguage") or "en"
    try:
        return jsonify(translate_text(text, target_language, source_language)), 200
    except Exception:
        current_app.logger.exception("Translation route error")
        return jsonify({"error": "Translation failed internal error"}), 500


@api_bp.route("/api/translate-selection", methods=["POST"])
def translate_selection():
    """Short translations for the select-to-translate popover."""
    payload = json_payload()
    text = text_field(payload, "text")
    target_language = text_field(payload, "targetLanguage")
    if not target_language:
        return jsonify({"error": "Missing required field: targetLanguage"}), 400
    if len(text) < SELECTION_MIN_CHARS:
        return jsonify({"error": f"Select at least {SELECTION_MIN_CHARS} characters to translate"}), 400
    if len(text) > SELECTION_MAX_CHARS:
        return jsonify({"error": f"Selection is too long (max {SELECTION_MAX_CHARS} characters)"}), 400

    source_language = text_field(payload, "sourceLanguage") or "en"
    try:
        return jsonify(translate_text(text, target_language, source_language)), 200
    except Exception:
        current_app.logger.exception("Selection translation error")
        return jsonify({"error": "Translation failed internal error"}), 500


@api_bp.route("/api/simplify", methods=["POST"])
def simplify():
    payload = json_payload()
    translated_text = text_field(payload, "translatedText")
    if not translated_text:
        return jsonify({"error": "Missing required field: translatedText"}), 400

    document_type = text_field(payload, "documentType") or "other"
    target_language = text_field(payload, "targetLanguage") or "English"
    try:
        return jsonify(simplify_document(translated_text, document_type, target_language)), 200
    except Exception:
        current_app.logger.exception("Simplification error")
        return jsonify({"error": "Simplification failed"}), 500


@api_bp.route("/api/languages", methods=["GET"])
def languages():
    return jsonify({
        "languages": LANGUAGES,
        "documentTypes": [{"value": k, "label": v} for k, v in DOCUMENT_TYPES.items()],
    }), 200


@api_bp.route("/api/legal-aid", methods=["GET"])
def legal_aid():
    language = (request.args.get("language") or "").strip()
    if not language:
        return jsonify({"error": "Missing language"}), 400

    document_type = (request.args.get("documentType") or "").strip() or None
    region = (request.args.get("region") or "").strip() or None
    limit = request.args.get("limit", 5, type=int)
    limit = max(1, min(limit, LEGAL_AID_MAX_LIMIT))

    contacts = match_contacts(language, document_type=document_type, region=region, limit=limit)
    return jsonify({"language": language, "contacts": contacts}), 200


@api_bp.route("/api/history", methods=["GET"])
@login_required
def history_list():
    return jsonify(list_history(current_user)), 200


@api_bp.route("/api/history", methods=["POST"])
@login_required
def history_save():
    try:
        translation = save_translation(current_user, json_payload())
    except HistoryError as e:
        return jsonify({"error": str(e)}), 400
    current_app.logger.info(f"Saved translation {translation.id} for user {current_user.id}")
    return jsonify(translation.to_dict()), 201


@api_bp.route("/api/history/<int:translation_id>", methods=["GET"])
@login_required
def history_get(translation_id):
    translation = get_translation(current_user, translation_id)
    if translation is None:
        return jsonify({"error": "Translation not found"}), 404
    return jsonify(translation.to_dict()), 200


@api_bp.route("/api/history/<int:translation_id>", methods=["DELETE"])
@login_required
def history_delete(translation_id):
    if not delete_translation(current_user, translation_id):
        return jsonify({"error": "Translation not found"}), 404
    return jsonify({"ok": True, "id": translation_id}), 200
