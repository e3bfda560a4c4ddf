"""Child-process entry point for PDF text extraction.

Started by PdfTextExtractor as ``python <this file>`` so the child only
imports PyPDF2, not the web app. Reads a base64-encoded PDF from stdin and
writes one result line to stdout::

    @@DOCBRIDGE-RESULT@@{"ok": true, "text": "...", "pages": 3}
    @@DOCBRIDGE-RESULT@@{"ok": false, "error": "..."}

Anything else printed while parsing is ignored by the caller, which only
reads the last line carrying RESULT_PREFIX.
"""
from __future__ import annotations

import base64
import binascii
import io
import json
import sys
from typing import Any, Dict, List

import PyPDF2

RESULT_PREFIX = "@@DOCBRIDGE-RESULT@@"


def parse_pdf(data: bytes) -> Dict[str, Any]:
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    parts: List[str] = []
    for page in reader.pages:
        parts.append(page.extract_text() or "")
    return {"ok": True, "text": "\n".join(parts), "pages": len(reader.pages)}


def handle(payload: bytes) -> Dict[str, Any]:
    try:
        data = base64.b64decode(payload.strip(), validate=True)
    except binascii.Error as e:
        return {"ok": False, "error": f"Invalid base64 input: {e}"}
    try:
        return parse_pdf(data)
    except Exception as e:
        return {"ok": False, "error": str(e) or type(e).__name__}


def format_result(result: Dict[str, Any]) -> str:
    # ensure_ascii keeps the line independent of the child's locale
    return RESULT_PREFIX + json.dumps(result, ensure_ascii=True)


def main() -> int:
    result = handle(sys.stdin.buffer.read())
    sys.stdout.write("\n" + format_result(result) + "\n")
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
