"""
PDF Worker Tests

The worker's parsing and framing, exercised in-process.
"""
import base64
import json

from docbridge.services.pdf_worker import RESULT_PREFIX, format_result, handle, parse_pdf


class TestParsePdf:

    def test_text_and_pages(self, make_pdf):
        result = parse_pdf(make_pdf(["Eviction hearing notice", "Page two"]))
        assert result["ok"] is True
        assert result["pages"] == 2
        assert "Eviction hearing notice" in result["text"]

    def test_image_only_page(self, make_pdf):
        result = parse_pdf(make_pdf([None]))
        assert result["pages"] == 1
        assert result["text"].strip() == ""


class TestHandle:

    def test_base64_round_trip(self, make_pdf):
        payload = base64.b64encode(make_pdf(["Hello World from the worker"])) + b"\n"
        result = handle(payload)
        assert result["ok"] is True
        assert "Hello World" in result["text"]

    def test_invalid_base64(self):
        result = handle(b"***not base64***")
        assert result["ok"] is False
        assert "base64" in result["error"]

    def test_parse_failure(self):
        result = handle(base64.b64encode(b"%PDF-1.4\ngarbage without structure"))
        assert result["ok"] is False
        assert result["error"]


class TestFormatResult:

    def test_single_ascii_line(self):
        line = format_result({"ok": True, "text": "Línea\nnueva", "pages": 1})
        assert line.startswith(RESULT_PREFIX)
        assert "\n" not in line
        line.encode("ascii")
        assert json.loads(line[len(RESULT_PREFIX):])["text"] == "Línea\nnueva"
