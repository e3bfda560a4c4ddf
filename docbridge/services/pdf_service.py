"""PDF upload validation and text extraction.

Parsing runs in a child process (pdf_worker.py), one per call, so a
malformed or hostile PDF cannot crash, hang or bloat the web worker. The
child gets the PDF as base64 on stdin and answers with a single
sentinel-framed JSON line on stdout. Limits are passed in at construction
so callers and tests can choose their own bounds.
"""
from __future__ import annotations

import base64
import enum
import json
import logging
import os
import re
import subprocess
import sys
import threading
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, List, Mapping, Optional, Sequence

from docbridge.services.pdf_worker import RESULT_PREFIX

logger = logging.getLogger(__name__)

WORKER_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "pdf_worker.py")

DEFAULT_MAX_BYTES = 10 * 1024 * 1024
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_OUTPUT = 50 * 1024 * 1024
DEFAULT_MIN_CHARS = 10

PDF_CONTENT_TYPES = {"application/pdf", "application/octet-stream"}
PDF_SIGNATURE = b"%PDF-"
# Readers accept a header anywhere in the first KiB
SIGNATURE_WINDOW = 1024

_READ_CHUNK = 64 * 1024


class ExtractionFailure(enum.Enum):
    NOT_A_PDF = "not_a_pdf"
    TOO_LARGE = "too_large"
    NO_READABLE_TEXT = "no_readable_text"
    PARSE_ERROR = "parse_error"
    TIMEOUT = "timeout"


FAILURE_STATUS = {
    ExtractionFailure.NOT_A_PDF: 400,
    ExtractionFailure.TOO_LARGE: 400,
    ExtractionFailure.NO_READABLE_TEXT: 422,
    ExtractionFailure.PARSE_ERROR: 500,
    ExtractionFailure.TIMEOUT: 504,
}

FAILURE_MESSAGES = {
    ExtractionFailure.NOT_A_PDF: "Only PDF files are supported. Please upload a .pdf file.",
    ExtractionFailure.TOO_LARGE: "File size must be under {limit_mb}MB.",
    ExtractionFailure.NO_READABLE_TEXT: (
        "No readable text found in this PDF. It may be a scanned image. "
        "Please copy and paste the text manually instead."
    ),
    ExtractionFailure.PARSE_ERROR: (
        "Failed to read the PDF: {detail}. Please try again, or switch to "
        "'Paste Text' and copy-paste the content manually."
    ),
    ExtractionFailure.TIMEOUT: (
        "Reading this PDF took too long. Please try a smaller file, or switch to "
        "'Paste Text' and copy-paste the content manually."
    ),
}


@dataclass
class ExtractionResult:
    ok: bool
    text: str = ""
    page_count: int = 0
    reason: Optional[ExtractionFailure] = None
    detail: str = ""

    @classmethod
    def success(cls, text: str, page_count: int) -> "ExtractionResult":
        return cls(ok=True, text=text, page_count=page_count)

    @classmethod
    def failure(cls, reason: ExtractionFailure, detail: str = "") -> "ExtractionResult":
        return cls(ok=False, reason=reason, detail=detail)

    @property
    def status_code(self) -> int:
        if self.ok:
            return 200
        return FAILURE_STATUS[self.reason]

    def error_message(self, max_bytes: int = DEFAULT_MAX_BYTES) -> str:
        """User-facing message for a failed result."""
        if self.ok:
            return ""
        template = FAILURE_MESSAGES[self.reason]
        return template.format(
            limit_mb=max_bytes // (1024 * 1024),
            detail=(self.detail or "unknown error").rstrip("."),
        )


class WorkerTimeout(Exception):
    pass


class WorkerOutputError(Exception):
    pass


def normalize_text(text: str) -> str:
    """Canonicalize line endings and squeeze runaway whitespace.

    The order matters: newline runs are only collapsed after every ``\\r``
    has become ``\\n``.
    """
    s = (text or "").replace("\r\n", "\n")
    s = s.replace("\r", "\n")
    s = re.sub(r"\n{4,}", "\n\n\n", s)
    s = re.sub(r"[ \t]{3,}", "  ", s)
    return s.strip()


def looks_like_pdf(filename: str, content_type: str) -> bool:
    ctype = (content_type or "").split(";", 1)[0].strip().lower()
    return ctype in PDF_CONTENT_TYPES or (filename or "").lower().endswith(".pdf")


def has_pdf_signature(data: bytes) -> bool:
    return PDF_SIGNATURE in (data or b"")[:SIGNATURE_WINDOW]


def validate_upload(
    filename: str,
    content_type: str,
    data: bytes,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> Optional[ExtractionResult]:
    """Return a failure result if the upload must not reach the extractor."""
    if not looks_like_pdf(filename, content_type):
        return ExtractionResult.failure(ExtractionFailure.NOT_A_PDF, "not a PDF type or extension")
    if len(data) > max_bytes:
        return ExtractionResult.failure(ExtractionFailure.TOO_LARGE, f"{len(data)} bytes")
    if not has_pdf_signature(data):
        return ExtractionResult.failure(ExtractionFailure.NOT_A_PDF, "missing %PDF- signature")
    return None


def parse_worker_output(output: bytes) -> Optional[Dict[str, Any]]:
    """Return the last framed result message, or None if there is no usable one."""
    text = output.decode("utf-8", errors="replace")
    for line in reversed(text.split("\n")):
        line = line.rstrip("\r")
        if not line.startswith(RESULT_PREFIX):
            continue
        try:
            obj = json.loads(line[len(RESULT_PREFIX):])
        except ValueError:
            return None
        return obj if isinstance(obj, dict) else None
    return None


class PdfTextExtractor:
    """Extract normalized text from PDF bytes in an isolated worker process."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        max_output: int = DEFAULT_MAX_OUTPUT,
        min_chars: int = DEFAULT_MIN_CHARS,
        worker_command: Optional[Sequence[str]] = None,
    ):
        self.timeout = timeout
        self.max_output = max_output
        self.min_chars = min_chars
        self.worker_command = list(worker_command or [sys.executable, WORKER_PATH])

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "PdfTextExtractor":
        return cls(
            timeout=float(cfg.get("PDF_WORKER_TIMEOUT", DEFAULT_TIMEOUT)),
            max_output=int(cfg.get("PDF_WORKER_MAX_OUTPUT", DEFAULT_MAX_OUTPUT)),
            min_chars=int(cfg.get("PDF_MIN_TEXT_CHARS", DEFAULT_MIN_CHARS)),
        )

    def extract(self, data: bytes) -> ExtractionResult:
        try:
            output = self._run_worker(base64.b64encode(data))
        except WorkerTimeout as e:
            logger.warning("PDF extraction timed out: %s", e)
            return ExtractionResult.failure(ExtractionFailure.TIMEOUT, str(e))
        except WorkerOutputError as e:
            logger.warning("PDF worker failed: %s", e)
            return ExtractionResult.failure(ExtractionFailure.PARSE_ERROR, str(e))

        message = parse_worker_output(output)
        if message is None:
            logger.warning("PDF worker produced no result message (%d bytes of output)", len(output))
            return ExtractionResult.failure(
                ExtractionFailure.PARSE_ERROR, "the PDF reader stopped unexpectedly"
            )
        if not message.get("ok"):
            return ExtractionResult.failure(
                ExtractionFailure.PARSE_ERROR, str(message.get("error") or "unknown error")
            )

        raw_text = message.get("text")
        pages = message.get("pages")
        if not isinstance(raw_text, str) or not isinstance(pages, int) or pages < 0:
            return ExtractionResult.failure(
                ExtractionFailure.PARSE_ERROR, "the PDF reader returned an invalid result"
            )

        text = normalize_text(raw_text)
        if not text or len(text) < self.min_chars:
            return ExtractionResult.failure(
                ExtractionFailure.NO_READABLE_TEXT, f"{len(text)} characters extracted"
            )
        return ExtractionResult.success(text, pages)

    def _run_worker(self, payload: bytes) -> bytes:
        try:
            proc = subprocess.Popen(
                self.worker_command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise WorkerOutputError(f"could not start PDF worker: {e}") from e

        chunks: List[bytes] = []
        overflow = threading.Event()

        def feed() -> None:
            try:
                proc.stdin.write(payload)
                proc.stdin.close()
            except OSError:
                # Worker exited or was killed before reading everything;
                # its output (or lack of it) decides the result.
                pass

        def drain() -> None:
            size = 0
            while True:
                chunk = proc.stdout.read1(_READ_CHUNK)
                if not chunk:
                    break
                size += len(chunk)
                if size > self.max_output:
                    overflow.set()
                    proc.kill()
                    break
                chunks.append(chunk)

        writer = threading.Thread(target=feed, daemon=True)
        reader = threading.Thread(target=drain, daemon=True)
        writer.start()
        reader.start()
        try:
            proc.wait(timeout=self.timeout)
        except subprocess.TimeoutExpired:
            raise WorkerTimeout(f"PDF worker exceeded {self.timeout:g}s") from None
        finally:
            if proc.poll() is None:
                proc.kill()
                proc.wait()
            reader.join()
            writer.join()
            proc.stdout.close()
            if not proc.stdin.closed:
                try:
                    proc.stdin.close()
                except OSError:
                    pass

        if overflow.is_set():
            raise WorkerOutputError(f"PDF worker output exceeded {self.max_output} bytes")
        return b"".join(chunks)


def extract_text_from_upload(
    file_storage: BinaryIO,
    filename: str,
    content_type: str,
    extractor: PdfTextExtractor,
    max_bytes: int = DEFAULT_MAX_BYTES,
) -> ExtractionResult:
    """Validate an uploaded file and run it through the extractor."""
    # One byte past the limit is enough to know it is too large
    data = file_storage.read(max_bytes + 1)
    rejected = validate_upload(filename, content_type, data, max_bytes)
    if rejected is not None:
        return rejected
    return extractor.extract(data)
