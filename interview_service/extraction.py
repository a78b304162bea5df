# interview_service/extraction.py
import io
import logging
from typing import Optional

import docx2txt
import pdfplumber

from .errors import UnsupportedFileTypeError

logger = logging.getLogger("ai-service.extraction")

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"

GENERIC_MIMES = {"", "application/octet-stream"}

EXTENSION_MIMES = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".txt": TEXT_MIME,
}


def extract_text_from_pdf_bytes(b: bytes) -> str:
    text_parts = []
    with pdfplumber.open(io.BytesIO(b)) as pdf:
        for page_no, page in enumerate(pdf.pages, 1):
            try:
                txt = page.extract_text() or ""
            except Exception as e:
                logger.warning(f"Skipping unreadable PDF page {page_no}: {e}")
                continue
            if txt:
                text_parts.append(txt)
    return "\n".join(text_parts)


def extract_text_from_docx_bytes(b: bytes) -> str:
    return docx2txt.process(io.BytesIO(b)) or ""


def resolve_mime_type(content_type: Optional[str], filename: Optional[str]) -> str:
    """Declared MIME type, or the filename extension when the type is generic."""
    mime = (content_type or "").split(";", 1)[0].strip().lower()
    if mime not in GENERIC_MIMES:
        return mime
    name = (filename or "").lower()
    for ext, ext_mime in EXTENSION_MIMES.items():
        if name.endswith(ext):
            return ext_mime
    return mime


def extract_resume_text(data: bytes, content_type: Optional[str], filename: Optional[str] = None) -> str:
    """
    Extract raw text from an uploaded resume.

    Raises:
        UnsupportedFileTypeError: for anything other than PDF, DOCX or plain text
    """
    mime = resolve_mime_type(content_type, filename)
    if mime == PDF_MIME:
        return extract_text_from_pdf_bytes(data)
    if mime == DOCX_MIME:
        return extract_text_from_docx_bytes(data)
    if mime == TEXT_MIME:
        return data.decode("utf-8", errors="ignore")
    raise UnsupportedFileTypeError(mime)
