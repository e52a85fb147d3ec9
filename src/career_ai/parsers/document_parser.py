import io
import re
from pathlib import Path

from career_ai.errors import DocumentParseError

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT_MIME = "text/plain"
MARKDOWN_MIME = "text/markdown"

MIME_BY_SUFFIX = {
    ".pdf": PDF_MIME,
    ".docx": DOCX_MIME,
    ".txt": TEXT_MIME,
    ".md": MARKDOWN_MIME,
}

# Icons that resume templates put in front of contact lines
ICON_PATTERN = (
    r"[\U0001f4e7\U0001f4de\U0001f4cd\U0001f4bc\U0001f4c5\U0001f393"
    r"\U0001f3e2\U0001f4dd\U0001f4c4\U0001f517\U0001f310\U0001f4f1"
    r"\u260e\u2709\u2706]\s*"
)

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
# (123) 456-7890, 123-456-7890, 123.456.7890, +1 123 456 7890
PHONE_PATTERN = re.compile(r"(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}")


def extract_document_text(file_path: str | Path) -> str:
    """Read a resume file (PDF, DOCX, TXT, MD) and return clean plain text."""
    path = Path(file_path)
    mime_type = MIME_BY_SUFFIX.get(path.suffix.lower())
    if mime_type is None:
        raise DocumentParseError(f"Unsupported file format: {path.suffix}", path.suffix)
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise DocumentParseError(f"Failed to read {path.name}: {exc}", mime_type) from exc
    return extract_text_from_bytes(data, mime_type)


def extract_text_from_bytes(data: bytes, mime_type: str) -> str:
    """Extract text from an uploaded document by MIME type."""
    if mime_type == PDF_MIME:
        return clean_text(_parse_pdf(data))
    if mime_type == DOCX_MIME:
        return clean_text(_parse_docx(data))
    if mime_type in (TEXT_MIME, MARKDOWN_MIME):
        try:
            return clean_text(data.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise DocumentParseError("Text file is not valid UTF-8", mime_type) from exc
    raise DocumentParseError(f"Unsupported MIME type: {mime_type}", mime_type)


def clean_text(text: str) -> str:
    """Normalize extraction artifacts.

    Handles: unicode artifacts, icon glyphs, bullet styles, runs of spaces
    and excessive blank lines.
    """
    text = text.lstrip("\ufeff")
    text = re.sub(r"[\u200b\u200c\u200d\u00ad\u2060\ufeff]", "", text)
    text = re.sub(ICON_PATTERN, "", text)

    # ●, •, ◦, ◆, ■, ▪, ★, ○ → -
    text = re.sub(r"^(\s*)[●•◦◆■▪★○]\s*", r"\1- ", text, flags=re.MULTILINE)

    lines = []
    for line in text.splitlines():
        stripped = re.sub(r"[ \t]{2,}", " ", line.strip())
        lines.append(stripped)
    text = "\n".join(lines)

    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def redact_pii(text: str) -> str:
    """Replace email addresses and phone numbers, for logging."""
    text = EMAIL_PATTERN.sub("[EMAIL_REDACTED]", text)
    return PHONE_PATTERN.sub("[PHONE_REDACTED]", text)


def _parse_pdf(data: bytes) -> str:
    import fitz  # pymupdf

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as exc:
        raise DocumentParseError(f"Failed to extract text from PDF: {exc}", PDF_MIME) from exc
    try:
        return "\n".join(page.get_text() for page in doc)
    finally:
        doc.close()


def _parse_docx(data: bytes) -> str:
    from docx import Document

    try:
        doc = Document(io.BytesIO(data))
    except Exception as exc:
        raise DocumentParseError("Failed to extract text from DOCX", DOCX_MIME) from exc
    return "\n".join(p.text for p in doc.paragraphs if p.text.strip())
