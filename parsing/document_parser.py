"""
ComplyDocs Document Parser
Extracts text, metadata and sections from DOCX, PDF, XLSX and plain text uploads
"""

import html
import io
import logging
import re
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple

from core.config import ParsingConfig
from core.exceptions import ParseFailure, UnsupportedFileType
from matching.models import DocumentMetadata
from matching.text_utils import clean_content

logger = logging.getLogger(__name__)


@dataclass
class DocumentSection:
    """A numbered or heading-delimited section of a document."""
    title: str
    content: str
    level: int
    start_index: int
    end_index: int


@dataclass
class ParsedDocument:
    """Output of the parser: cleaned text, typed metadata and sections."""
    content: str
    metadata: DocumentMetadata
    sections: List[DocumentSection] = field(default_factory=list)
    html: Optional[str] = None  # DOCX only
    filename: Optional[str] = None


# Section extraction patterns
NUMBERED_SECTION = re.compile(r"^(\d+\.?\d*\.?\d*)\s+(.+)$")
MARKDOWN_HEADING = re.compile(r"^(#{1,6})\s*(.*)$")
CAPS_HEADING = re.compile(r"[A-Z][A-Z\s]+:?")
SENTENCE_HEADING = re.compile(r"[A-Z][^.!?]*")
MAX_HEADING_LENGTH = 100

# "key: value" lines scanned by extract_metadata
METADATA_PATTERNS = {
    "document_type": re.compile(r"(?:document\s+type|type)\s*:\s*(.+)", re.IGNORECASE),
    "version": re.compile(r"(?:version|revision|rev\.?)\s*:\s*(.+)", re.IGNORECASE),
    "effective_date": re.compile(r"(?:effective\s+date|date\s+effective)\s*:\s*(.+)", re.IGNORECASE),
    "review_date": re.compile(r"(?:review\s+date|next\s+review)\s*:\s*(.+)", re.IGNORECASE),
    "owner": re.compile(r"(?:owner|author|prepared\s+by)\s*:\s*(.+)", re.IGNORECASE),
    "approver": re.compile(r"(?:approved\s+by|approver)\s*:\s*(.+)", re.IGNORECASE),
}

DATE_FORMATS = ("%Y-%m-%d", "%d/%m/%Y", "%d-%m-%Y", "%d %B %Y", "%d %b %Y", "%B %d, %Y", "%b %d, %Y")

HEADING_STYLES = {"Title": 1, "Subtitle": 2}


def _is_heading(line: str) -> bool:
    if len(line) >= MAX_HEADING_LENGTH:
        return False
    return bool(CAPS_HEADING.fullmatch(line) or SENTENCE_HEADING.fullmatch(line))


def _numbered_level(number: str) -> int:
    return len([part for part in number.split(".") if part])


def extract_sections(content: str) -> List[DocumentSection]:
    """
    Split text into sections.

    A line such as "4.1 Context" opens a numbered section whose level is
    the number of dotted parts. A markdown heading, an ALL-CAPS line or a
    short capitalized line without sentence punctuation opens a level-1
    section. Other non-blank lines are appended to the open section; lines
    before the first section are dropped.

    Offsets: start_index is the offset of the opening line, end_index is
    the offset just before the next section starts (len(content) for the
    last section).
    """
    sections: List[DocumentSection] = []
    current: Optional[DocumentSection] = None
    index = 0

    def open_section(title: str, level: int):
        nonlocal current
        if current is not None:
            current.end_index = index - 1
            sections.append(current)
        current = DocumentSection(title=title, content="", level=level, start_index=index, end_index=index)

    for line in content.split("\n"):
        trimmed = line.strip()

        markdown = MARKDOWN_HEADING.match(trimmed)
        text = markdown.group(2).strip() if markdown else trimmed

        numbered = NUMBERED_SECTION.match(text)
        if numbered and text:
            open_section(text, _numbered_level(numbered.group(1)))
        elif markdown and text:
            open_section(text, 1)
        elif trimmed and _is_heading(trimmed):
            open_section(trimmed, 1)
        elif current is not None and trimmed:
            current.content = f"{current.content}\n{trimmed}" if current.content else trimmed

        index += len(line) + 1

    if current is not None:
        current.end_index = len(content)
        sections.append(current)

    return sections


def _parse_date(value: str) -> Optional[datetime]:
    value = value.strip()
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


def extract_metadata(parsed: ParsedDocument) -> DocumentMetadata:
    """
    Pull document control fields from the first five sections.

    Looks for lines like "Version: 2.1" or "Approved by: J. Smith". Dates
    that cannot be parsed are left unset.
    """
    search_text = "\n".join(section.content for section in parsed.sections[:5])
    found = DocumentMetadata()

    for key, pattern in METADATA_PATTERNS.items():
        match = pattern.search(search_text)
        if not match:
            continue
        value = match.group(1).strip()
        if key.endswith("_date"):
            setattr(found, key, _parse_date(value))
        else:
            setattr(found, key, value)

    return found


class DocumentParser:
    """
    Format-specific text extraction.

    DOCX, XLSX and text failures raise ParseFailure. PDF extraction runs on
    a worker thread bounded by parse_timeout_seconds and degrades to
    placeholder content with metadata.parse_error set.
    """

    def __init__(self, config: Optional[ParsingConfig] = None):
        self.config = config or ParsingConfig()

    def parse_document(self, content: bytes, mime_type: str, filename: str) -> ParsedDocument:
        """
        Parse an uploaded file.

        Args:
            content: Raw file bytes
            mime_type: Declared MIME type of the upload
            filename: Original filename, used in messages and the PDF placeholder

        Returns:
            ParsedDocument with cleaned content and extracted sections

        Raises:
            UnsupportedFileType: MIME type not in the supported set
            ParseFailure: DOCX, XLSX or text could not be read
        """
        kind = self.config.supported_mime_types.get(mime_type)
        if kind is None:
            raise UnsupportedFileType(mime_type)

        metadata = DocumentMetadata(file_type=mime_type)
        page_html = None

        if kind == "docx":
            text, page_html = self._parse_docx(content, filename, metadata)
        elif kind == "pdf":
            text = self._parse_pdf(content, filename, metadata)
        elif kind == "xlsx":
            text = self._parse_xlsx(content, filename, metadata)
        else:
            text = self._parse_text(content, filename)

        text = clean_content(text)
        logger.info(f"Parsed {filename} ({kind}): {len(text)} characters")

        return ParsedDocument(
            content=text,
            metadata=metadata,
            sections=extract_sections(text),
            html=page_html,
            filename=filename,
        )

    # =========================================================================
    # DOCX
    # =========================================================================

    def _parse_docx(self, content: bytes, filename: str, metadata: DocumentMetadata) -> Tuple[str, str]:
        from docx import Document
        from docx.table import Table
        from docx.text.paragraph import Paragraph

        try:
            doc = Document(io.BytesIO(content))
        except Exception as e:
            raise ParseFailure(filename, str(e)) from e

        text_parts: List[str] = []
        html_parts: List[str] = []

        # Body order, so tables stay between the paragraphs around them
        for child in doc.element.body.iterchildren():
            tag = child.tag.rsplit("}", 1)[-1]
            if tag == "p":
                paragraph = Paragraph(child, doc)
                line = paragraph.text.strip()
                if not line:
                    continue
                level = self._heading_level(paragraph)
                if level:
                    text_parts.append(f"{'#' * level} {line}")
                    html_parts.append(f"<h{level}>{html.escape(line)}</h{level}>")
                else:
                    text_parts.append(line)
                    html_parts.append(f"<p>{html.escape(line)}</p>")
            elif tag == "tbl":
                rows_text, rows_html = self._extract_table(Table(child, doc))
                if rows_text:
                    text_parts.append(rows_text)
                    html_parts.append(rows_html)

        properties = doc.core_properties
        metadata.title = properties.title or None
        metadata.author = properties.author or None
        metadata.created_date = properties.created
        metadata.modified_date = properties.modified

        return "\n".join(text_parts), "\n".join(html_parts)

    def _heading_level(self, paragraph) -> int:
        style = paragraph.style.name if paragraph.style is not None else ""
        if style in HEADING_STYLES:
            return HEADING_STYLES[style]
        if style.startswith("Heading"):
            suffix = style[len("Heading"):].strip()
            if suffix.isdigit():
                return min(int(suffix), 6)
        return 0

    def _extract_table(self, table) -> Tuple[str, str]:
        """Tab-joined rows for text, a plain <table> for HTML."""
        text_rows = []
        html_rows = []
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells]
            if any(cells):
                text_rows.append("\t".join(cells))
                html_rows.append("<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in cells) + "</tr>")
        if not text_rows:
            return "", ""
        return "\n".join(text_rows), "<table>" + "".join(html_rows) + "</table>"

    # =========================================================================
    # PDF
    # =========================================================================

    def _parse_pdf(self, content: bytes, filename: str, metadata: DocumentMetadata) -> str:
        outcome = {}

        def extract():
            try:
                outcome["result"] = self._extract_pdf(content)
            except Exception as e:
                outcome["error"] = e

        # Daemon so an abandoned extraction never blocks interpreter exit
        worker = threading.Thread(target=extract, name=f"pdf-parse-{filename}", daemon=True)
        worker.start()
        worker.join(self.config.parse_timeout_seconds)

        if worker.is_alive():
            logger.warning(f"PDF parsing timed out after {self.config.parse_timeout_seconds}s: {filename}")
            return self._pdf_fallback(filename, metadata)
        if "error" in outcome:
            logger.warning(f"PDF parsing failed for {filename}, using placeholder: {outcome['error']}")
            return self._pdf_fallback(filename, metadata)

        text, info = outcome["result"]

        metadata.title = info.get("title")
        metadata.author = info.get("author")
        metadata.created_date = info.get("created")
        metadata.modified_date = info.get("modified")
        return text

    def _extract_pdf(self, content: bytes):
        import pypdf

        reader = pypdf.PdfReader(io.BytesIO(content))
        pages = [page.extract_text() or "" for page in reader.pages]

        info = {}
        if reader.metadata is not None:
            info["title"] = reader.metadata.title
            info["author"] = reader.metadata.author
            info["created"] = self._safe_pdf_date(reader.metadata, "creation_date")
            info["modified"] = self._safe_pdf_date(reader.metadata, "modification_date")

        return "\n".join(pages), info

    def _safe_pdf_date(self, pdf_metadata, attribute: str) -> Optional[datetime]:
        try:
            return getattr(pdf_metadata, attribute)
        except ValueError:
            logger.debug(f"Invalid PDF {attribute}")
            return None

    def _pdf_fallback(self, filename: str, metadata: DocumentMetadata) -> str:
        metadata.title = re.sub(r"\.pdf$", "", filename, flags=re.IGNORECASE)
        metadata.parse_error = True
        return self.config.pdf_placeholder.format(filename=filename)

    # =========================================================================
    # XLSX and text
    # =========================================================================

    def _parse_xlsx(self, content: bytes, filename: str, metadata: DocumentMetadata) -> str:
        from openpyxl import load_workbook

        try:
            wb = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
        except Exception as e:
            raise ParseFailure(filename, str(e)) from e

        try:
            sheets = []
            for sheet in wb.worksheets:
                rows = []
                for row in sheet.iter_rows(values_only=True):
                    values = ["" if value is None else str(value) for value in row]
                    if any(values):
                        rows.append("\t".join(values))
                sheets.append("\n".join(rows))
            metadata.sheets = [sheet.title for sheet in wb.worksheets]
        finally:
            wb.close()

        return "\n\n".join(sheets)

    def _parse_text(self, content: bytes, filename: str) -> str:
        try:
            return content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseFailure(filename, f"not valid UTF-8 ({e.reason})") from e
