"""
ComplyDocs Unit Tests: Document Parsing
=======================================

Tests:
- Section extraction (numbered, markdown, heading lines)
- Control metadata extraction
- DOCX / XLSX / text parsing and error handling
- PDF placeholder fallback on failure and timeout
"""

import pytest
import sys
import os
import io
import time
import threading

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from core.config import ParsingConfig
from core.exceptions import ParseFailure, UnsupportedFileType
from parsing.document_parser import DocumentParser, extract_metadata, extract_sections

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


POLICY_TEXT = """QUALITY POLICY
Version: 2.1
effective date: 2024-03-01
approved by: J. Smith
5.2 Policy
Top management shall establish a quality policy.
It is communicated to all staff.
5.2.1 Establishing the quality policy
The policy is appropriate to the purpose of the organization.
## Review
The policy is reviewed annually."""


@pytest.fixture
def parser():
    return DocumentParser(ParsingConfig())


@pytest.mark.unit
class TestExtractSections:
    """Tests for extract_sections"""

    def test_section_titles_and_levels(self):
        sections = extract_sections(POLICY_TEXT)
        assert [(s.title, s.level) for s in sections] == [
            ("QUALITY POLICY", 1),
            ("5.2 Policy", 2),
            ("5.2.1 Establishing the quality policy", 3),
            ("Review", 1),
        ]

    def test_section_content(self):
        sections = extract_sections(POLICY_TEXT)
        assert sections[1].content == "Top management shall establish a quality policy.\nIt is communicated to all staff."

    def test_offsets(self):
        sections = extract_sections(POLICY_TEXT)
        assert sections[0].start_index == 0
        assert sections[1].start_index == POLICY_TEXT.index("5.2 Policy")
        assert sections[0].end_index == sections[1].start_index - 1
        assert sections[-1].end_index == len(POLICY_TEXT)

    def test_markdown_heading_with_number(self):
        sections = extract_sections("### 7.5 Documented information\nRecords are retained.")
        assert sections[0].title == "7.5 Documented information"
        assert sections[0].level == 2

    def test_text_before_first_heading_is_dropped(self):
        sections = extract_sections("just some words.\n4 Context\nThe organization determines issues.")
        assert len(sections) == 1
        assert sections[0].title == "4 Context"

    def test_long_capitalized_line_is_content(self):
        long_line = "Top management " + "x" * 100
        sections = extract_sections(f"4 Context\n{long_line}")
        assert len(sections) == 1
        assert sections[0].content == long_line


@pytest.mark.unit
class TestExtractMetadata:
    """Tests for extract_metadata"""

    def test_control_fields(self, parser):
        parsed = parser.parse_document(POLICY_TEXT.encode("utf-8"), "text/plain", "policy.txt")
        metadata = extract_metadata(parsed)

        assert metadata.version == "2.1"
        assert metadata.effective_date.year == 2024
        assert metadata.approver == "J. Smith"

    def test_unparseable_date_is_unset(self, parser):
        parsed = parser.parse_document(b"HEADER\nReview Date: soon.", "text/plain", "x.txt")
        assert extract_metadata(parsed).review_date is None


@pytest.mark.unit
class TestDocumentParser:
    """Tests for format-specific parsing"""

    def test_unsupported_mime_type(self, parser):
        with pytest.raises(UnsupportedFileType):
            parser.parse_document(b"\x89PNG", "image/png", "logo.png")

    def test_text(self, parser):
        parsed = parser.parse_document(POLICY_TEXT.encode("utf-8"), "text/plain", "policy.txt")
        assert parsed.metadata.file_type == "text/plain"
        assert len(parsed.sections) == 4
        assert parsed.html is None

    def test_text_strips_control_characters(self, parser):
        parsed = parser.parse_document(b"\xef\xbb\xbfPOLICY\x00\nBody text.", "text/plain", "x.txt")
        assert parsed.content == "POLICY\nBody text."

    def test_invalid_utf8_raises(self, parser):
        with pytest.raises(ParseFailure):
            parser.parse_document(b"\xff\xfe\xfa", "text/plain", "broken.txt")

    def test_docx(self, parser):
        import docx

        document = docx.Document()
        document.core_properties.title = "Quality Policy"
        document.add_heading("5.2 Policy", level=1)
        document.add_paragraph("Top management shall establish a quality policy.")
        table = document.add_table(rows=1, cols=2)
        table.rows[0].cells[0].text = "Owner"
        table.rows[0].cells[1].text = "QA Lead"
        buffer = io.BytesIO()
        document.save(buffer)

        parsed = parser.parse_document(buffer.getvalue(), DOCX_MIME, "policy.docx")

        assert parsed.metadata.title == "Quality Policy"
        assert parsed.sections[0].title == "5.2 Policy"
        assert "<h1>5.2 Policy</h1>" in parsed.html
        assert "Owner\tQA Lead" in parsed.content

    def test_corrupt_docx_raises(self, parser):
        with pytest.raises(ParseFailure):
            parser.parse_document(b"not a zip", DOCX_MIME, "broken.docx")

    def test_xlsx(self, parser):
        from openpyxl import Workbook

        workbook = Workbook()
        sheet = workbook.active
        sheet.title = "Risks"
        sheet.append(["Risk", "Owner"])
        sheet.append(["Supplier failure", "Ops"])
        buffer = io.BytesIO()
        workbook.save(buffer)

        parsed = parser.parse_document(buffer.getvalue(), XLSX_MIME, "risk-register.xlsx")

        assert parsed.metadata.sheets == ["Risks"]
        assert "Supplier failure\tOps" in parsed.content

    def test_corrupt_xlsx_raises(self, parser):
        with pytest.raises(ParseFailure):
            parser.parse_document(b"not a zip", XLSX_MIME, "broken.xlsx")

    def test_corrupt_pdf_falls_back_to_placeholder(self, parser):
        parsed = parser.parse_document(b"not a pdf", "application/pdf", "Scope.pdf")

        assert parsed.metadata.parse_error is True
        assert parsed.metadata.title == "Scope"
        assert "Scope.pdf" in parsed.content

    def test_pdf_timeout_falls_back_to_placeholder(self, monkeypatch):
        parser = DocumentParser(ParsingConfig(parse_timeout_seconds=0.1))

        def slow_extract(content):
            time.sleep(1.0)
            return "never", {}

        monkeypatch.setattr(parser, "_extract_pdf", slow_extract)
        parsed = parser.parse_document(b"%PDF-1.4", "application/pdf", "Slow.pdf")

        assert parsed.metadata.parse_error is True
        assert parsed.content.startswith("[PDF Document: Slow.pdf]")

    def test_abandoned_pdf_worker_is_daemon(self, monkeypatch):
        parser = DocumentParser(ParsingConfig(parse_timeout_seconds=0.1))
        release = threading.Event()

        def hung_extract(content):
            release.wait(5.0)
            return "never", {}

        monkeypatch.setattr(parser, "_extract_pdf", hung_extract)
        try:
            parsed = parser.parse_document(b"%PDF-1.4", "application/pdf", "Hung.pdf")
            workers = [t for t in threading.enumerate() if t.name == "pdf-parse-Hung.pdf"]
        finally:
            release.set()

        assert parsed.metadata.parse_error is True
        assert workers
        assert all(t.daemon for t in workers)
