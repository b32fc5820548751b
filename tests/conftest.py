from __future__ import annotations

import pytest
from docx import Document

from docgen.body import DocumentBody


@pytest.fixture
def body() -> DocumentBody:
    return DocumentBody(Document())


@pytest.fixture
def template_body() -> DocumentBody:
    doc = Document()
    doc.add_paragraph("Intro")
    doc.add_paragraph("{{summary}}")
    doc.add_paragraph("Outro")
    return DocumentBody(doc)
