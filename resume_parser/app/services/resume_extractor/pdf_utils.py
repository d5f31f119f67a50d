"""
PDF utilities for resume extraction - text extraction from uploaded bytes.
"""
import io

import pdfplumber


def extract_text_from_pdf(data: bytes) -> str:
    """Extract raw text from in-memory PDF bytes using pdfplumber. Raises on corrupt input."""
    text_parts = []
    with pdfplumber.open(io.BytesIO(data)) as pdf:
        for page in pdf.pages:
            page_text = page.extract_text()
            if page_text:
                text_parts.append(page_text)
    return "\n".join(text_parts)
