
# jobboard/core/pdf_parser.py
from io import BytesIO
from typing import Union, Optional
from pathlib import Path
from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from jobboard.core.errors import MalformedResponse


class PDFParser:
    """Pulls plain text out of a CV so it can be fed to the match analysis."""

    def __init__(self, max_chars: Optional[int] = 6000):
        self.max_chars = max_chars

    def extract_text(self, file: Union[Path, bytes]) -> str:
        try:
            if isinstance(file, Path):
                with open(file, "rb") as f:
                    return self._extract_all(PdfReader(f))
            elif isinstance(file, bytes):
                return self._extract_all(PdfReader(BytesIO(file)))
        except PdfReadError as e:
            raise MalformedResponse(f"Unreadable PDF: {e}") from e
        raise ValueError("Unsupported file type for PDFParser.")

    def _extract_all(self, reader: PdfReader) -> str:
        text = ""
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                text += page_text + "\n"
            if self.max_chars and len(text) >= self.max_chars:
                break
        text = text.strip()
        return text[: self.max_chars] if self.max_chars else text
