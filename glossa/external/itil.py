"""
ITIL V3 glossary of terms (English -> Japanese).

The bundled resource is a ten-term sample in the layout of the published
v3.1.24 Japanese glossary, not the full glossary.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterator, List

from bs4 import BeautifulSoup

from .base import ExternalGlossary

RESOURCE_DIR = Path(__file__).parent / "resources"


class Itil(ExternalGlossary):
    description = "ITIL V3 Glossary of Terms and Acronyms"
    source_url = "http://www.itil-officialsite.com/InternationalActivities/ITILGlossaries_2.aspx"
    source_language = "en"
    target_language = "ja"
    output_format = "csv"

    resource = RESOURCE_DIR / "ITILV3_Glossary_Japanese_v3.1.24.html"
    resource_encoding = "shift_jis"

    def convert_rows(self) -> Iterator[List[str]]:
        # Bundled copy; no network access.
        with open(self.resource, "rb") as f:
            soup = BeautifulSoup(f.read(), "lxml", from_encoding=self.resource_encoding)

        for tr in soup.select("table tr"):
            cells = tr.find_all("td")
            if not cells:
                continue
            yield [cell.get_text() for cell in cells[:3]]
