"""
TMX (Translation Memory eXchange) import.

Reads TMX 1.4b translation units and materializes the pairs of one language
pair as a csv glossary source.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Tuple
from xml.etree import ElementTree as ET

import httpx

from glossa.core.glossary import Glossary, write_entries
from glossa.errors import GlossaryNotFound
from glossa.text.normalize import format_text

logger = logging.getLogger(__name__)

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


# "{*}tag" matches the tag in any namespace and in none.
def _find(element: ET.Element, tag: str) -> Optional[ET.Element]:
    return element.find(f"{{*}}{tag}")


def _find_all(element: ET.Element, tag: str) -> List[ET.Element]:
    return element.findall(f"{{*}}{tag}")


def _lang_matches(lang: str, wanted: str) -> bool:
    lang = lang.lower().replace("_", "-")
    wanted = wanted.lower().replace("_", "-")
    return lang == wanted or lang.startswith(f"{wanted}-")


def parse_tmx(content: bytes, source_language: str, target_language: str) -> List[Tuple[str, str]]:
    """
    Extract ``(source, target)`` segment pairs from TMX content.

    A unit contributes a pair only when it has a non-empty segment for both
    languages. Language tags match on the primary subtag, so ``en`` accepts
    ``en-US``.

    Raises:
        ValueError: If the document has no <body>
    """
    root = ET.fromstring(content)

    body = _find(root, "body")
    if body is None:
        raise ValueError("No <body> element found in TMX file")

    pairs = []
    for tu in _find_all(body, "tu"):
        src_text, tgt_text = None, None

        for tuv in _find_all(tu, "tuv"):
            lang = tuv.attrib.get(XML_LANG) or tuv.attrib.get("lang") or ""
            seg = _find(tuv, "seg")
            if seg is None:
                continue

            text = format_text("".join(seg.itertext()))
            if not text:
                continue

            if _lang_matches(lang, source_language):
                src_text = text
            elif _lang_matches(lang, target_language):
                tgt_text = text

        if src_text and tgt_text:
            pairs.append((src_text, tgt_text))

    return pairs


def fetch(url: str, timeout: float = 30.0) -> bytes:
    """Read TMX content from an http(s) URL or a local path."""
    if url.startswith(("http://", "https://")):
        response = httpx.get(url, timeout=timeout, follow_redirects=True)
        response.raise_for_status()
        return response.content
    return Path(url).expanduser().read_bytes()


class TmxGlossarySource:
    """
    Glossary source adapter for TMX files.

    Example:
        >>> repo.import_tmx(
        ...     TmxGlossarySource(),
        ...     Glossary("ui", "en", "ja"),
        ...     "https://example.com/ui.tmx",
        ... )
    """

    output_format = "csv"

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def materialize(self, dest_dir: Path, glossary: Glossary, url: str) -> Path:
        """
        Write the pairs of ``glossary``'s languages found at ``url``.

        Returns:
            Path of the written glossary file

        Raises:
            GlossaryNotFound: If the TMX has no unit for the language pair
        """
        pairs = parse_tmx(
            fetch(url, self.timeout),
            glossary.source_language,
            glossary.target_language,
        )
        if not pairs:
            raise GlossaryNotFound(f"No {glossary} translation units in {url}")

        path = Path(dest_dir) / glossary.name / glossary.file_name(self.output_format)
        write_entries(path, [(src, tgt, "") for src, tgt in pairs])
        logger.info(f"Imported {len(pairs)} translation pairs from TMX ({glossary})")
        return path


__all__ = ["TmxGlossarySource", "parse_tmx", "fetch"]
