"""
Interoperability with industry formats.

Supports:
- TMX (Translation Memory eXchange) - glossary import
"""

from .tmx import TmxGlossarySource, parse_tmx

__all__ = ["TmxGlossarySource", "parse_tmx"]
