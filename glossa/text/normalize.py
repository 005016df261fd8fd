"""
Text normalization utilities.

Provides the canonical cell form used for imported glossary rows.
"""

import re

# Regex patterns
_LINE_BREAKS = re.compile(r"\r\n|\r|\n")
_SPACES = re.compile(r"\s+")


def format_text(s: str) -> str:
    """
    Normalize one glossary cell.

    Applies:
    - Trim leading/trailing whitespace
    - Remove line breaks (CRLF, CR, LF)
    - Collapse remaining whitespace runs into a single space

    Args:
        s: Raw cell text

    Returns:
        Normalized text

    Example:
        >>> format_text("  Service  Level\\r\\nAgreement ")
        'Service LevelAgreement'
        >>> format_text("a \\t b")
        'a b'
    """
    s = _LINE_BREAKS.sub("", s.strip())
    return _SPACES.sub(" ", s)


__all__ = ["format_text"]
