"""
Text casing — derive re-cased parameter values from names.

Words are split on any non-alphanumeric run and on lower→Upper and
ACRONYM→Word boundaries, so ``"MainPage"``, ``"main-page"`` and
``"main page"`` all split to ``["main", "page"]``.
"""

from __future__ import annotations

import re

from templatestudio.core.models.template import TextCasingType

_LOWER_UPPER = re.compile(r"([a-z0-9])([A-Z])")
_ACRONYM_WORD = re.compile(r"([A-Z]+)([A-Z][a-z])")
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")


def split_words(value: str) -> list[str]:
    """Split an identifier-ish string into its words."""
    spaced = _ACRONYM_WORD.sub(r"\1 \2", _LOWER_UPPER.sub(r"\1 \2", value))
    return [w for w in _SEPARATORS.split(spaced) if w]


def _capitalize(word: str) -> str:
    return word[:1].upper() + word[1:]


def apply_casing(casing: TextCasingType, value: str) -> str:
    """Re-case *value* according to *casing*."""
    if casing is TextCasingType.LOWER:
        return value.lower()
    if casing is TextCasingType.UPPER:
        return value.upper()

    words = split_words(value)
    if casing is TextCasingType.KEBAB:
        return "-".join(w.lower() for w in words)
    if casing is TextCasingType.SNAKE:
        return "_".join(w.lower() for w in words)
    if casing is TextCasingType.PASCAL:
        return "".join(_capitalize(w) for w in words)
    if casing is TextCasingType.CAMEL:
        if not words:
            return ""
        return words[0].lower() + "".join(_capitalize(w) for w in words[1:])
    if casing is TextCasingType.TITLE:
        return " ".join(_capitalize(w) for w in words)
    raise ValueError(f"Unknown casing: {casing}")


def safe_identifier(value: str) -> str:
    """Make *value* usable as a code identifier (namespaces, class names).

    Every non-word character becomes ``_``; a leading digit gets a
    ``_`` prefix.
    """
    safe = re.sub(r"\W", "_", value)
    if safe[:1].isdigit():
        safe = f"_{safe}"
    return safe
