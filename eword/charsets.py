"""Character classification and MIME charset selection.

A character is classified by the first repertoire, in priority order, whose
codec can represent it. A word whose characters span several repertoires is
mapped onto the narrowest MIME charset covering all of them, falling back to the
configured default (UTF-8) when none does.

"Character" here always means a logical character: a base code point together
with the combining marks, variation selectors and zero-width-joiner sequences
attached to it. `iter_chars` and `char_boundaries` are the only places that
decide where one logical character ends, so that no stage ever cuts one in half.
"""
from __future__ import annotations

import unicodedata
from functools import lru_cache
from typing import AbstractSet, Iterator, List, Optional, Tuple

from .config import DEFAULT_CONFIG, Config

__all__ = [
    "BLANKS",
    "ASCII",
    "is_ascii",
    "iter_chars",
    "char_boundaries",
    "classify",
    "charsets_to_mime_charset",
]

BLANKS = " \t"
ASCII = "ascii"
UNICODE = "unicode"

_ZWJ = "\u200d"
_MARK_CATEGORIES = frozenset({"Mn", "Mc", "Me"})

# (repertoire tag, probe codec), in priority order.
_REPERTOIRES: Tuple[Tuple[str, str], ...] = (
    ("latin-1", "latin-1"),
    ("latin-2", "iso8859-2"),
    ("cyrillic", "koi8-r"),
    ("greek", "iso8859-7"),
    ("hebrew", "iso8859-8"),
    ("turkish", "iso8859-9"),
    ("japanese", "iso2022_jp"),
    ("korean", "euc-kr"),
    ("chinese-gb", "gb2312"),
    ("chinese-big5", "big5"),
)

# (MIME charset, repertoire tags it can carry), narrowest first.
_MIME_CHARSETS: Tuple[Tuple[str, frozenset], ...] = (
    ("us-ascii", frozenset({ASCII})),
    ("iso-8859-1", frozenset({ASCII, "latin-1"})),
    ("iso-8859-2", frozenset({ASCII, "latin-2"})),
    ("koi8-r", frozenset({ASCII, "cyrillic"})),
    ("iso-8859-7", frozenset({ASCII, "greek"})),
    ("iso-8859-8", frozenset({ASCII, "hebrew"})),
    ("iso-8859-9", frozenset({ASCII, "turkish"})),
    ("iso-2022-jp", frozenset({ASCII, "japanese"})),
    ("euc-kr", frozenset({ASCII, "korean"})),
    ("gb2312", frozenset({ASCII, "chinese-gb"})),
    ("big5", frozenset({ASCII, "chinese-big5"})),
)


def is_ascii(text: str) -> bool:
    return all(ord(ch) < 0x80 for ch in text)


def _extends_cluster(ch: str, prev: str) -> bool:
    """True when ``ch`` belongs to the logical character that ``prev`` ends."""
    if prev == _ZWJ or ch == _ZWJ:
        return True
    cp = ord(ch)
    if 0xFE00 <= cp <= 0xFE0F or 0xE0100 <= cp <= 0xE01EF:
        return True
    if 0x1F3FB <= cp <= 0x1F3FF:
        return True
    return unicodedata.category(ch) in _MARK_CATEGORIES


def iter_chars(text: str) -> Iterator[str]:
    """Yields the logical characters of ``text`` in order."""
    start = 0
    for idx in range(1, len(text)):
        if not _extends_cluster(text[idx], text[idx - 1]):
            yield text[start:idx]
            start = idx
    if text:
        yield text[start:]


def char_boundaries(text: str) -> List[int]:
    """
    Returns every index at which ``text`` may be cut without splitting a
    logical character.

    The list is ascending, excludes ``0`` and always ends with ``len(text)``
    for non-empty text, so ``text[:b]`` for each entry is a non-empty, safe
    prefix.
    """
    bounds: List[int] = []
    pos = 0
    for char in iter_chars(text):
        pos += len(char)
        bounds.append(pos)
    return bounds


@lru_cache(maxsize=4096)
def classify(char: str) -> Optional[str]:
    """
    Returns the repertoire tag of a logical character.

    Args:
        char: One logical character, as yielded by `iter_chars`.

    Returns:
        ``None`` for a blank or tab (charset-neutral), ``"ascii"`` for 7-bit
        characters, the first repertoire in priority order able to represent
        the character, or ``"unicode"`` when none can.
    """
    if char in BLANKS:
        return None
    if is_ascii(char):
        return ASCII
    for tag, codec in _REPERTOIRES:
        try:
            char.encode(codec)
        except UnicodeEncodeError:
            continue
        return tag
    return UNICODE


def charsets_to_mime_charset(
    charsets: AbstractSet[str], cfg: Config = DEFAULT_CONFIG
) -> Optional[str]:
    """
    Maps a set of repertoire tags onto one MIME charset name.

    Returns the first MIME charset whose repertoire covers every tag in
    ``charsets``, or ``cfg.default_mime_charset`` (which may be ``None``) when
    none does.
    """
    for name, repertoire in _MIME_CHARSETS:
        if charsets <= repertoire:
            return name
    return cfg.default_mime_charset
