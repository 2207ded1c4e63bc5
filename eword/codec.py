"""Q and B transfer-encodings for RFC 2047 encoded-words.

An encoded-word looks like this::

    =?charset?scheme?encoded-text?=

where scheme is ``Q`` (a quoted-printable variant) or ``B`` (base64). The text
is first transcoded into the charset with the matching Python codec. Which
octets the Q scheme may leave unescaped depends on where the encoded-word sits:
free text, a comment, or a phrase (RFC 2047, section 5).

Every function here reports failure (an unknown codec or scheme, or text the
charset cannot represent) by returning ``None``; callers decide the fallback.
"""
from __future__ import annotations

import base64
from typing import Dict, FrozenSet, Optional

from .types import Mode

__all__ = [
    "MISC_LEN",
    "q_encode",
    "q_length",
    "b_encode",
    "b_length",
    "transcode",
    "encode_text",
    "encoded_length",
    "encoded_word",
    "encoded_word_length",
]

# "=?" + "?" + scheme + "?" + "?=" around the charset name and encoded text.
MISC_LEN = 7

_LETTERS_DIGITS = frozenset(
    b"ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789"
)
_PRINTABLE = frozenset(range(0x21, 0x7F))

_Q_LITERALS: Dict[str, FrozenSet[int]] = {
    "text": _PRINTABLE - frozenset(b"=?_"),
    "comment": _PRINTABLE - frozenset(b'=?_()"\\'),
    "phrase": _LETTERS_DIGITS | frozenset(b"!*+-/"),
}

_SPACE = 0x20


def _q_literals(mode: Optional[Mode]) -> FrozenSet[int]:
    return _Q_LITERALS.get(mode or "text", _Q_LITERALS["text"])


def q_encode(data: bytes, mode: Optional[Mode] = "text") -> str:
    """Encodes ``data`` with the Q scheme, escaping what ``mode`` requires."""
    literals = _q_literals(mode)
    out = []
    for byte in data:
        if byte == _SPACE:
            out.append("_")
        elif byte in literals:
            out.append(chr(byte))
        else:
            out.append(f"={byte:02X}")
    return "".join(out)


def q_length(data: bytes, mode: Optional[Mode] = "text") -> int:
    """Returns the length of `q_encode` output without building it."""
    literals = _q_literals(mode)
    return sum(1 if byte == _SPACE or byte in literals else 3 for byte in data)


def b_encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b_length(data: bytes) -> int:
    return 4 * ((len(data) + 2) // 3)


def transcode(charset: str, text: str) -> Optional[bytes]:
    """Returns ``text`` in ``charset``'s byte form, or ``None`` if that is impossible."""
    try:
        return text.encode(charset)
    except (UnicodeEncodeError, LookupError):
        return None


def encode_text(
    charset: str, scheme: Optional[str], text: str, mode: Optional[Mode] = "text"
) -> Optional[str]:
    """
    Produces the encoded-text of an encoded-word.

    Args:
        charset: The MIME charset to transcode ``text`` into.
        scheme: ``"Q"`` or ``"B"`` (case-insensitive).
        text: The text to encode.
        mode: The RFC 2047 context; only affects the Q scheme.

    Returns:
        The text that goes between the third and fourth ``?`` of the
        encoded-word, or ``None`` if the text cannot be encoded.
    """
    data = transcode(charset, text)
    if data is None or scheme is None:
        return None
    scheme = scheme.upper()
    if scheme == "B":
        return b_encode(data)
    if scheme == "Q":
        return q_encode(data, mode)
    return None


def encoded_length(
    charset: str, scheme: Optional[str], text: str, mode: Optional[Mode] = "text"
) -> Optional[int]:
    """Returns ``len(encode_text(...))`` without materializing the encoded text."""
    data = transcode(charset, text)
    if data is None or scheme is None:
        return None
    scheme = scheme.upper()
    if scheme == "B":
        return b_length(data)
    if scheme == "Q":
        return q_length(data, mode)
    return None


def encoded_word_length(
    charset: str, scheme: Optional[str], text: str, mode: Optional[Mode] = "text"
) -> Optional[int]:
    """Returns the column cost of the full encoded-word for ``text``, or ``None``."""
    length = encoded_length(charset, scheme, text, mode)
    if length is None:
        return None
    return MISC_LEN + len(charset) + length


def encoded_word(
    charset: str, scheme: Optional[str], text: str, mode: Optional[Mode] = "text"
) -> Optional[str]:
    """Renders ``text`` as a complete ``=?CHARSET?S?...?=`` token, or ``None``."""
    encoded = encode_text(charset, scheme, text, mode)
    if encoded is None:
        return None
    return f"=?{charset.upper()}?{scheme.upper()}?{encoded}?="
