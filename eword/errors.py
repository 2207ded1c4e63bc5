"""Exceptions raised by the encoding pipeline."""
from __future__ import annotations

from typing import Optional

__all__ = ["EncodingError", "UnencodableCharsetError", "HeaderSyntaxError"]


class EncodingError(ValueError):
    """Base class for every error raised while encoding a header."""


class UnencodableCharsetError(EncodingError):
    """
    Raised when text must leave the 7-bit repertoire but no transfer scheme can
    carry it.

    Only strict configurations raise this error; lenient ones emit the raw text
    and log a warning instead.

    Attributes:
        charset: The MIME charset chosen for the text, if any.
        text: The text that could not be encoded.
    """

    def __init__(self, charset: Optional[str], text: str):
        self.charset = charset
        self.text = text
        super().__init__(f"No transfer encoding available for charset {charset!r}: {text!r}")


class HeaderSyntaxError(EncodingError):
    """Raised by the structured-field parsers when a field body is malformed."""
