"""Top-level entry points: encoding one header field, or a whole header block.

A field is split into its name and body, the body is unfolded, and the
field-kind table of the active `Config` selects the converter that turns the
body into ruled words. The Folder then renders those words starting right after
the ``"Name: "`` prefix, so the first physical line respects the column budget
as well.
"""
from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Optional

from .charsets import is_ascii
from .config import DEFAULT_CONFIG, Config
from .folder import fold
from .segment import join_plain, split_text
from .structured import (
    convert_address_list,
    convert_in_reply_to,
    convert_structured,
    convert_unstructured,
)
from .types import FieldKind, RuledWord

__all__ = [
    "unfold",
    "start_column",
    "encode_field_body",
    "encode_field",
    "split_fields",
    "encode_header",
]

logger = logging.getLogger(__name__)

# std11-field-head: printable ASCII except ":" and space, followed by ":".
_FIELD_HEAD = re.compile(r"^([!-9;-~]+):")
_CONTINUATION = re.compile(r"\r?\n(?=[ \t])")
_LINE_BREAK = re.compile(r"\r?\n")

_CONVERTERS: Dict[FieldKind, Callable[[str, Config], List[RuledWord]]] = {
    "address-list": convert_address_list,
    "in-reply-to": convert_in_reply_to,
    "structured": convert_structured,
    "unstructured": convert_unstructured,
}


def unfold(text: str) -> str:
    """Removes folds (a line break followed by whitespace), keeping the whitespace.

    Any line break left over, which a well-formed field never contains, is
    replaced with a single space.
    """
    return _LINE_BREAK.sub(" ", _CONTINUATION.sub("", text))


def start_column(field_name: str) -> int:
    """Column at which a field body starts: after ``"Name: "``."""
    return len(field_name) + 2


def encode_field_body(
    body: str,
    field_name: str,
    column: Optional[int] = None,
    cfg: Config = DEFAULT_CONFIG,
) -> str:
    """
    Encodes and folds the body of the field ``field_name``.

    Args:
        body: The raw field body, possibly folded.
        field_name: The field name; selects the conversion policy.
        column: The column the body starts at. Defaults to `start_column`.
        cfg: The configuration to use.

    Returns:
        The folded body, without the ``"Name: "`` prefix. Verbatim fields
        come back unfolded but otherwise untouched.

    Raises:
        UnencodableCharsetError: In strict mode, if part of the body has no
                                 transfer encoding.
    """
    body = unfold(body).lstrip(" \t")
    kind = cfg.field_kind(field_name)
    if kind == "verbatim" or not body:
        return body
    if column is None:
        column = start_column(field_name)
    logger.debug("Encoding %s field %r from column %d", kind, field_name, column)
    rwords = join_plain(_CONVERTERS[kind](body, cfg))
    return fold(rwords, column, cfg).text


def encode_field(raw: str, cfg: Config = DEFAULT_CONFIG) -> str:
    """
    Encodes a complete ``"Name: body"`` field.

    Text that does not start with a syntactically valid field name is encoded
    as unstructured text from column 0.
    """
    match = _FIELD_HEAD.match(raw)
    if match is None:
        logger.debug("No field name in %r; encoding as unstructured text", raw[:40])
        return fold(split_text(unfold(raw), "text", cfg), 0, cfg).text
    name = match.group(1)
    body = encode_field_body(raw[match.end():], name, cfg=cfg)
    return f"{name}: {body}"


def split_fields(text: str) -> List[str]:
    """
    Splits an RFC 822 header block into raw fields.

    Continuation lines stay attached to their field (still folded). The block
    ends at the first empty line; anything after it is ignored.
    """
    fields: List[str] = []
    for line in text.splitlines():
        if not line.strip():
            break
        if line[0] in " \t" and fields:
            fields[-1] += "\n" + line
        else:
            fields.append(line)
    return fields


def encode_header(text: str, cfg: Config = DEFAULT_CONFIG) -> str:
    """
    Encodes every field of a header block that needs it.

    Fields made only of 7-bit characters are passed through untouched, folds
    included. The result ends with a newline when ``text`` does.
    """
    out = []
    for raw in split_fields(text):
        out.append(raw if is_ascii(raw) else encode_field(raw, cfg))
    result = "\n".join(out)
    if out and text.endswith("\n"):
        result += "\n"
    return result
