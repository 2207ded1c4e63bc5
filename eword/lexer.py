"""Lexical analysis and light parsing of structured header fields.

`lex_structured_field` turns a field body into RFC 822 lexical tokens. The
parsers on top of it recognise just enough grammar for encoding decisions:
where an address list's mailboxes begin and end, which part of a mailbox is a
display name, and which spans of an In-Reply-To field are message identifiers.
Nothing is validated beyond that; the token texts are carried through verbatim.
"""
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple, Union

from .errors import HeaderSyntaxError
from .types import Address, Group, Mailbox, MsgId, Phrase, Token

__all__ = [
    "SPECIALS",
    "lex_structured_field",
    "strip_spaces",
    "parse_mailbox",
    "parse_addresses",
    "parse_in_reply_to",
]

SPECIALS = '()<>@,;:\\".[]'
_SPACES = " \t\r\n"


def _scan_delimited(text: str, start: int, close: str, nests: Optional[str] = None) -> Tuple[str, int]:
    """Scans from just after an opening delimiter to its matching ``close``.

    Returns the inner text (escapes kept) and the index just past ``close``.
    An unterminated construct runs to the end of ``text``.
    """
    depth = 0
    idx = start
    while idx < len(text):
        ch = text[idx]
        if ch == "\\":
            idx += 2
            continue
        if nests is not None and ch == nests:
            depth += 1
        elif ch == close:
            if depth == 0:
                return text[start:idx], idx + 1
            depth -= 1
        idx += 1
    return text[start:], len(text)


def lex_structured_field(text: str) -> List[Token]:
    """
    Splits a structured field body into lexical tokens.

    Args:
        text: The (unfolded) field body.

    Returns:
        A list of tokens whose kinds are ``spaces``, ``specials``,
        ``quoted-string`` and ``comment`` (inner text, delimiters removed) and
        ``word`` (atoms and whole ``[...]`` domain literals).
    """
    tokens: List[Token] = []
    idx = 0
    while idx < len(text):
        ch = text[idx]
        if ch in _SPACES:
            end = idx
            while end < len(text) and text[end] in _SPACES:
                end += 1
            tokens.append(Token("spaces", text[idx:end]))
            idx = end
        elif ch == '"':
            inner, idx = _scan_delimited(text, idx + 1, '"')
            tokens.append(Token("quoted-string", inner))
        elif ch == "(":
            inner, idx = _scan_delimited(text, idx + 1, ")", nests="(")
            tokens.append(Token("comment", inner))
        elif ch == "[":
            _, end = _scan_delimited(text, idx + 1, "]")
            tokens.append(Token("word", text[idx:end]))
            idx = end
        elif ch in SPECIALS:
            tokens.append(Token("specials", ch))
            idx += 1
        else:
            end = idx
            while end < len(text) and text[end] not in SPECIALS and text[end] not in _SPACES:
                end += 1
            tokens.append(Token("word", text[idx:end]))
            idx = end
    return tokens


def strip_spaces(tokens: Sequence[Token]) -> Tuple[Token, ...]:
    """Drops leading and trailing ``spaces`` tokens."""
    start, end = 0, len(tokens)
    while start < end and tokens[start].kind == "spaces":
        start += 1
    while end > start and tokens[end - 1].kind == "spaces":
        end -= 1
    return tuple(tokens[start:end])


def _is_special(token: Token, char: str) -> bool:
    return token.kind == "specials" and token.text == char


def _split_top_level(tokens: Sequence[Token], separator: str) -> List[List[Token]]:
    """Splits at ``separator`` specials that are not inside angle brackets."""
    parts: List[List[Token]] = [[]]
    in_angle = False
    for token in tokens:
        if _is_special(token, "<"):
            if in_angle:
                raise HeaderSyntaxError("nested '<' in address")
            in_angle = True
        elif _is_special(token, ">"):
            if not in_angle:
                raise HeaderSyntaxError("unbalanced '>' in address")
            in_angle = False
        elif not in_angle and _is_special(token, separator):
            parts.append([])
            continue
        parts[-1].append(token)
    if in_angle:
        raise HeaderSyntaxError("unterminated '<' in address")
    return parts


def _top_level_index(tokens: Sequence[Token], char: str) -> Optional[int]:
    """Index of the first ``char`` special outside angle brackets, if any."""
    in_angle = False
    for i, token in enumerate(tokens):
        if _is_special(token, "<"):
            in_angle = True
        elif _is_special(token, ">"):
            in_angle = False
        elif not in_angle and _is_special(token, char):
            return i
    return None


def _trailing_comment(tokens: Tuple[Token, ...]) -> Tuple[Tuple[Token, ...], Optional[str]]:
    if tokens and tokens[-1].kind == "comment":
        return strip_spaces(tokens[:-1]), tokens[-1].text
    return tokens, None


def parse_mailbox(tokens: Sequence[Token]) -> Mailbox:
    """
    Parses one mailbox: ``phrase <route>`` or a bare addr-spec, each optionally
    followed by a comment.

    Raises:
        HeaderSyntaxError: If the tokens are empty, contain a stray ``:``/``;``,
                           or carry text after the closing ``>`` other than a
                           comment.
    """
    body = strip_spaces(tokens)
    if not body:
        raise HeaderSyntaxError("empty mailbox")
    opening = next((i for i, t in enumerate(body) if _is_special(t, "<")), None)
    outside = body if opening is None else body[:opening]
    if any(_is_special(t, ":") or _is_special(t, ";") for t in outside):
        raise HeaderSyntaxError("unexpected ':' or ';' in mailbox")

    if opening is None:
        addr_spec, comment = _trailing_comment(body)
        if not addr_spec:
            raise HeaderSyntaxError("mailbox without an address")
        return Mailbox(addr_spec=addr_spec, comment=comment)

    closing = next((i for i in range(opening, len(body)) if _is_special(body[i], ">")), None)
    if closing is None:
        raise HeaderSyntaxError("unterminated '<' in mailbox")
    after, comment = _trailing_comment(strip_spaces(body[closing + 1:]))
    if after:
        raise HeaderSyntaxError("unexpected text after '>' in mailbox")
    return Mailbox(
        phrase=strip_spaces(body[:opening]),
        route=strip_spaces(body[opening + 1:closing]),
        comment=comment,
    )


def _parse_group(tokens: Sequence[Token], colon: int) -> Group:
    rest = list(tokens[colon + 1:])
    semicolons = [i for i, t in enumerate(rest) if _is_special(t, ";")]
    if not semicolons or strip_spaces(rest[semicolons[-1] + 1:]):
        raise HeaderSyntaxError("group is not terminated by ';'")
    members = rest[:semicolons[-1]]
    mailboxes = tuple(
        parse_mailbox(part) for part in _split_top_level(members, ",") if strip_spaces(part)
    )
    return Group(phrase=strip_spaces(tokens[:colon]), mailboxes=mailboxes)


def parse_addresses(tokens: Sequence[Token]) -> List[Address]:
    """
    Parses an address list into mailboxes and groups.

    Empty list elements (``a@b,,c@d``) are skipped.

    Raises:
        HeaderSyntaxError: If the list is malformed.
    """
    addresses: List[Address] = []
    pending: List[Token] = []
    in_angle = False
    in_group = False
    for token in list(tokens) + [Token("specials", ",")]:
        if _is_special(token, "<"):
            in_angle = True
        elif _is_special(token, ">"):
            in_angle = False
        elif not in_angle and _is_special(token, ":") and not in_group:
            in_group = True
        elif not in_angle and _is_special(token, ";"):
            in_group = False
        elif not in_angle and not in_group and _is_special(token, ","):
            if strip_spaces(pending):
                colon = _top_level_index(pending, ":")
                if colon is None:
                    addresses.append(parse_mailbox(pending))
                else:
                    addresses.append(_parse_group(pending, colon))
            pending = []
            continue
        pending.append(token)
    if in_angle or in_group:
        raise HeaderSyntaxError("unterminated address list")
    return addresses


def parse_in_reply_to(tokens: Sequence[Token]) -> List[Union[Phrase, MsgId]]:
    """
    Splits an In-Reply-To (or References) body into message ids and phrases.

    Every ``<...>`` span becomes a `MsgId`; each run of tokens between them,
    whitespace included, becomes a `Phrase`, so concatenating the items in
    order reproduces the field body. An unterminated ``<`` is kept in a phrase.
    """
    items: List[Union[Phrase, MsgId]] = []
    pending: List[Token] = []
    idx = 0
    while idx < len(tokens):
        token = tokens[idx]
        if _is_special(token, "<"):
            closing = next((j for j in range(idx + 1, len(tokens)) if _is_special(tokens[j], ">")), None)
            if closing is not None:
                if pending:
                    items.append(Phrase(tuple(pending)))
                    pending = []
                items.append(MsgId(tuple(tokens[idx + 1:closing])))
                idx = closing + 1
                continue
        pending.append(token)
        idx += 1
    if pending:
        items.append(Phrase(tuple(pending)))
    return items
