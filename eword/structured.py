"""Converters from structured header grammar to ruled-word sequences.

Structured fields cannot be encoded as free text: RFC 2047 only allows
encoded-words in place of a phrase word or inside a comment, never inside an
address, a quoted string or a message id. The converters below therefore decide
per grammatical element what may be encoded:

* phrase words and comment text go through the charset pipeline (in ``phrase``
  and ``comment`` mode respectively);
* a quoted string in a phrase is encoded, if at all, as one unit with its quotes;
* everything else in an address or message id is emitted verbatim, with specials
  glued to the neighbouring atoms so the Folder can only break where the source
  had whitespace.
"""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Union

from .charsets import classify, is_ascii, iter_chars
from .config import DEFAULT_CONFIG, Config
from .errors import HeaderSyntaxError
from .lexer import lex_structured_field, parse_addresses, parse_in_reply_to
from .segment import collapse, resolve, ruled_words, split_text
from .types import Address, Group, Mailbox, MsgId, Phrase, RuledWord, Token, Word

__all__ = [
    "phrase_to_rwords",
    "addr_seq_to_rwords",
    "route_addr_to_rwords",
    "mailbox_to_rwords",
    "address_to_rwords",
    "address_list_to_rwords",
    "msg_id_to_rwords",
    "in_reply_to_to_rwords",
    "convert_address_list",
    "convert_in_reply_to",
    "convert_structured",
    "convert_unstructured",
]

logger = logging.getLogger(__name__)

_OPEN = RuledWord.plain("(")
_CLOSE = RuledWord.plain(")")
_SPACE = RuledWord.plain(" ")


def _quoted_word(text: str, cfg: Config) -> RuledWord:
    """Resolves a whole quoted string, quotes included, as a single phrase word."""
    quoted = f'"{text}"'
    charsets = frozenset(tag for tag in map(classify, iter_chars(quoted)) if tag is not None)
    return resolve(Word(charsets, quoted), "phrase", cfg)


def _comment(text: str, cfg: Config) -> List[RuledWord]:
    return [_OPEN, *collapse(ruled_words(text, "comment", cfg)), _CLOSE]


def phrase_to_rwords(tokens: Iterable[Token], cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    """
    Converts the tokens of a phrase (a display name, say).

    Quoted strings become one word each, comments are wrapped in literal
    parentheses, and every other token is split into charset words in phrase
    mode. Blanks between encoded words are collapsed over the whole phrase.
    """
    dest: List[RuledWord] = []
    for token in tokens:
        if token.kind == "quoted-string":
            dest.append(_quoted_word(token.text, cfg))
        elif token.kind == "comment":
            dest.append(_OPEN)
            dest.extend(ruled_words(token.text, "comment", cfg))
            dest.append(_CLOSE)
        else:
            dest.extend(ruled_words(token.text, "phrase", cfg))
    return collapse(dest)


def addr_seq_to_rwords(tokens: Iterable[Token], cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    """
    Converts address-like token sequences (addr-specs, routes, message ids,
    generic structured bodies).

    Whitespace and comments start new ruled words; any other token is glued
    onto the preceding plain word, so no break opportunity appears where the
    source had none. Only comment text and atoms holding non-ASCII characters
    (which a malformed address list can leave behind) are ever encoded.
    """
    dest: List[RuledWord] = []
    prev_kind = None
    for token in tokens:
        if token.kind == "spaces":
            dest.append(RuledWord.plain(token.text))
        elif token.kind == "comment":
            dest.extend(_comment(token.text, cfg))
        elif token.kind == "quoted-string":
            dest.append(RuledWord.plain(f'"{token.text}"'))
        elif token.kind == "word" and not is_ascii(token.text):
            dest.extend(ruled_words(token.text, "phrase", cfg))
        elif dest and prev_kind not in ("spaces", "comment") and not dest[-1].encoded:
            dest[-1] = dest[-1].with_text(dest[-1].text + token.text)
        else:
            dest.append(RuledWord.plain(token.text))
        prev_kind = token.kind
    return dest


def route_addr_to_rwords(route: Sequence[Token], cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    return addr_seq_to_rwords(
        [Token("specials", "<"), *route, Token("specials", ">")], cfg
    )


def mailbox_to_rwords(mailbox: Mailbox, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    """Converts ``phrase <route>`` or a bare addr-spec, plus its trailing comment."""
    if mailbox.route is not None:
        dest = phrase_to_rwords(mailbox.phrase, cfg)
        if dest:
            dest.append(_SPACE)
        dest.extend(route_addr_to_rwords(mailbox.route, cfg))
    else:
        dest = addr_seq_to_rwords(mailbox.addr_spec or (), cfg)
    if mailbox.comment is not None:
        dest.append(_SPACE)
        dest.extend(_comment(mailbox.comment, cfg))
    return dest


def _join(parts: Iterable[List[RuledWord]]) -> List[RuledWord]:
    dest: List[RuledWord] = []
    for part in parts:
        if dest:
            dest.extend((RuledWord.plain(","), _SPACE))
        dest.extend(part)
    return dest


def address_to_rwords(address: Address, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    if isinstance(address, Group):
        dest = phrase_to_rwords(address.phrase, cfg)
        dest.append(RuledWord.plain(":"))
        if address.mailboxes:
            dest.append(_SPACE)
            dest.extend(_join(mailbox_to_rwords(m, cfg) for m in address.mailboxes))
        dest.append(RuledWord.plain(";"))
        return dest
    return mailbox_to_rwords(address, cfg)


def address_list_to_rwords(addresses: Iterable[Address], cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    """Joins the conversions of successive addresses with ``", "``."""
    return _join(address_to_rwords(address, cfg) for address in addresses)


def msg_id_to_rwords(msg_id: MsgId, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    return route_addr_to_rwords(msg_id.tokens, cfg)


def in_reply_to_to_rwords(
    items: Iterable[Union[Phrase, MsgId]], cfg: Config = DEFAULT_CONFIG
) -> List[RuledWord]:
    """Concatenates phrase and message-id conversions in source order."""
    dest: List[RuledWord] = []
    for item in items:
        if isinstance(item, MsgId):
            dest.extend(msg_id_to_rwords(item, cfg))
        else:
            dest.extend(phrase_to_rwords(item.tokens, cfg))
    return dest


# Field-body entry points, one per field kind.

def convert_address_list(body: str, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    tokens = lex_structured_field(body)
    try:
        addresses = parse_addresses(tokens)
    except HeaderSyntaxError as e:
        logger.debug("Malformed address list %r (%s); encoding as structured body", body, e)
        return addr_seq_to_rwords(tokens, cfg)
    return address_list_to_rwords(addresses, cfg)


def convert_in_reply_to(body: str, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    return in_reply_to_to_rwords(parse_in_reply_to(lex_structured_field(body)), cfg)


def convert_structured(body: str, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    return addr_seq_to_rwords(lex_structured_field(body), cfg)


def convert_unstructured(body: str, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    return split_text(body, "text", cfg)
