"""Data model shared by every stage of the encoding pipeline.

Each stage consumes a sequence of one of these records and produces a sequence
of the next, never reordering the underlying characters:

    str -> CharsetRun -> Word -> RuledWord -> (folded) str

The structured-field records (`Token`, `Mailbox`, `Group`, `MsgId`, `Phrase`)
describe header grammar and are turned into ruled words by
:mod:`eword.structured`.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import FrozenSet, Literal, Optional, Tuple, Union

__all__ = [
    "Scheme",
    "Mode",
    "FieldKind",
    "TokenKind",
    "CharsetRun",
    "Word",
    "RuledWord",
    "FoldResult",
    "Token",
    "Mailbox",
    "Group",
    "Address",
    "MsgId",
    "Phrase",
]

Scheme = Literal["Q", "B"]
Mode = Literal["text", "comment", "phrase"]
FieldKind = Literal["address-list", "in-reply-to", "structured", "unstructured", "verbatim"]
TokenKind = Literal["word", "quoted-string", "comment", "specials", "spaces"]


@dataclass(frozen=True)
class CharsetRun:
    """A maximal run of characters sharing one repertoire tag.

    Attributes:
        charset: The repertoire tag of every character in the run, or ``None``
                 for a neutral (blank/tab) run.
        text: The characters of the run.
    """
    charset: Optional[str]
    text: str

    @property
    def neutral(self) -> bool:
        return self.charset is None


@dataclass(frozen=True)
class Word:
    """A unit of text destined for one encoding decision.

    Attributes:
        charsets: The union of the repertoire tags of the runs merged into this
                  word, or ``None`` for a plain word (whitespace) that never
                  needs transfer-encoding.
        text: The word text; never empty.
    """
    charsets: Optional[FrozenSet[str]]
    text: str

    @property
    def plain(self) -> bool:
        return self.charsets is None


@dataclass(frozen=True)
class RuledWord:
    """
    A word together with the encoding decision made for it.

    This is the Folder's atomic unit of work. A ruled word is emitted as an
    encoded-word when it carries a transfer scheme, and verbatim otherwise.

    Attributes:
        text: The decoded text this ruled word stands for.
        charset: The MIME charset chosen for the word (``None`` for plain text
                 that was never resolved, ``"us-ascii"`` for 7-bit words).
        scheme: ``"Q"`` or ``"B"`` when the word must be encoded, ``None`` when
                it is emitted as-is.
        mode: The RFC 2047 context (``text``, ``comment`` or ``phrase``) that
              decides which characters the Q scheme must escape.
    """
    text: str
    charset: Optional[str] = None
    scheme: Optional[Scheme] = None
    mode: Optional[Mode] = None

    @property
    def encoded(self) -> bool:
        return self.scheme is not None

    def with_text(self, text: str) -> "RuledWord":
        return replace(self, text=text)

    @classmethod
    def plain(cls, text: str) -> "RuledWord":
        return cls(text=text)


@dataclass(frozen=True)
class FoldResult:
    """The folded rendering of a ruled-word sequence.

    Attributes:
        text: The rendered text, folds included.
        column: The column the next character would occupy on the last line.
    """
    text: str
    column: int


@dataclass(frozen=True)
class Token:
    """A lexical element of a structured header field.

    ``text`` holds the inner text for quoted strings and comments (without
    their delimiters, escapes kept as written) and the literal text for every
    other kind.
    """
    kind: TokenKind
    text: str


@dataclass(frozen=True)
class Mailbox:
    """
    A single mailbox of an address list.

    Exactly one of ``route`` and ``addr_spec`` is set: ``route`` holds the
    tokens between ``<`` and ``>`` of a ``phrase <route-addr>`` mailbox,
    ``addr_spec`` holds the tokens of a bare address.

    Attributes:
        phrase: Display-name tokens (empty for a bare address).
        route: Tokens inside the angle brackets, or ``None``.
        addr_spec: Tokens of a bare address, or ``None``.
        comment: Text of a trailing comment, without its parentheses.
    """
    phrase: Tuple[Token, ...] = ()
    route: Optional[Tuple[Token, ...]] = None
    addr_spec: Optional[Tuple[Token, ...]] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class Group:
    """A named group of mailboxes (``display-name: mailbox-list;``)."""
    phrase: Tuple[Token, ...]
    mailboxes: Tuple[Mailbox, ...] = ()


Address = Union[Mailbox, Group]


@dataclass(frozen=True)
class MsgId:
    """The tokens between the angle brackets of a message identifier."""
    tokens: Tuple[Token, ...]


@dataclass(frozen=True)
class Phrase:
    """A run of free tokens inside an In-Reply-To style field."""
    tokens: Tuple[Token, ...]
