"""Turning free text into the ruled words consumed by the Folder.

The stages run in this order, each a pure function over a sequence:

1. `segment` splits text into maximal runs sharing one repertoire tag, with
   blanks and tabs forming their own neutral runs.
2. `merge` glues consecutive non-neutral runs into one word carrying the union
   of their tags. Neutral runs always stay words of their own, so whitespace is
   never buried inside an encoded-word and remains available as a fold point.
3. `resolve` picks the MIME charset and transfer scheme for each word.
4. `collapse` absorbs a single blank sitting between two encoded words into
   its neighbours, since RFC 2047 decoders drop whitespace between adjacent
   encoded-words anyway.
5. `join_plain` fuses what is left of the plain words into single runs.

`split_text` chains all five and is the converter for unstructured text.
"""
from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from .charsets import charsets_to_mime_charset, classify, iter_chars
from .config import DEFAULT_CONFIG, Config
from .types import CharsetRun, Mode, RuledWord, Word

__all__ = [
    "segment",
    "merge",
    "resolve",
    "ruled_words",
    "collapse",
    "join_plain",
    "split_text",
]


def segment(text: str) -> List[CharsetRun]:
    """
    Splits ``text`` into maximal runs of logical characters sharing one
    classification.

    Concatenating the texts of the returned runs always reproduces ``text``.
    Empty input yields an empty list.
    """
    runs: List[CharsetRun] = []
    current: Optional[str] = None
    buf: List[str] = []
    for char in iter_chars(text):
        tag = classify(char)
        if buf and tag != current:
            runs.append(CharsetRun(current, "".join(buf)))
            buf = []
        current = tag
        buf.append(char)
    if buf:
        runs.append(CharsetRun(current, "".join(buf)))
    return runs


def merge(runs: Iterable[CharsetRun]) -> List[Word]:
    """
    Coalesces consecutive non-neutral runs into multi-charset words.

    Merging stops at the first neutral run, which becomes a plain word of its
    own; the next non-neutral run starts a new word.
    """
    words: List[Word] = []
    charsets: set = set()
    buf: List[str] = []
    for run in runs:
        if run.neutral:
            if buf:
                words.append(Word(frozenset(charsets), "".join(buf)))
                charsets, buf = set(), []
            words.append(Word(None, run.text))
            continue
        charsets.add(run.charset)
        buf.append(run.text)
    if buf:
        words.append(Word(frozenset(charsets), "".join(buf)))
    return words


def resolve(word: Word, mode: Optional[Mode] = None, cfg: Config = DEFAULT_CONFIG) -> RuledWord:
    """
    Decides the MIME charset and transfer scheme of ``word``.

    Plain words come back with no charset and no scheme. A word whose charset
    is unknown to ``cfg.charset_encodings``, or which could not be mapped onto
    any charset at all, gets ``scheme=None`` and is later emitted as-is by the
    Folder.
    """
    if word.plain:
        return RuledWord(word.text, mode=mode)
    charset = charsets_to_mime_charset(word.charsets, cfg)
    return RuledWord(word.text, charset=charset, scheme=cfg.scheme_for(charset), mode=mode)


def ruled_words(text: str, mode: Optional[Mode] = None, cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    """Segments, merges and resolves ``text`` without collapsing whitespace."""
    return [resolve(word, mode, cfg) for word in merge(segment(text))]


def _is_single_blank(rword: RuledWord) -> bool:
    return not rword.encoded and rword.text in (" ", "\t")


def collapse(rwords: Sequence[RuledWord]) -> List[RuledWord]:
    """
    Absorbs single blanks that separate two encoded words.

    When both neighbours of a one-character blank carry a transfer scheme and
    share a charset, all three become one ruled word. When the charsets differ
    only the blank is absorbed, into the preceding word, and the following word
    is examined afresh. A blank next to a plain or scheme-less word is kept.
    """
    out: List[RuledWord] = []
    idx = 0
    while idx < len(rwords):
        rword = rwords[idx]
        nxt = rwords[idx + 1] if idx + 1 < len(rwords) else None
        if (
            _is_single_blank(rword)
            and out
            and out[-1].encoded
            and nxt is not None
            and nxt.encoded
        ):
            prev = out[-1]
            if prev.charset == nxt.charset:
                out[-1] = prev.with_text(prev.text + rword.text + nxt.text)
                idx += 2
            else:
                out[-1] = prev.with_text(prev.text + rword.text)
                idx += 1
            continue
        out.append(rword)
        idx += 1
    return out


def join_plain(rwords: Iterable[RuledWord]) -> List[RuledWord]:
    """
    Fuses consecutive scheme-less ruled words into one plain ruled word.

    The fused word keeps the charset its resolved parts agree on, so 7-bit
    words separated by spaces stay ``us-ascii``.
    """
    out: List[RuledWord] = []
    for rword in rwords:
        if out and not rword.encoded and not out[-1].encoded:
            prev = out[-1]
            if prev.charset is None or rword.charset is None or prev.charset == rword.charset:
                charset = prev.charset or rword.charset
            else:
                charset = None
            out[-1] = RuledWord(prev.text + rword.text, charset=charset, mode=prev.mode)
            continue
        out.append(rword)
    return out


def split_text(text: str, mode: Optional[Mode] = "text", cfg: Config = DEFAULT_CONFIG) -> List[RuledWord]:
    """Runs the whole free-text pipeline: segment, merge, resolve, collapse, join."""
    return join_plain(collapse(ruled_words(text, mode, cfg)))
