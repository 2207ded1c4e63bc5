"""Length-aware rendering of ruled words into folded header text.

The Folder walks the ruled-word sequence left to right, greedily packing each
word onto the current line. Plain words are written verbatim and broken at their
own whitespace when they overflow; encoded words are rendered as RFC 2047
encoded-words and, when one does not fit, cut at the longest prefix that does,
with the remainder pushed back onto the work queue for the next line.

The work queue is a deque so that split remainders can be re-queued at the
front in constant time. A fold is a line break followed by exactly one space:
either a space already present in the text, or an inserted one.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Sequence

from .charsets import BLANKS, char_boundaries, is_ascii
from .codec import encoded_word, encoded_word_length
from .config import DEFAULT_CONFIG, Config
from .errors import UnencodableCharsetError
from .types import FoldResult, RuledWord

__all__ = ["Folder", "fold"]

logger = logging.getLogger(__name__)


class Folder:
    """Stateful orchestrator for folding one ruled-word sequence.

    Attributes
    ----------
    queue:
        Ruled words still waiting to be placed. Split remainders and implicit
        separators are pushed onto its front.
    column:
        Number of characters already on the current output line.
    width:
        The line budget, ``cfg.max_line_length``.
    out:
        Rendered pieces, joined once the queue is empty.
    after_encoded:
        Whether the output currently ends with an encoded-word. Two
        encoded-words must never be written back to back, so the next encoded
        word then receives a separating space first.
    """

    def __init__(self, rwords: Iterable[RuledWord], column: int = 0, cfg: Config = DEFAULT_CONFIG):
        self.cfg = cfg
        self.width = cfg.max_line_length
        self.column = column
        self.queue: Deque[RuledWord] = deque(self._admit(rword) for rword in rwords)
        self.out: List[str] = []
        self.after_encoded = False

    # ------------------------------------------------------------------ helpers

    def _admit(self, rword: RuledWord) -> RuledWord:
        """Demotes words no scheme can carry to plain text, applying the strictness policy."""
        if rword.encoded:
            if self._cost(rword, rword.text) is not None:
                return rword
            rword = RuledWord(rword.text, charset=rword.charset, mode=rword.mode)
        if not is_ascii(rword.text):
            if self.cfg.strict:
                raise UnencodableCharsetError(rword.charset, rword.text)
            logger.warning(
                "No transfer encoding for charset %r; emitting %r unencoded", rword.charset, rword.text
            )
        return rword

    @property
    def at_line_start(self) -> bool:
        return self.column <= 1

    def _fits(self, width: int) -> bool:
        return self.column + width <= self.width

    def _cost(self, rword: RuledWord, text: str) -> Optional[int]:
        return encoded_word_length(rword.charset or "", rword.scheme, text, rword.mode)

    def _min_cost(self, rword: RuledWord) -> int:
        """Column cost of the smallest encoded-word ``rword`` can be cut down to."""
        bounds = char_boundaries(rword.text)
        cost = self._cost(rword, rword.text[: bounds[0]]) if bounds else None
        return cost or 0

    def _emit_plain(self, text: str) -> None:
        self.out.append(text)
        self.column += len(text)
        self.after_encoded = False

    def _emit_encoded(self, rword: RuledWord, text: str) -> None:
        token = encoded_word(rword.charset or "", rword.scheme, text, rword.mode)
        self.out.append(token)
        self.column += len(token)
        self.after_encoded = True

    def _fold(self) -> None:
        self.out.append("\n ")
        self.column = 1
        self.after_encoded = False

    def _break_before(self, text: str) -> str:
        """Starts a new line for ``text`` and returns what is left of it to place.

        The new line always begins with exactly one space. Of a leading blank
        run, all but the last blank stay behind on the current line when they
        fit there and are dropped otherwise. A last blank that is a space is
        reused as the fold; a tab is replaced by the inserted one.
        """
        lead = len(text) - len(text.lstrip(BLANKS))
        if lead > 1:
            extra = text[: lead - 1]
            if self._fits(len(extra)):
                self._emit_plain(extra)
            text = text[lead - 1 :]
        if text.startswith(" "):
            self.out.append("\n")
            self.column = 0
            self.after_encoded = False
            return text
        self._fold()
        return text[1:] if text.startswith("\t") else text

    # ---------------------------------------------------------------- plain text

    @staticmethod
    def _tail_start(text: str) -> int:
        """Index of the trailing blanks (and optional ``"("``) that must share a
        line with a following encoded word. ``len(text)`` means there is none."""
        end = len(text) - 1 if text.endswith("(") else len(text)
        start = end
        while start > 0 and text[start - 1] in BLANKS:
            start -= 1
        return start

    def _blank_split(self, text: str) -> Optional[int]:
        """Rightmost blank of ``text`` the current line can reach, keeping a
        non-blank prefix before it. Within a reachable blank run this is the
        run's last blank, so earlier blanks trail on the current line."""
        limit = min(len(text) - 1, self.width - self.column)
        for idx in range(limit, 0, -1):
            if text[idx] in BLANKS and text[:idx].strip(BLANKS):
                return idx
        return None

    @staticmethod
    def _atom_end(text: str) -> int:
        """End of the first blank-delimited atom of ``text``, leading blanks included."""
        idx = 0
        while idx < len(text) and text[idx] in BLANKS:
            idx += 1
        while idx < len(text) and text[idx] not in BLANKS:
            idx += 1
        return idx

    def _put_plain(self, rword: RuledWord) -> None:
        text = rword.text
        nxt = self.queue[0] if self.queue else None

        if nxt is not None and nxt.encoded:
            tail = self._tail_start(text)
            if tail < len(text) and not self._fits(len(text) + self._min_cost(nxt)):
                if tail > 0:
                    self.queue.appendleft(rword.with_text(text[tail:]))
                    self.queue.appendleft(rword.with_text(text[:tail]))
                    return
                if not self.at_line_start:
                    text = self._break_before(text)
                if text:
                    self._emit_plain(text)
                return

        if self._fits(len(text)):
            self._emit_plain(text)
            return

        if text[0] in BLANKS and not self.at_line_start:
            self.queue.appendleft(rword.with_text(self._break_before(text)))
            return

        cut = self._blank_split(text)
        if cut is not None:
            self._emit_plain(text[:cut])
            self.queue.appendleft(rword.with_text(text[cut:]))
            return

        if self.at_line_start or text.startswith(")"):
            end = self._atom_end(text)
            if not self._fits(end):
                logger.warning("Unbreakable text %r overflows the %d-column line", text[:end], self.width)
            self._emit_plain(text[:end])
            if end < len(text):
                self.queue.appendleft(rword.with_text(text[end:]))
            return

        self._fold()
        self.queue.appendleft(rword)

    # -------------------------------------------------------------- encoded text

    def _longest_prefix(self, rword: RuledWord) -> Optional[int]:
        """Binary-searches the longest character-safe prefix whose encoded-word
        fits on the current line."""
        bounds = char_boundaries(rword.text)[:-1]
        costs: Dict[int, Optional[int]] = {}
        best = None
        lo, hi = 0, len(bounds)
        while lo < hi:
            mid = (lo + hi) // 2
            end = bounds[mid]
            if end not in costs:
                costs[end] = self._cost(rword, rword.text[:end])
            cost = costs[end]
            if cost is not None and self._fits(cost):
                best = end
                lo = mid + 1
            else:
                hi = mid
        return best

    def _put_encoded(self, rword: RuledWord) -> None:
        text = rword.text
        cost = self._cost(rword, text)
        if cost is not None and self._fits(cost):
            self._emit_encoded(rword, text)
            return

        cut = self._longest_prefix(rword)
        if cut is None:
            if not self.at_line_start:
                self._fold()
                self.queue.appendleft(rword)
                return
            bounds = char_boundaries(text)
            cut = bounds[0]
            logger.warning(
                "Encoded-word for %r overflows the %d-column line", text[:cut], self.width
            )

        self._emit_encoded(rword, text[:cut])
        if cut < len(text):
            logger.debug("Split %s encoded-word at %d of %d characters", rword.charset, cut, len(text))
            self._fold()
            self.queue.appendleft(rword.with_text(text[cut:]))

    # ---------------------------------------------------------------------- run

    def run(self) -> FoldResult:
        """
        Folds the queued ruled words.

        Returns:
            A `FoldResult` holding the rendered text and the column the next
            character would occupy, so callers can keep composing on the same
            line.
        """
        while self.queue:
            rword = self.queue.popleft()
            if not rword.text:
                continue
            if rword.encoded:
                if self.after_encoded:
                    self.queue.appendleft(rword)
                    self.queue.appendleft(RuledWord.plain(" "))
                    continue
                self._put_encoded(rword)
            else:
                self._put_plain(rword)
        return FoldResult("".join(self.out), self.column)


def fold(rwords: Sequence[RuledWord], column: int = 0, cfg: Config = DEFAULT_CONFIG) -> FoldResult:
    """Folds ``rwords`` starting at ``column``; see `Folder`."""
    if not rwords:
        return FoldResult("", column)
    return Folder(rwords, column, cfg).run()
