"""Tests for the free-text stages: segment, merge, resolve, collapse, join."""
from __future__ import annotations

from eword.config import Config
from eword.segment import collapse, join_plain, merge, resolve, ruled_words, segment, split_text
from eword.types import CharsetRun, RuledWord, Word


def test_segment_splits_on_classification_changes() -> None:
    assert segment("ab cé") == [
        CharsetRun("ascii", "ab"),
        CharsetRun(None, " "),
        CharsetRun("ascii", "c"),
        CharsetRun("latin-1", "é"),
    ]


def test_segment_empty_input() -> None:
    assert segment("") == []


def test_segment_concatenation_reproduces_input() -> None:
    text = "Grüße日本語Ωmega\U0001F600e\u0301"
    assert "".join(run.text for run in segment(text)) == text


def test_segment_never_splits_a_logical_character() -> None:
    runs = segment("ae\u0301")
    assert all(not run.text.startswith("\u0301") for run in runs)


def test_merge_stops_at_neutral_runs() -> None:
    words = merge(segment("ab cé"))
    assert words == [
        Word(frozenset({"ascii"}), "ab"),
        Word(None, " "),
        Word(frozenset({"ascii", "latin-1"}), "cé"),
    ]


def test_resolve_plain_and_encoded_words() -> None:
    assert resolve(Word(None, " "), "text") == RuledWord(" ", mode="text")
    assert resolve(Word(frozenset({"ascii"}), "ab")) == RuledWord("ab", charset="us-ascii")
    assert resolve(Word(frozenset({"ascii", "latin-1"}), "cé"), "phrase") == RuledWord(
        "cé", charset="iso-8859-1", scheme="Q", mode="phrase"
    )
    assert resolve(Word(frozenset({"japanese"}), "日本")).scheme == "B"


def test_resolve_unknown_charset_has_no_scheme() -> None:
    cfg = Config(charset_encodings={"us-ascii": None})
    rword = resolve(Word(frozenset({"latin-1"}), "é"), cfg=cfg)
    assert rword.charset == "iso-8859-1"
    assert rword.scheme is None
    assert not rword.encoded


def test_collapse_fuses_blank_between_same_charset_words() -> None:
    rwords = ruled_words("日本 語")
    assert len(rwords) == 3

    collapsed = collapse(rwords)

    assert len(collapsed) == 1
    assert collapsed[0].text == "日本 語"
    assert collapsed[0].charset == "iso-2022-jp"
    assert collapsed[0].scheme == "B"


def test_collapse_absorbs_blank_into_predecessor_when_charsets_differ() -> None:
    collapsed = collapse(ruled_words("é 日"))
    assert [r.text for r in collapsed] == ["é ", "日"]
    assert [r.charset for r in collapsed] == ["iso-8859-1", "iso-2022-jp"]


def test_collapse_keeps_blank_next_to_plain_word() -> None:
    collapsed = collapse(ruled_words("a é"))
    assert [r.text for r in collapsed] == ["a", " ", "é"]


def test_collapse_keeps_wider_whitespace() -> None:
    collapsed = collapse(ruled_words("é  é"))
    assert [r.text for r in collapsed] == ["é", "  ", "é"]


def test_collapse_does_not_merge_around_scheme_less_words() -> None:
    cfg = Config(charset_encodings={"us-ascii": None, "iso-8859-1": None})
    collapsed = collapse(ruled_words("é é", cfg=cfg))
    assert [r.text for r in collapsed] == ["é", " ", "é"]


def test_join_plain_fuses_consecutive_plain_words() -> None:
    joined = join_plain([
        RuledWord("a", charset="us-ascii"),
        RuledWord(" "),
        RuledWord("b", charset="us-ascii"),
        RuledWord("é", charset="iso-8859-1", scheme="Q"),
        RuledWord(" c"),
    ])
    assert joined == [
        RuledWord("a b", charset="us-ascii"),
        RuledWord("é", charset="iso-8859-1", scheme="Q"),
        RuledWord(" c"),
    ]


def test_split_text_is_identity_on_ascii() -> None:
    text = "Re: hello,  world\t(again)"
    rwords = split_text(text)
    assert len(rwords) == 1
    assert rwords[0].text == text
    assert not rwords[0].encoded


def test_split_text_empty() -> None:
    assert split_text("") == []
