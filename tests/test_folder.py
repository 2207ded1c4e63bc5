"""Tests for the line folder."""
from __future__ import annotations

import logging

import pytest

from eword.config import DEFAULT_CONFIG, Config
from eword.errors import UnencodableCharsetError
from eword.folder import Folder, fold
from eword.segment import split_text
from eword.types import FoldResult, RuledWord
from eword.validation import validate

LATIN = dict(charset="iso-8859-1", scheme="Q", mode="text")


def _lines(text: str):
    return text.split("\n")


def test_fold_empty_sequence_keeps_column() -> None:
    assert fold([], column=5) == FoldResult("", 5)


def test_fold_plain_word_that_fits() -> None:
    assert fold([RuledWord.plain("hello")]) == FoldResult("hello", 5)


def test_fold_single_encoded_word() -> None:
    result = fold([RuledWord("é", **LATIN)])
    assert result.text == "=?ISO-8859-1?Q?=E9?="
    assert result.column == len(result.text)


def test_plain_text_breaks_at_existing_whitespace() -> None:
    text = " ".join(["word"] * 30)

    result = fold([RuledWord.plain(text)])

    lines = _lines(result.text)
    assert len(lines) == 2
    assert all(len(line) <= 76 for line in lines)
    assert lines[1].startswith(" ") and not lines[1].startswith("  ")
    assert result.text.replace("\n", "") == text


def test_unbreakable_plain_atom_overflows_with_warning(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="eword.folder"):
        result = fold([RuledWord.plain("x" * 100)])
    assert result.text == "x" * 100
    assert "overflows" in caplog.text


def test_plain_atom_moves_to_fresh_line_before_overflowing() -> None:
    result = fold([RuledWord.plain("abc"), RuledWord.plain("x" * 80)], column=10)
    assert result.text == "abc\n " + "x" * 80


def test_encoded_word_is_split_at_longest_fitting_prefix() -> None:
    result = fold([RuledWord("é" * 30, **LATIN)])
    assert result.text == (
        "=?ISO-8859-1?Q?" + "=E9" * 19 + "?=\n"
        " =?ISO-8859-1?Q?" + "=E9" * 11 + "?="
    )


def test_encoded_word_folds_when_first_character_does_not_fit() -> None:
    result = fold([RuledWord("é", **LATIN)], column=70)
    assert result.text == "\n =?ISO-8859-1?Q?=E9?="
    assert result.column == 21


def test_adjacent_encoded_words_get_a_separating_space() -> None:
    result = fold([
        RuledWord("é", **LATIN),
        RuledWord("日", charset="iso-2022-jp", scheme="B", mode="text"),
    ])
    assert result.text.startswith("=?ISO-8859-1?Q?=E9?= =?ISO-2022-JP?B?")
    assert "?==?" not in result.text


def test_trailing_blank_moves_with_following_encoded_word() -> None:
    result = fold([RuledWord.plain("ab "), RuledWord("é", **LATIN)], column=70)
    assert result.text == "ab\n =?ISO-8859-1?Q?=E9?="


def test_open_paren_moves_with_following_encoded_word() -> None:
    result = fold(
        [
            RuledWord.plain("x ("),
            RuledWord("é", charset="iso-8859-1", scheme="Q", mode="comment"),
            RuledWord.plain(")"),
        ],
        column=70,
    )
    assert result.text == "x\n (=?ISO-8859-1?Q?=E9?=)"


def test_scenario_a_emoji_subject(decode) -> None:
    text = "\U0001F600" * 40

    result = fold(split_text(text), column=9)

    lines = _lines(result.text)
    assert len(lines) == 4
    assert all(len(line) <= 76 for line in lines[1:])
    assert 9 + len(lines[0]) <= 76
    assert all(line.startswith(" =?UTF-8?B?") for line in lines[1:])
    assert decode(result.text) == text


def test_long_mixed_text_satisfies_line_invariants(decode) -> None:
    text = "Grüße aus Köln, und überall Schöne Tage! " * 8 + "日本語のテキスト" * 6

    result = fold(split_text(text), column=9)

    report = validate("Subject: " + result.text, DEFAULT_CONFIG)
    assert report["issue_count"] == 0, report["issues"]


def test_narrow_line_budget() -> None:
    cfg = Config(max_line_length=30)
    result = fold(split_text("Ünïcödé " * 10, cfg=cfg), cfg=cfg)
    for line in _lines(result.text):
        assert len(line) <= 30


def test_strict_mode_rejects_unencodable_text() -> None:
    cfg = Config(strict=True)
    with pytest.raises(UnencodableCharsetError):
        Folder([RuledWord("é", charset="iso-8859-1")], cfg=cfg)


def test_untranscodable_encoded_word_is_emitted_raw_when_lenient(caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="eword.folder"):
        result = fold([RuledWord("日", charset="iso-8859-1", scheme="Q", mode="text")])
    assert result.text == "日"
    assert "No transfer encoding" in caplog.text


def test_double_blank_at_break_leaves_one_space_on_continuation() -> None:
    result = fold([RuledWord("é", **LATIN), RuledWord.plain(" " + "a" * 75 + "  " + "b" * 5)], column=9)

    assert result.text == "=?ISO-8859-1?Q?=E9?=\n " + "a" * 75 + "\n bbbbb"
    for line in _lines(result.text)[1:]:
        assert line.startswith(" ") and not line.startswith("  ")
    assert validate("Subject: " + result.text, DEFAULT_CONFIG)["issue_count"] == 0


def test_tab_at_break_is_replaced_by_fold_space() -> None:
    result = fold([RuledWord("é", **LATIN), RuledWord.plain(" " + "a" * 75 + "\tbbbb")], column=9)

    assert result.text == "=?ISO-8859-1?Q?=E9?=\n " + "a" * 75 + "\n bbbb"
    assert "\t" not in result.text
    assert validate("Subject: " + result.text, DEFAULT_CONFIG)["issue_count"] == 0


def test_extra_leading_blanks_stay_on_the_earlier_line() -> None:
    result = fold([RuledWord.plain("abc"), RuledWord.plain("  " + "x" * 10)], column=66)

    assert result.text == "abc \n " + "x" * 10
    assert result.text.replace("\n", "") == "abc  " + "x" * 10


def test_tab_before_encoded_word_becomes_fold_space() -> None:
    result = fold([RuledWord.plain("ab"), RuledWord.plain("\t"), RuledWord("é", **LATIN)], column=70)
    assert result.text == "ab\n =?ISO-8859-1?Q?=E9?="


def test_separator_only_between_directly_adjacent_encoded_words() -> None:
    folder = Folder([RuledWord("é", **LATIN), RuledWord.plain("-"), RuledWord("é", **LATIN)])

    result = folder.run()

    assert result.text == "=?ISO-8859-1?Q?=E9?=-=?ISO-8859-1?Q?=E9?="
    assert folder.after_encoded
