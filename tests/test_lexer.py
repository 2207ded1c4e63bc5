import pytest

from eword.errors import HeaderSyntaxError
from eword.lexer import lex_structured_field, parse_addresses, parse_in_reply_to, strip_spaces
from eword.types import Group, Mailbox, MsgId, Phrase, Token


def W(text):
    return Token("word", text)


def S(text):
    return Token("specials", text)


SP = Token("spaces", " ")


def test_lex_mailbox() -> None:
    assert lex_structured_field("John <j@x.org>") == [
        W("John"), SP, S("<"), W("j"), S("@"), W("x"), S("."), W("org"), S(">"),
    ]


def test_lex_quoted_string_keeps_escapes() -> None:
    assert lex_structured_field('"a\\"b" c') == [
        Token("quoted-string", 'a\\"b'), SP, W("c"),
    ]


def test_lex_nested_comment() -> None:
    assert lex_structured_field("(a (b) c)x") == [Token("comment", "a (b) c"), W("x")]


def test_lex_domain_literal_is_one_word() -> None:
    assert lex_structured_field("a@[1.2.3.4]") == [W("a"), S("@"), W("[1.2.3.4]")]


def test_lex_unterminated_constructs_run_to_end() -> None:
    assert lex_structured_field('"abc') == [Token("quoted-string", "abc")]
    assert lex_structured_field("(abc") == [Token("comment", "abc")]


def test_lex_folding_whitespace_is_one_spaces_token() -> None:
    assert lex_structured_field("a,\r\n\tb") == [W("a"), S(","), Token("spaces", "\r\n\t"), W("b")]


def test_strip_spaces() -> None:
    assert strip_spaces([SP, W("a"), SP]) == (W("a"),)
    assert strip_spaces([SP]) == ()


def test_parse_addresses_mailboxes() -> None:
    addresses = parse_addresses(lex_structured_field('a@b, "X Y" <c@d>'))
    assert addresses == [
        Mailbox(addr_spec=(W("a"), S("@"), W("b"))),
        Mailbox(
            phrase=(Token("quoted-string", "X Y"),),
            route=(W("c"), S("@"), W("d")),
        ),
    ]


def test_parse_addresses_comma_inside_angle_brackets() -> None:
    addresses = parse_addresses(lex_structured_field("A <@r1,@r2:a@b>"))
    assert len(addresses) == 1
    assert addresses[0].phrase == (W("A"),)


def test_parse_addresses_trailing_comment() -> None:
    [mailbox] = parse_addresses(lex_structured_field("a@b (Alice)"))
    assert mailbox.addr_spec == (W("a"), S("@"), W("b"))
    assert mailbox.comment == "Alice"


def test_parse_addresses_skips_empty_elements() -> None:
    assert len(parse_addresses(lex_structured_field("a@b,, c@d,"))) == 2


def test_parse_addresses_group() -> None:
    [group] = parse_addresses(lex_structured_field("Friends: a@b, C <c@d>;"))
    assert isinstance(group, Group)
    assert group.phrase == (W("Friends"),)
    assert len(group.mailboxes) == 2
    assert group.mailboxes[1].route == (W("c"), S("@"), W("d"))


def test_parse_addresses_empty_group() -> None:
    [group] = parse_addresses(lex_structured_field("undisclosed-recipients:;"))
    assert group == Group(phrase=(W("undisclosed-recipients"),), mailboxes=())


@pytest.mark.parametrize(
    "body",
    [
        "Jörg <a@b",
        "x <a@b> y",
        "Friends: a@b",
        "<<a@b>>",
    ],
)
def test_parse_addresses_rejects_malformed_lists(body: str) -> None:
    with pytest.raises(HeaderSyntaxError):
        parse_addresses(lex_structured_field(body))


def test_parse_in_reply_to() -> None:
    items = parse_in_reply_to(lex_structured_field("<a@b> (c)"))
    assert items == [
        MsgId((W("a"), S("@"), W("b"))),
        Phrase((SP, Token("comment", "c"))),
    ]


def test_parse_in_reply_to_keeps_unterminated_angle_in_phrase() -> None:
    items = parse_in_reply_to(lex_structured_field("<a@b> <c"))
    assert items == [
        MsgId((W("a"), S("@"), W("b"))),
        Phrase((SP, S("<"), W("c"))),
    ]
