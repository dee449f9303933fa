import pytest
from hypothesis import given
from hypothesis import strategies as st

from ciams.ciams_constants import KEYWORDS, TokenKind
from ciams.ciams_lexer import CharacterStream, Lexer, Token, tokenize


def kinds(source: str) -> list[TokenKind]:
    return [tok.kind for tok in tokenize(source)]


def test_identifiers_and_plus() -> None:
    tokens = tokenize("a + b")
    assert [(t.kind, t.lexeme) for t in tokens] == [
        (TokenKind.IDENTIFIER, "a"),
        (TokenKind.PLUS, "+"),
        (TokenKind.IDENTIFIER, "b"),
        (TokenKind.END_OF_STREAM, ""),
    ]


def test_multi_char_operators_are_greedy() -> None:
    assert kinds("-> <- << >> ==") == [
        TokenKind.TRANSITION,
        TokenKind.THROW_ARROW,
        TokenKind.ROLLBACK,
        TokenKind.RUN,
        TokenKind.IMMUTABLE_ASSIGN,
        TokenKind.END_OF_STREAM,
    ]


def test_remaining_two_char_operators() -> None:
    assert kinds("~> <~ != <= >=") == [
        TokenKind.RAISE,
        TokenKind.CONFIG,
        TokenKind.NEQ,
        TokenKind.LE,
        TokenKind.GE,
        TokenKind.END_OF_STREAM,
    ]


def test_operator_fallback_to_single_char() -> None:
    assert kinds("- < > = !") == [
        TokenKind.MINUS,
        TokenKind.LT,
        TokenKind.GT,
        TokenKind.ASSIGN,
        TokenKind.NOT,
        TokenKind.END_OF_STREAM,
    ]


def test_lone_tilde_is_unknown() -> None:
    tokens = tokenize("~ x")
    assert tokens[0].kind == TokenKind.UNKNOWN
    assert tokens[0].lexeme == "~"
    assert tokens[1].kind == TokenKind.IDENTIFIER


def test_greedy_match_without_spaces() -> None:
    # "<-" wins over "<" followed by "-"
    assert kinds("x<-1") == [
        TokenKind.IDENTIFIER,
        TokenKind.THROW_ARROW,
        TokenKind.NUMBER,
        TokenKind.END_OF_STREAM,
    ]
    assert [t.lexeme for t in tokenize("a===b")] == ["a", "==", "=", "b", ""]


def test_single_char_tokens() -> None:
    assert kinds("( ) { } [ ] ; : . , | + * / % ^ @ $") == [
        TokenKind.LPAREN,
        TokenKind.RPAREN,
        TokenKind.LBRACE,
        TokenKind.RBRACE,
        TokenKind.LBRACKET,
        TokenKind.RBRACKET,
        TokenKind.SEMICOLON,
        TokenKind.COLON,
        TokenKind.DOT,
        TokenKind.COMMA,
        TokenKind.PIPE,
        TokenKind.PLUS,
        TokenKind.MUL,
        TokenKind.DIV,
        TokenKind.MOD,
        TokenKind.EXPONENT,
        TokenKind.SPECIFIER,
        TokenKind.MODIFIER,
        TokenKind.END_OF_STREAM,
    ]


def test_line_comment_is_dropped() -> None:
    with_comment = [(t.kind, t.lexeme) for t in tokenize("# ignore\nInit x = 1;")]
    without = [(t.kind, t.lexeme) for t in tokenize("Init x = 1;")]
    assert with_comment == without


def test_line_comment_at_end_of_input() -> None:
    assert kinds("x # trailing") == [TokenKind.IDENTIFIER, TokenKind.END_OF_STREAM]


def test_block_comment_is_dropped_and_counts_lines() -> None:
    tokens = tokenize("a ** one\ntwo\n ** b")
    assert [t.lexeme for t in tokens] == ["a", "b", ""]
    assert tokens[1].line == 3
    assert tokens[1].column == 5


def test_unterminated_block_comment_consumes_rest() -> None:
    assert kinds("x ** never closed\ny = 2;") == [
        TokenKind.IDENTIFIER,
        TokenKind.END_OF_STREAM,
    ]


def test_next_token_reports_comments() -> None:
    lexer = Lexer(CharacterStream("# note\n** block ** x"))
    first = lexer.next_token()
    second = lexer.next_token()
    third = lexer.next_token()
    assert first.kind == TokenKind.COMMENT
    assert first.lexeme == "# note"
    assert second.kind == TokenKind.MULTILINE_COMMENT
    assert second.lexeme == "** block **"
    assert third.kind == TokenKind.IDENTIFIER


def test_single_star_is_multiplication() -> None:
    assert kinds("2 * 3") == [
        TokenKind.NUMBER,
        TokenKind.MUL,
        TokenKind.NUMBER,
        TokenKind.END_OF_STREAM,
    ]


def test_string_literal_keeps_quotes_in_lexeme() -> None:
    tok = tokenize('"hello world"')[0]
    assert tok.kind == TokenKind.STRING_LITERAL
    assert tok.lexeme == '"hello world"'


def test_string_without_escape_processing() -> None:
    tok = tokenize('"a\\nb"')[0]
    assert tok.kind == TokenKind.STRING_LITERAL
    assert tok.lexeme == '"a\\nb"'


def test_multiline_string_advances_line() -> None:
    tokens = tokenize('"one\ntwo" x')
    assert tokens[0].kind == TokenKind.STRING_LITERAL
    assert tokens[1].line == 2
    assert tokens[1].column == 6


def test_unterminated_string_is_unknown() -> None:
    tokens = tokenize('x = "abc')
    assert tokens[2].kind == TokenKind.UNKNOWN
    assert tokens[2].lexeme == '"abc'
    assert tokens[3].kind == TokenKind.END_OF_STREAM


def test_number_is_integer_only() -> None:
    assert [(t.kind, t.lexeme) for t in tokenize("123.45")] == [
        (TokenKind.NUMBER, "123"),
        (TokenKind.DOT, "."),
        (TokenKind.NUMBER, "45"),
        (TokenKind.END_OF_STREAM, ""),
    ]


def test_identifier_with_digits() -> None:
    tok = tokenize("abc123")[0]
    assert tok.kind == TokenKind.IDENTIFIER
    assert tok.lexeme == "abc123"


def test_underscore_is_not_an_identifier_character() -> None:
    assert [t.kind for t in tokenize("a_b")] == [
        TokenKind.IDENTIFIER,
        TokenKind.UNKNOWN,
        TokenKind.IDENTIFIER,
        TokenKind.END_OF_STREAM,
    ]


@pytest.mark.parametrize("spelling,kind", sorted(KEYWORDS.items()))  # type: ignore[misc]
def test_keywords(spelling: str, kind: TokenKind) -> None:
    tok = tokenize(spelling)[0]
    assert tok.kind == kind
    assert tok.lexeme == spelling


def test_keywords_are_case_sensitive() -> None:
    assert tokenize("If")[0].kind == TokenKind.IDENTIFIER
    assert tokenize("init")[0].kind == TokenKind.IDENTIFIER
    assert tokenize("Init")[0].kind == TokenKind.INIT


def test_custom_keyword_table() -> None:
    table = dict(KEYWORDS)
    table["si"] = TokenKind.IF
    assert tokenize("si", table)[0].kind == TokenKind.IF
    assert tokenize("si")[0].kind == TokenKind.IDENTIFIER


def test_unknown_characters() -> None:
    tokens = tokenize("& ` é")
    assert [t.kind for t in tokens[:-1]] == [TokenKind.UNKNOWN] * 3
    assert [t.lexeme for t in tokens[:-1]] == ["&", "`", "é"]


def test_positions_are_token_starts() -> None:
    tokens = tokenize("Init x = 10;\n  y = x;")
    assert [(t.lexeme, t.line, t.column) for t in tokens] == [
        ("Init", 1, 1),
        ("x", 1, 6),
        ("=", 1, 8),
        ("10", 1, 10),
        (";", 1, 12),
        ("y", 2, 3),
        ("=", 2, 5),
        ("x", 2, 7),
        (";", 2, 8),
        ("", 2, 9),
    ]


def test_end_of_stream_for_empty_input() -> None:
    assert tokenize("") == [Token(TokenKind.END_OF_STREAM, "", 1, 1)]


def test_end_of_stream_at_final_position() -> None:
    eos = tokenize("ab\n")[-1]
    assert eos.kind == TokenKind.END_OF_STREAM
    assert (eos.line, eos.column) == (2, 1)


def test_token_repr_eq_and_hash() -> None:
    t1 = Token(TokenKind.NUMBER, "42", 1, 2)
    t2 = Token(TokenKind.NUMBER, "42", 1, 2)
    t3 = Token(TokenKind.IDENTIFIER, "x")

    assert repr(t1) == "Token(NUMBER, '42')"
    assert t1 == t2
    assert t1 != t3
    assert len({t1, t2, t3}) == 2


def test_token_is_immutable() -> None:
    tok = Token(TokenKind.IDENTIFIER, "x", 1, 1)
    with pytest.raises(AttributeError):
        tok.lexeme = "y"  # type: ignore[misc]


def test_token_to_dict() -> None:
    assert Token(TokenKind.PLUS, "+", 3, 4).to_dict() == {
        "kind": "PLUS",
        "lexeme": "+",
        "line": 3,
        "column": 4,
    }


def test_character_stream_methods() -> None:
    stream = CharacterStream("a\nb")
    assert stream.peek() == "a"
    assert stream.next() == "a"
    assert stream.next() == "\n"
    assert (stream.line, stream.column) == (2, 1)
    assert stream.peek(5) == ""
    stream.next()
    assert stream.end_of_file()
    assert stream.text_since(0) == "a\nb"


def test_character_stream_next_past_eof_raises() -> None:
    with pytest.raises(EOFError, match="Attempted to read past end of source"):
        CharacterStream("").next()


def test_independent_lexers_do_not_share_state() -> None:
    first = Lexer(CharacterStream("a b"))
    second = Lexer(CharacterStream("c"))
    assert first.next_token().lexeme == "a"
    assert second.next_token().lexeme == "c"
    assert first.next_token().lexeme == "b"
    assert second.next_token().kind == TokenKind.END_OF_STREAM


@given(st.text(max_size=200))  # type: ignore[misc]
def test_tokenize_is_total(text: str) -> None:
    tokens = tokenize(text)
    assert tokens[-1].kind == TokenKind.END_OF_STREAM
    assert tokens[-1].lexeme == ""
    assert [t.kind for t in tokens].count(TokenKind.END_OF_STREAM) == 1
    assert all(t.kind not in (TokenKind.COMMENT, TokenKind.MULTILINE_COMMENT) for t in tokens)


@given(st.text(alphabet="ab1 +-<>=!~*#\"\n(){};", max_size=80))  # type: ignore[misc]
def test_lexemes_are_source_substrings(text: str) -> None:
    for tok in tokenize(text)[:-1]:
        assert tok.lexeme
        assert tok.lexeme in text
        assert tok.line >= 1
        assert tok.column >= 1
