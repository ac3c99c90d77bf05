"""Tests for the UPL lexer and token stream."""

import itertools
import re

import pytest

from uplcc.config import Limits
from uplcc.error import DiagnosticBag, DiagnosticKind
from uplcc.lexer import (
    KEYWORDS,
    Token,
    TokenStream,
    TokenType,
    is_valid_identifier,
    tokenize,
)

# ###############
# Test Helpers
# ###############


def _lex(source: str, limits: Limits = Limits()) -> tuple[list[Token], DiagnosticBag]:
    diags = DiagnosticBag()
    return tokenize(source, diags, limits), diags


def _types(source: str) -> list[TokenType]:
    tokens, _ = _lex(source)
    assert tokens[-1].type == TokenType.EOF
    return [tok.type for tok in tokens[:-1]]


def _texts(source: str) -> list[str]:
    tokens, _ = _lex(source)
    return [tok.text for tok in tokens[:-1]]


def _messages(source: str) -> list[tuple[int, str]]:
    _, diags = _lex(source)
    return [(d.line, d.message) for d in diags]


# ###############
# EOF Handling
# ###############


class TestEof:
    def test_empty_input_produces_single_eof(self) -> None:
        tokens, diags = _lex("")
        assert tokens == [Token(TokenType.EOF, "", 1)]
        assert len(diags) == 0

    def test_eof_line_is_last_line_counted(self) -> None:
        tokens, _ = _lex("begin\n\nend\n")
        assert tokens[-1].type == TokenType.EOF
        assert tokens[-1].line == 4

    @pytest.mark.parametrize(
        "source",
        ["", "   \t\n", "begin end", "@@@ <<< /", "/* open", "a1b 12ab // x", "x\n\n\n"],
    )
    def test_exactly_one_eof_at_the_end(self, source: str) -> None:
        tokens, _ = _lex(source)
        assert tokens[-1].type == TokenType.EOF
        assert [t.type for t in tokens].count(TokenType.EOF) == 1


# ###############
# Keywords, identifiers, numbers
# ###############


class TestWords:
    @pytest.mark.parametrize("word,expected", sorted(KEYWORDS.items()))
    def test_reserved_words(self, word: str, expected: TokenType) -> None:
        assert _types(word) == [expected]

    def test_identifiers_with_trailing_digits(self) -> None:
        assert _types("x ab12 count7 z") == [TokenType.ID] * 4
        assert _texts("x ab12 count7 z") == ["x", "ab12", "count7", "z"]

    def test_keyword_prefix_is_an_identifier(self) -> None:
        assert _types("begin1 ends iff") == [TokenType.ID] * 3

    def test_letter_after_digit_is_invalid_identifier(self) -> None:
        tokens, diags = _lex("a1b")
        assert tokens[0] == Token(TokenType.ERROR, "a1b", 1)
        assert [(d.line, d.message, d.kind) for d in diags] == [
            (1, "Invalid identifier: a1b", DiagnosticKind.LEXICAL)
        ]

    def test_number_then_word_split(self) -> None:
        assert _types("12abc") == [TokenType.NUM, TokenType.ID]
        assert _texts("12abc") == ["12", "abc"]

    def test_number_literal(self) -> None:
        assert _types("007 42") == [TokenType.NUM, TokenType.NUM]
        assert _texts("007 42") == ["007", "42"]

    def test_long_lexeme_is_truncated(self) -> None:
        tokens, _ = _lex("abcdefgh", Limits(max_lexeme_len=5))
        assert tokens[0] == Token(TokenType.ID, "abcde", 1)

    def test_keyword_match_uses_truncated_text(self) -> None:
        tokens, _ = _lex("beginxyz", Limits(max_lexeme_len=5))
        assert tokens[0].type == TokenType.BEGIN


_IDENT_SHAPE = re.compile(r"[a-zA-Z]+[0-9]*")


def _generated_words() -> list[str]:
    words = []
    for length in range(1, 5):
        for chars in itertools.product("aZ07", repeat=length):
            word = "".join(chars)
            if word[0].isalpha():
                words.append(word)
    return words


class TestIdentifierShape:
    @pytest.mark.parametrize("word", _generated_words())
    def test_lexer_agrees_with_letters_then_digits(self, word: str) -> None:
        tokens, _ = _lex(word)
        expected = TokenType.ID if _IDENT_SHAPE.fullmatch(word) else TokenType.ERROR
        assert [t.type for t in tokens] == [expected, TokenType.EOF]
        assert is_valid_identifier(word) == (expected == TokenType.ID)

    def test_predicate_rejects_empty_and_digit_start(self) -> None:
        assert not is_valid_identifier("")
        assert not is_valid_identifier("1a")


# ###############
# Operators and punctuation
# ###############


class TestOperators:
    def test_two_char_operators(self) -> None:
        assert _types("== >= = >") == [
            TokenType.EQ, TokenType.GTE, TokenType.ASSIGN, TokenType.GT,
        ]

    def test_adjacent_operators_use_one_char_lookahead(self) -> None:
        assert _types("===") == [TokenType.EQ, TokenType.ASSIGN]
        assert _types(">==") == [TokenType.GTE, TokenType.ASSIGN]

    def test_punctuation(self) -> None:
        assert _types("+ * ( ) { } ;") == [
            TokenType.PLUS, TokenType.MUL, TokenType.LPAREN, TokenType.RPAREN,
            TokenType.LBRACE, TokenType.RBRACE, TokenType.SEMICOLON,
        ]

    def test_statement_tokens(self) -> None:
        assert _types("x = x + 1;") == [
            TokenType.ID, TokenType.ASSIGN, TokenType.ID, TokenType.PLUS,
            TokenType.NUM, TokenType.SEMICOLON,
        ]

    @pytest.mark.parametrize("char", ["<", "/", "@", "-", "!", "é"])
    def test_unsupported_operator(self, char: str) -> None:
        tokens, diags = _lex(f"a {char} b")
        assert [t.type for t in tokens] == [
            TokenType.ID, TokenType.ERROR, TokenType.ID, TokenType.EOF,
        ]
        assert tokens[1].text == char
        assert [(d.line, d.message) for d in diags] == [(1, f"Unsupported operator: {char}")]


# ###############
# Comments and lines
# ###############


class TestComments:
    def test_line_comment(self) -> None:
        tokens, _ = _lex("x // ignored = ;\ny")
        assert [(t.type, t.text, t.line) for t in tokens[:-1]] == [
            (TokenType.ID, "x", 1),
            (TokenType.ID, "y", 2),
        ]

    def test_block_comment_counts_newlines(self) -> None:
        tokens, _ = _lex("a /* 1\n2\n */ b")
        assert [(t.text, t.line) for t in tokens[:-1]] == [("a", 1), ("b", 3)]

    def test_block_comment_needs_separate_closer(self) -> None:
        assert _messages("/*/ x") == [(1, "Unterminated block comment")]

    def test_unterminated_block_comment(self) -> None:
        tokens, diags = _lex("a /* never closed\nstill comment\n")
        assert [t.type for t in tokens] == [TokenType.ID, TokenType.EOF]
        assert [(d.line, d.message) for d in diags] == [(3, "Unterminated block comment")]

    def test_whitespace_kinds(self) -> None:
        tokens, _ = _lex("a\t\r\v\fb\nc")
        assert [(t.text, t.line) for t in tokens[:-1]] == [("a", 1), ("b", 1), ("c", 2)]


# ###############
# TokenStream
# ###############


class TestTokenStream:
    def _stream(self, source: str) -> TokenStream:
        tokens, _ = _lex(source)
        return TokenStream(tokens)

    def test_requires_eof_terminator(self) -> None:
        with pytest.raises(ValueError):
            TokenStream([Token(TokenType.ID, "x", 1)])

    def test_advance_stops_at_eof(self) -> None:
        stream = self._stream("x")
        assert stream.advance().text == "x"
        assert stream.at_end
        stream.advance()
        assert stream.at_end

    def test_peek_past_end_returns_eof(self) -> None:
        stream = self._stream("x")
        assert stream.peek(5).type == TokenType.EOF

    def test_skip_line_skips_rest_of_physical_line(self) -> None:
        stream = self._stream("a b c\nd e")
        stream.advance()
        assert stream.skip_line() == 2
        assert stream.current.text == "d"

    def test_skip_line_on_last_line_lands_on_eof(self) -> None:
        stream = self._stream("a b")
        stream.skip_line()
        assert stream.at_end
        assert stream.skip_line() == 0
