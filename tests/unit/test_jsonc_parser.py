"""
Unit tests for the JSONC scanner and parser.

Covers token kinds, comment and trailing comma tolerance, and the diagnostics
attached to syntax errors.
"""

import pytest

from reactive_config.errors import ErrorCode, JsoncSyntaxError
from reactive_config.jsonc.parser import (
    ParseDiagnostic,
    ParseErrorCode,
    find_node,
    offset_to_position,
    parse,
    parse_tree,
    values_equal,
)
from reactive_config.jsonc.scanner import ScanError, SyntaxKind, tokenize


class TestScanner:
    """Tests for tokenize()."""

    def test_token_kinds_include_trivia_and_comments(self):
        """Every byte of the input belongs to some token."""
        kinds = [token.kind for token in tokenize('{"a": 1} // x')]
        assert kinds == [
            SyntaxKind.OPEN_BRACE,
            SyntaxKind.STRING_LITERAL,
            SyntaxKind.COLON,
            SyntaxKind.TRIVIA,
            SyntaxKind.NUMERIC_LITERAL,
            SyntaxKind.CLOSE_BRACE,
            SyntaxKind.TRIVIA,
            SyntaxKind.LINE_COMMENT,
            SyntaxKind.EOF,
        ]

    def test_string_escapes_are_decoded(self):
        token = next(tokenize(r'"a\nbA\""'))
        assert token.kind is SyntaxKind.STRING_LITERAL
        assert token.value == 'a\nbA"'

    def test_numbers_keep_int_and_float(self):
        values = [t.value for t in tokenize("[1, -2.5, 3e2]") if t.kind is SyntaxKind.NUMERIC_LITERAL]
        assert values == [1, -2.5, 300.0]
        assert isinstance(values[0], int)

    def test_leading_zero_is_a_number_error(self):
        token = next(tokenize("01"))
        assert token.error is ScanError.UNEXPECTED_END_OF_NUMBER

    def test_unterminated_block_comment(self):
        token = next(tokenize("/* open"))
        assert token.kind is SyntaxKind.BLOCK_COMMENT
        assert token.error is ScanError.UNEXPECTED_END_OF_COMMENT

    def test_crlf_is_one_line_break(self):
        tokens = list(tokenize("1\r\n2"))
        assert tokens[1].kind is SyntaxKind.LINE_BREAK
        assert tokens[1].length == 2

    def test_out_of_range_numbers_are_flagged(self):
        for literal in ("1e400", "-1e400"):
            token = next(tokenize(literal))
            assert token.error is ScanError.INVALID_NUMBER_FORMAT
            assert token.value is None

    def test_unicode_separators_end_line_comments(self):
        tokens = list(tokenize("// c\u2028 1"))
        assert tokens[0].kind is SyntaxKind.LINE_COMMENT
        assert tokens[0].length == 4
        assert tokens[1].kind is SyntaxKind.LINE_BREAK
        assert parse('{"a": 1 // c\u2028}') == {"a": 1}

    def test_unicode_separators_are_string_content(self):
        assert parse('"a\u2028b"') == "a\u2028b"


class TestParse:
    """Tests for parse() and parse_tree()."""

    def test_comments_and_trailing_commas(self):
        text = '{"a": 1, /* c */ "b": [true, null, 2.5,], // end\n}'
        assert parse(text) == {"a": 1, "b": [True, None, 2.5]}

    def test_duplicate_keys_last_wins(self):
        assert parse('{"a": 1, "a": 2}') == {"a": 2}

    def test_empty_content(self):
        with pytest.raises(JsoncSyntaxError):
            parse("")
        assert parse("  // only a comment\n", allow_empty_content=True) is None

    def test_trailing_comma_can_be_rejected(self):
        _, diagnostics = parse_tree("[1,]", allow_trailing_comma=False)
        assert diagnostics[0].code is ParseErrorCode.VALUE_EXPECTED

    def test_comments_can_be_rejected(self):
        _, diagnostics = parse_tree("// c\n1", disallow_comments=True)
        assert diagnostics[0].code is ParseErrorCode.INVALID_COMMENT_TOKEN

    def test_nodes_carry_offsets(self):
        text = '{"a": [10, 20]}'
        root, diagnostics = parse_tree(text)
        assert not diagnostics
        node = find_node(root, ["a", 1])
        assert text[node.offset:node.end] == "20"
        assert find_node(root, ["a", 5]) is None
        assert find_node(root, ["missing"]) is None


class TestDiagnostics:
    """Syntax errors report a code and a position."""

    def test_missing_comma_position(self):
        """Line is 1-based and column 0-based."""
        text = '{\n  "a": 1\n  "b": 2\n}'
        with pytest.raises(JsoncSyntaxError) as exc_info:
            parse(text, file_path="settings.json")

        error = exc_info.value
        assert isinstance(error, ValueError)
        assert error.code is ErrorCode.SYNTAX_ERROR
        cause = error.__cause__
        assert isinstance(cause, ParseDiagnostic)
        assert cause.code is ParseErrorCode.COMMA_EXPECTED
        assert (cause.line, cause.column) == (3, 2)
        assert "settings.json" in error.message
        assert "CommaExpected at line 3, column 2" in error.message

    def test_unclosed_object(self):
        _, diagnostics = parse_tree('{"a": 1')
        assert diagnostics[0].code is ParseErrorCode.CLOSE_BRACE_EXPECTED
        assert (diagnostics[0].line, diagnostics[0].column) == (1, 7)

    def test_unterminated_string(self):
        _, diagnostics = parse_tree('"abc')
        assert diagnostics[0].code is ParseErrorCode.UNEXPECTED_END_OF_STRING

    def test_to_dict_lists_every_diagnostic(self):
        with pytest.raises(JsoncSyntaxError) as exc_info:
            parse("[1 2]")
        payload = exc_info.value.to_dict()
        assert payload["code"] == ErrorCode.SYNTAX_ERROR.value
        assert payload["context"]["errors"][0]["error"] == "CommaExpected"

    def test_out_of_range_number(self):
        _, diagnostics = parse_tree('{"a": 1e400}')
        assert diagnostics[0].code is ParseErrorCode.INVALID_NUMBER_FORMAT
        assert (diagnostics[0].line, diagnostics[0].column) == (1, 6)
        with pytest.raises(JsoncSyntaxError):
            parse("[1e400]")

    def test_offset_to_position(self):
        assert offset_to_position("a\nbc", 3) == (2, 1)
        assert offset_to_position("a\r\nbc", 3) == (2, 0)
        assert offset_to_position("abc", 0) == (1, 0)
        assert offset_to_position("a\u2028bc", 3) == (2, 1)
        assert offset_to_position("a\u2029\u2029b", 3) == (3, 0)


class TestValuesEqual:
    """JSON equality used to skip no-op edits."""

    def test_booleans_are_not_numbers(self):
        assert not values_equal(True, 1)
        assert not values_equal(0, False)
        assert values_equal(False, False)

    def test_nested(self):
        assert values_equal({"a": [1, {"b": None}]}, {"a": [1, {"b": None}]})
        assert not values_equal({"a": [1]}, {"a": [1, 2]})
        assert not values_equal([1], {"0": 1})
