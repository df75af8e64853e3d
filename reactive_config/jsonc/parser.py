"""
JSONC parser.

Builds a node tree that keeps the offset and length of every value so the
editor can patch the source text in place, and converts that tree to plain
Python values.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from ..errors import JsoncSyntaxError
from .scanner import COMMENT_KINDS, LINE_BREAK_RE, TRIVIA_KINDS, ScanError, SyntaxKind, Token, tokenize

PathSegment = Union[str, int]
AccessPath = Tuple[PathSegment, ...]


class ParseErrorCode(IntEnum):
    """Parse error codes (names follow the usual JSONC diagnostics)."""
    INVALID_SYMBOL = 1
    INVALID_NUMBER_FORMAT = 2
    PROPERTY_NAME_EXPECTED = 3
    VALUE_EXPECTED = 4
    COLON_EXPECTED = 5
    COMMA_EXPECTED = 6
    CLOSE_BRACE_EXPECTED = 7
    CLOSE_BRACKET_EXPECTED = 8
    END_OF_FILE_EXPECTED = 9
    INVALID_COMMENT_TOKEN = 10
    UNEXPECTED_END_OF_COMMENT = 11
    UNEXPECTED_END_OF_STRING = 12
    UNEXPECTED_END_OF_NUMBER = 13
    INVALID_UNICODE = 14
    INVALID_ESCAPE_CHARACTER = 15
    INVALID_CHARACTER = 16

    @property
    def label(self) -> str:
        """CamelCase name, e.g. ``CloseBraceExpected``."""
        return "".join(part.capitalize() for part in self.name.split("_"))


_SCAN_ERROR_CODES = {
    ScanError.UNEXPECTED_END_OF_COMMENT: ParseErrorCode.UNEXPECTED_END_OF_COMMENT,
    ScanError.UNEXPECTED_END_OF_STRING: ParseErrorCode.UNEXPECTED_END_OF_STRING,
    ScanError.UNEXPECTED_END_OF_NUMBER: ParseErrorCode.UNEXPECTED_END_OF_NUMBER,
    ScanError.INVALID_UNICODE: ParseErrorCode.INVALID_UNICODE,
    ScanError.INVALID_ESCAPE_CHARACTER: ParseErrorCode.INVALID_ESCAPE_CHARACTER,
    ScanError.INVALID_CHARACTER: ParseErrorCode.INVALID_CHARACTER,
    ScanError.INVALID_NUMBER_FORMAT: ParseErrorCode.INVALID_NUMBER_FORMAT,
}

_VALUE_KINDS = {
    SyntaxKind.STRING_LITERAL: "string",
    SyntaxKind.NUMERIC_LITERAL: "number",
    SyntaxKind.TRUE_KEYWORD: "boolean",
    SyntaxKind.FALSE_KEYWORD: "boolean",
    SyntaxKind.NULL_KEYWORD: "null",
}


def offset_to_position(text: str, offset: int) -> Tuple[int, int]:
    """
    Translate a character offset into a position.

    Returns:
        (line, column) with a 1-based line and a 0-based column
    """
    offset = max(0, min(offset, len(text)))
    line = 1
    line_start = 0
    for match in LINE_BREAK_RE.finditer(text, 0, offset):
        line += 1
        line_start = match.end()
    return line, offset - line_start


class ParseDiagnostic(Exception):
    """A single syntax problem at a known location."""

    def __init__(self, code: ParseErrorCode, offset: int, length: int, line: int, column: int):
        self.code = code
        self.offset = offset
        self.length = length
        self.line = line
        self.column = column
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"{self.code.label} at line {self.line}, column {self.column}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code.label,
            "offset": self.offset,
            "length": self.length,
            "line": self.line,
            "column": self.column,
        }


@dataclass(eq=False)
class Node:
    """A value (or an object property) in the parsed document."""

    type: str  # object | array | property | string | number | boolean | null
    offset: int
    length: int = 0
    value: Any = None
    children: List["Node"] = field(default_factory=list)
    parent: Optional["Node"] = field(default=None, repr=False)
    colon_offset: int = -1

    @property
    def end(self) -> int:
        return self.offset + self.length

    @property
    def key(self) -> Optional[str]:
        """Property name (only for ``property`` nodes)."""
        if self.type == "property" and self.children:
            return self.children[0].value
        return None

    @property
    def value_node(self) -> Optional["Node"]:
        """Value of a ``property`` node."""
        if self.type == "property" and len(self.children) > 1:
            return self.children[1]
        return None


class _Abort(Exception):
    """Stops parsing after a structural error."""


class _TreeBuilder:
    """Recursive-descent parser over the significant tokens."""

    def __init__(self, text: str, allow_trailing_comma: bool, disallow_comments: bool):
        self.text = text
        self.allow_trailing_comma = allow_trailing_comma
        self.disallow_comments = disallow_comments
        self.diagnostics: List[ParseDiagnostic] = []
        self._tokens = tokenize(text)
        self.token: Token = Token(SyntaxKind.EOF, 0, 0)
        self._advance()

    # Token handling

    def _error(self, code: ParseErrorCode, token: Optional[Token] = None) -> None:
        token = token or self.token
        line, column = offset_to_position(self.text, token.offset)
        self.diagnostics.append(ParseDiagnostic(code, token.offset, token.length, line, column))

    def _fail(self, code: ParseErrorCode) -> None:
        self._error(code)
        raise _Abort()

    def _advance(self) -> Token:
        for token in self._tokens:
            if token.kind in TRIVIA_KINDS:
                continue
            if token.error is not ScanError.NONE:
                self._error(_SCAN_ERROR_CODES[token.error], token)
            if token.kind in COMMENT_KINDS:
                if self.disallow_comments:
                    self._error(ParseErrorCode.INVALID_COMMENT_TOKEN, token)
                continue
            if token.kind is SyntaxKind.UNKNOWN:
                if token.error is ScanError.NONE:
                    self._error(ParseErrorCode.INVALID_SYMBOL, token)
                continue
            self.token = token
            return token
        return self.token

    # Grammar

    def parse_document(self, allow_empty_content: bool) -> Optional[Node]:
        try:
            if self.token.kind is SyntaxKind.EOF:
                if not allow_empty_content:
                    self._error(ParseErrorCode.VALUE_EXPECTED)
                return None
            root = self._parse_value(None)
            if self.token.kind is not SyntaxKind.EOF:
                self._error(ParseErrorCode.END_OF_FILE_EXPECTED)
            return root
        except _Abort:
            return None

    def _parse_value(self, parent: Optional[Node]) -> Node:
        kind = self.token.kind
        if kind is SyntaxKind.OPEN_BRACE:
            return self._parse_object(parent)
        if kind is SyntaxKind.OPEN_BRACKET:
            return self._parse_array(parent)
        if kind in _VALUE_KINDS:
            token = self.token
            if kind is SyntaxKind.NUMERIC_LITERAL and token.value is None:
                # Already reported by the scanner
                raise _Abort()
            node = Node(_VALUE_KINDS[kind], token.offset, token.length, token.value, parent=parent)
            self._advance()
            return node
        self._fail(ParseErrorCode.VALUE_EXPECTED)

    def _parse_object(self, parent: Optional[Node]) -> Node:
        node = Node("object", self.token.offset, parent=parent)
        self._advance()
        need_comma = False
        while self.token.kind not in (SyntaxKind.CLOSE_BRACE, SyntaxKind.EOF):
            if self.token.kind is SyntaxKind.COMMA:
                if not need_comma:
                    self._fail(ParseErrorCode.PROPERTY_NAME_EXPECTED)
                self._advance()
                need_comma = False
                if self.token.kind is SyntaxKind.CLOSE_BRACE:
                    if not self.allow_trailing_comma:
                        self._fail(ParseErrorCode.PROPERTY_NAME_EXPECTED)
                    break
            elif need_comma:
                self._fail(ParseErrorCode.COMMA_EXPECTED)
            node.children.append(self._parse_property(node))
            need_comma = True
        if self.token.kind is not SyntaxKind.CLOSE_BRACE:
            self._fail(ParseErrorCode.CLOSE_BRACE_EXPECTED)
        node.length = self.token.end - node.offset
        self._advance()
        return node

    def _parse_property(self, parent: Node) -> Node:
        if self.token.kind is not SyntaxKind.STRING_LITERAL:
            self._fail(ParseErrorCode.PROPERTY_NAME_EXPECTED)
        node = Node("property", self.token.offset, parent=parent)
        key = Node("string", self.token.offset, self.token.length, self.token.value, parent=node)
        node.children.append(key)
        self._advance()
        if self.token.kind is not SyntaxKind.COLON:
            self._fail(ParseErrorCode.COLON_EXPECTED)
        node.colon_offset = self.token.offset
        self._advance()
        value = self._parse_value(node)
        node.children.append(value)
        node.length = value.end - node.offset
        return node

    def _parse_array(self, parent: Optional[Node]) -> Node:
        node = Node("array", self.token.offset, parent=parent)
        self._advance()
        need_comma = False
        while self.token.kind not in (SyntaxKind.CLOSE_BRACKET, SyntaxKind.EOF):
            if self.token.kind is SyntaxKind.COMMA:
                if not need_comma:
                    self._fail(ParseErrorCode.VALUE_EXPECTED)
                self._advance()
                need_comma = False
                if self.token.kind is SyntaxKind.CLOSE_BRACKET:
                    if not self.allow_trailing_comma:
                        self._fail(ParseErrorCode.VALUE_EXPECTED)
                    break
            elif need_comma:
                self._fail(ParseErrorCode.COMMA_EXPECTED)
            node.children.append(self._parse_value(node))
            need_comma = True
        if self.token.kind is not SyntaxKind.CLOSE_BRACKET:
            self._fail(ParseErrorCode.CLOSE_BRACKET_EXPECTED)
        node.length = self.token.end - node.offset
        self._advance()
        return node


def parse_tree(
    text: str,
    allow_trailing_comma: bool = True,
    disallow_comments: bool = False,
    allow_empty_content: bool = False
) -> Tuple[Optional[Node], List[ParseDiagnostic]]:
    """
    Parse JSONC text into a node tree.

    Args:
        text: JSONC source
        allow_trailing_comma: Accept ``[1, 2,]`` and ``{"a": 1,}``
        disallow_comments: Report comments as errors
        allow_empty_content: Accept text without any value

    Returns:
        (root node or None, diagnostics); the root is None for empty content
        and after a structural error
    """
    builder = _TreeBuilder(text, allow_trailing_comma, disallow_comments)
    root = builder.parse_document(allow_empty_content)
    return root, builder.diagnostics


def node_value(node: Optional[Node]) -> Any:
    """Convert a node tree to plain Python values (duplicate keys: last wins)."""
    if node is None:
        return None
    if node.type == "object":
        return {prop.key: node_value(prop.value_node) for prop in node.children}
    if node.type == "array":
        return [node_value(child) for child in node.children]
    if node.type == "property":
        return node_value(node.value_node)
    return node.value


def find_property(node: Node, key: str) -> Optional[Node]:
    """Find the ``property`` node named ``key`` in an object node (last wins)."""
    found = None
    for prop in node.children:
        if prop.key == key:
            found = prop
    return found


def find_node(root: Optional[Node], path: Sequence[PathSegment]) -> Optional[Node]:
    """
    Locate the value node at ``path``.

    Returns:
        The value node, or None if any segment does not resolve
    """
    node = root
    for segment in path:
        if node is None:
            return None
        if isinstance(segment, str):
            if node.type != "object":
                return None
            prop = find_property(node, segment)
            node = prop.value_node if prop is not None else None
        else:
            if node.type != "array" or not 0 <= segment < len(node.children):
                return None
            node = node.children[segment]
    return node


def parse(
    text: str,
    allow_trailing_comma: bool = True,
    disallow_comments: bool = False,
    allow_empty_content: bool = False,
    file_path: Optional[str] = None
) -> Any:
    """
    Parse JSONC text into Python values.

    Returns:
        The parsed value (None for empty content when allowed)

    Raises:
        JsoncSyntaxError: If the text is malformed; ``__cause__`` is the first
            ParseDiagnostic
    """
    root, diagnostics = parse_tree(text, allow_trailing_comma, disallow_comments, allow_empty_content)
    if diagnostics:
        raise JsoncSyntaxError(diagnostics, file_path) from diagnostics[0]
    return node_value(root)


def values_equal(left: Any, right: Any) -> bool:
    """JSON equality: like ``==`` but booleans never equal numbers."""
    if isinstance(left, bool) or isinstance(right, bool):
        return isinstance(left, bool) and isinstance(right, bool) and left == right
    if isinstance(left, dict):
        return (
            isinstance(right, dict)
            and left.keys() == right.keys()
            and all(values_equal(left[k], right[k]) for k in left)
        )
    if isinstance(left, (list, tuple)):
        return (
            isinstance(right, (list, tuple))
            and len(left) == len(right)
            and all(values_equal(a, b) for a, b in zip(left, right))
        )
    if isinstance(right, (dict, list, tuple)):
        return False
    return left == right
