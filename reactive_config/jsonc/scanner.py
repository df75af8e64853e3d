"""
Tokenizer for JSON with comments.

Produces every token of the input, trivia and comments included, so callers
can reason about the exact bytes between two values.
"""

import math
import re
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Iterator


class SyntaxKind(Enum):
    """Token kinds."""
    OPEN_BRACE = "{"
    CLOSE_BRACE = "}"
    OPEN_BRACKET = "["
    CLOSE_BRACKET = "]"
    COMMA = ","
    COLON = ":"
    NULL_KEYWORD = "null"
    TRUE_KEYWORD = "true"
    FALSE_KEYWORD = "false"
    STRING_LITERAL = "string"
    NUMERIC_LITERAL = "number"
    LINE_COMMENT = "line_comment"
    BLOCK_COMMENT = "block_comment"
    LINE_BREAK = "line_break"
    TRIVIA = "trivia"
    UNKNOWN = "unknown"
    EOF = "eof"


class ScanError(IntEnum):
    """Problems found while scanning a single token."""
    NONE = 0
    UNEXPECTED_END_OF_COMMENT = 1
    UNEXPECTED_END_OF_STRING = 2
    UNEXPECTED_END_OF_NUMBER = 3
    INVALID_UNICODE = 4
    INVALID_ESCAPE_CHARACTER = 5
    INVALID_CHARACTER = 6
    INVALID_NUMBER_FORMAT = 7


# Line terminators recognised everywhere lines are counted or indented
LINE_BREAK_CHARS = "\r\n\u2028\u2029"
LINE_BREAK_RE = re.compile("\r\n|[\r\n\u2028\u2029]")

COMMENT_KINDS = frozenset({SyntaxKind.LINE_COMMENT, SyntaxKind.BLOCK_COMMENT})
TRIVIA_KINDS = frozenset({SyntaxKind.TRIVIA, SyntaxKind.LINE_BREAK})

_PUNCTUATION = {
    "{": SyntaxKind.OPEN_BRACE,
    "}": SyntaxKind.CLOSE_BRACE,
    "[": SyntaxKind.OPEN_BRACKET,
    "]": SyntaxKind.CLOSE_BRACKET,
    ",": SyntaxKind.COMMA,
    ":": SyntaxKind.COLON,
}

_KEYWORDS = {
    "true": (SyntaxKind.TRUE_KEYWORD, True),
    "false": (SyntaxKind.FALSE_KEYWORD, False),
    "null": (SyntaxKind.NULL_KEYWORD, None),
}

_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_TRIVIA_RE = re.compile(r"[ \t\v\f\u00a0\u1680\u2000-\u200a\u202f\u205f\u3000\ufeff]+")
_NUMBER_RE = re.compile(r"-?[0-9]*(?:\.[0-9]*)?(?:[eE][+-]?[0-9]*)?")
_STRICT_NUMBER_RE = re.compile(r"-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")
_HEX4_RE = re.compile(r"[0-9a-fA-F]{4}")
# Anything that cannot continue an unquoted word
_WORD_END_RE = re.compile(r"[\s{}\[\],:\"/]")


@dataclass(frozen=True)
class Token:
    """A scanned token; ``value`` holds the decoded literal for values."""

    kind: SyntaxKind
    offset: int
    length: int
    value: Any = None
    error: ScanError = ScanError.NONE

    @property
    def end(self) -> int:
        return self.offset + self.length


def line_start(text: str, offset: int) -> int:
    """Offset of the first character of the line containing ``offset``."""
    return max(text.rfind(ch, 0, offset) for ch in LINE_BREAK_CHARS) + 1


def _scan_string(text: str, start: int) -> Token:
    """Scan a string literal whose opening quote is at ``start``."""
    pos = start + 1
    size = len(text)
    chunks = []
    error = ScanError.NONE

    while True:
        if pos >= size:
            error = ScanError.UNEXPECTED_END_OF_STRING
            break
        ch = text[pos]
        if ch == '"':
            pos += 1
            break
        if ch == "\\":
            pos += 1
            if pos >= size:
                error = ScanError.UNEXPECTED_END_OF_STRING
                break
            esc = text[pos]
            pos += 1
            if esc in _ESCAPES:
                chunks.append(_ESCAPES[esc])
            elif esc == "u":
                match = _HEX4_RE.match(text, pos)
                if match:
                    chunks.append(chr(int(match.group(), 16)))
                    pos = match.end()
                else:
                    error = ScanError.INVALID_UNICODE
            else:
                error = ScanError.INVALID_ESCAPE_CHARACTER
            continue
        # U+2028 and U+2029 are legal inside strings
        if ch in "\r\n":
            error = ScanError.UNEXPECTED_END_OF_STRING
            break
        if ord(ch) < 0x20:
            # Control characters are kept but flagged
            error = ScanError.INVALID_CHARACTER
        chunks.append(ch)
        pos += 1

    return Token(SyntaxKind.STRING_LITERAL, start, pos - start, "".join(chunks), error)


def _scan_number(text: str, start: int) -> Token:
    match = _NUMBER_RE.match(text, start)
    raw = match.group()
    if not _STRICT_NUMBER_RE.fullmatch(raw):
        return Token(SyntaxKind.NUMERIC_LITERAL, start, len(raw), None, ScanError.UNEXPECTED_END_OF_NUMBER)
    try:
        if "." in raw or "e" in raw or "E" in raw:
            value = float(raw)
        else:
            value = int(raw)
    except ValueError:
        # int() refuses literals past the interpreter's digit limit
        value = None
    if value is None or (isinstance(value, float) and math.isinf(value)):
        return Token(SyntaxKind.NUMERIC_LITERAL, start, len(raw), None, ScanError.INVALID_NUMBER_FORMAT)
    return Token(SyntaxKind.NUMERIC_LITERAL, start, len(raw), value)


def _scan_comment(text: str, start: int) -> Token:
    """Scan a comment; ``text[start]`` is ``/``."""
    nxt = text[start + 1:start + 2]
    if nxt == "/":
        pos = start + 2
        while pos < len(text) and text[pos] not in LINE_BREAK_CHARS:
            pos += 1
        return Token(SyntaxKind.LINE_COMMENT, start, pos - start)
    if nxt == "*":
        close = text.find("*/", start + 2)
        if close < 0:
            return Token(SyntaxKind.BLOCK_COMMENT, start, len(text) - start, None,
                         ScanError.UNEXPECTED_END_OF_COMMENT)
        return Token(SyntaxKind.BLOCK_COMMENT, start, close + 2 - start)
    return Token(SyntaxKind.UNKNOWN, start, 1, "/", ScanError.INVALID_CHARACTER)


def tokenize(text: str, start: int = 0) -> Iterator[Token]:
    """
    Yield the tokens of ``text`` from ``start`` to the end, then one EOF token.

    Args:
        text: JSONC source
        start: Offset of a token boundary to begin at

    Yields:
        Token objects, including trivia, line breaks and comments
    """
    pos = start
    size = len(text)

    while pos < size:
        ch = text[pos]

        if ch == "\r" and text.startswith("\r\n", pos):
            token = Token(SyntaxKind.LINE_BREAK, pos, 2)
        elif ch in LINE_BREAK_CHARS:
            token = Token(SyntaxKind.LINE_BREAK, pos, 1)
        elif ch in _PUNCTUATION:
            token = Token(_PUNCTUATION[ch], pos, 1)
        elif ch == '"':
            token = _scan_string(text, pos)
        elif ch == "/":
            token = _scan_comment(text, pos)
        elif ch == "-" or "0" <= ch <= "9":
            token = _scan_number(text, pos)
        else:
            trivia = _TRIVIA_RE.match(text, pos)
            if trivia:
                token = Token(SyntaxKind.TRIVIA, pos, trivia.end() - pos)
            else:
                end = _WORD_END_RE.search(text, pos + 1)
                end_pos = end.start() if end else size
                word = text[pos:end_pos]
                if word in _KEYWORDS:
                    kind, value = _KEYWORDS[word]
                    token = Token(kind, pos, len(word), value)
                else:
                    token = Token(SyntaxKind.UNKNOWN, pos, len(word), word)

        yield token
        pos = token.end

    yield Token(SyntaxKind.EOF, size, 0)
