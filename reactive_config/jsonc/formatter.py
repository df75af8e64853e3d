"""
Whitespace-only formatter for JSONC text.

Re-indents a document by rewriting the gaps between tokens. Comments are
tokens too, so they are never altered, and a comment that shares a line with
a value stays on that line.
"""

from typing import List, Optional

from ..models import FormattingOptions
from .editor import Edit, apply_edits
from .scanner import COMMENT_KINDS, LINE_BREAK_RE, TRIVIA_KINDS, SyntaxKind, tokenize

_OPENERS = {SyntaxKind.OPEN_BRACE, SyntaxKind.OPEN_BRACKET}
_CLOSERS = {SyntaxKind.CLOSE_BRACE, SyntaxKind.CLOSE_BRACKET}


def _gap(text: str, start: int, end: int) -> int:
    """Number of line breaks between two offsets."""
    return len(LINE_BREAK_RE.findall(text, start, end))


def format_edits(text: str, options: Optional[FormattingOptions] = None) -> List[Edit]:
    """
    Compute the edits that pretty-print ``text``.

    Args:
        text: JSONC document
        options: Indentation and line terminator settings

    Returns:
        Edits touching whitespace only; empty if the text is already formatted
    """
    options = options or FormattingOptions()
    eol = options.eol
    unit = options.indent_unit

    tokens = [t for t in tokenize(text) if t.kind not in TRIVIA_KINDS and t.kind is not SyntaxKind.EOF]
    if not tokens:
        return []

    def newline(depth: int, breaks: int) -> str:
        return eol * (2 if breaks > 1 else 1) + unit * max(depth, 0)

    edits: List[Edit] = []

    def replace(start: int, end: int, content: str) -> None:
        if text[start:end] != content:
            edits.append(Edit(start, end - start, content))

    replace(0, tokens[0].offset, "")

    depth = 1 if tokens[0].kind in _OPENERS else 0
    for prev, cur in zip(tokens, tokens[1:]):
        breaks = _gap(text, prev.end, cur.offset)
        if cur.kind in _CLOSERS:
            depth -= 1

        if prev.kind is SyntaxKind.LINE_COMMENT:
            content = newline(depth, breaks)
        elif cur.kind in COMMENT_KINDS:
            content = " " if breaks == 0 else newline(depth, breaks)
        elif cur.kind in _CLOSERS:
            content = "" if prev.kind in _OPENERS else newline(depth, breaks)
        elif prev.kind in _OPENERS or prev.kind is SyntaxKind.COMMA:
            content = newline(depth, breaks)
        elif prev.kind is SyntaxKind.BLOCK_COMMENT:
            content = " " if breaks == 0 else newline(depth, breaks)
        elif cur.kind in (SyntaxKind.COMMA, SyntaxKind.COLON):
            content = ""
        else:
            content = " "

        replace(prev.end, cur.offset, content)
        if cur.kind in _OPENERS:
            depth += 1

    last = tokens[-1]
    replace(last.end, len(text), eol if options.insert_final_newline else "")
    return edits


def format_text(text: str, options: Optional[FormattingOptions] = None) -> str:
    """Return ``text`` pretty-printed (see ``format_edits``)."""
    return apply_edits(text, format_edits(text, options))
