"""
JSON with comments: scanning, parsing, comment-preserving edits and formatting.
"""

from .editor import REMOVE, Edit, apply_edits, modify, serialize, set_value
from .formatter import format_edits, format_text
from .parser import (
    AccessPath,
    Node,
    ParseDiagnostic,
    ParseErrorCode,
    find_node,
    node_value,
    offset_to_position,
    parse,
    parse_tree,
    values_equal,
)
from .scanner import ScanError, SyntaxKind, Token, tokenize

__all__ = [
    "AccessPath",
    "Edit",
    "Node",
    "ParseDiagnostic",
    "ParseErrorCode",
    "REMOVE",
    "ScanError",
    "SyntaxKind",
    "Token",
    "apply_edits",
    "find_node",
    "format_edits",
    "format_text",
    "modify",
    "node_value",
    "offset_to_position",
    "parse",
    "parse_tree",
    "serialize",
    "set_value",
    "tokenize",
    "values_equal",
]
