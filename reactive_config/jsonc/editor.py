"""
Comment-preserving edits for JSONC text.

``modify`` computes the smallest set of text edits that makes a document hold
a new value at a path; everything outside those edits (comments, blank lines,
key order, untouched values) is kept byte for byte.
"""

import json
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from ..errors import IllegalArgumentError, IndexOutOfBoundsError, JsoncSyntaxError
from ..models import FormattingOptions
from .parser import Node, PathSegment, find_node, find_property, node_value, parse_tree, values_equal
from .scanner import COMMENT_KINDS, LINE_BREAK_RE, SyntaxKind, line_start, tokenize


class _Remove:
    """Marker value: delete the property or element at the path."""

    def __repr__(self) -> str:
        return "REMOVE"


REMOVE = _Remove()


@dataclass(frozen=True)
class Edit:
    """Replace ``length`` characters at ``offset`` with ``content``."""

    offset: int
    length: int
    content: str

    @property
    def end(self) -> int:
        return self.offset + self.length


def apply_edits(text: str, edits: Sequence[Edit]) -> str:
    """
    Apply edits to text.

    Edits are applied from the highest offset down so earlier offsets stay
    valid.

    Raises:
        IllegalArgumentError: If two edits overlap
    """
    ordered = sorted(edits, key=lambda e: (e.offset, e.length))
    result = text
    last_start = len(text) + 1
    for edit in reversed(ordered):
        if edit.end > last_start:
            raise IllegalArgumentError(edit, "overlapping edit")
        result = result[:edit.offset] + edit.content + result[edit.end:]
        last_start = edit.offset
    return result


def serialize(value: Any, options: FormattingOptions, base_indent: str = "") -> str:
    """
    Render a value as JSON text laid out for insertion at ``base_indent``.

    Raises:
        IllegalArgumentError: If the value is not JSON data
    """
    try:
        rendered = json.dumps(value, indent=options.indent_unit, ensure_ascii=False, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise IllegalArgumentError(value, f"not representable as JSON ({e})") from e
    return rendered.replace("\n", options.eol + base_indent)


def _line_indent(text: str, offset: int) -> str:
    """Leading whitespace of the line containing ``offset``."""
    begin = line_start(text, offset)
    end = begin
    while end < len(text) and text[end] in " \t":
        end += 1
    return text[begin:end]


def _starts_line(text: str, offset: int) -> bool:
    """True if only whitespace precedes ``offset`` on its line."""
    return text[line_start(text, offset):offset].strip(" \t") == ""


def _child_indent(text: str, container: Node, options: FormattingOptions) -> str:
    """Indentation for a new member of ``container``."""
    for child in container.children:
        if _starts_line(text, child.offset):
            return _line_indent(text, child.offset)
    return _line_indent(text, container.offset) + options.indent_unit


def _member_tail(text: str, member: Node) -> tuple:
    """
    Inspect what follows a member up to the end of its line.

    Returns:
        (comma_end, line_end): offset just past a trailing comma (or -1 if
        there is none) and offset just past any same-line comments
    """
    comma_end = -1
    line_end = member.end
    for token in tokenize(text, member.end):
        if token.kind is SyntaxKind.TRIVIA:
            continue
        if token.kind is SyntaxKind.COMMA and comma_end < 0:
            comma_end = token.end
            line_end = token.end
            continue
        if token.kind in COMMENT_KINDS:
            line_end = token.end
            if token.kind is SyntaxKind.LINE_COMMENT:
                break
            continue
        break
    return comma_end, line_end


def _insert_member(text: str, container: Node, index: int, content: str,
                   options: FormattingOptions) -> List[Edit]:
    """Insert rendered member ``content`` into an object/array at ``index``."""
    children = container.children
    eol = options.eol

    if not children:
        return _insert_into_empty(text, container, content, options)

    if index < len(children):
        anchor = children[index]
        if _starts_line(text, anchor.offset):
            return [Edit(anchor.offset, 0, content + "," + eol + _line_indent(text, anchor.offset))]
        return [Edit(anchor.offset, 0, content + ", ")]

    previous = children[-1]
    comma_end, line_end = _member_tail(text, previous)
    if not any(_starts_line(text, child.offset) for child in children):
        # Single-line container such as [1, 2]: stay on one line
        if comma_end >= 0:
            return [Edit(comma_end, 0, " " + content)]
        return [Edit(previous.end, 0, ", " + content)]

    addition = eol + _child_indent(text, container, options) + content
    if comma_end >= 0:
        # Existing trailing comma: the new member becomes the last one
        return [Edit(line_end, 0, addition)]
    if line_end == previous.end:
        return [Edit(previous.end, 0, "," + addition)]
    # Keep same-line comments attached to the previous member
    return [Edit(previous.end, 0, ","), Edit(line_end, 0, addition)]


def _insert_into_empty(text: str, container: Node, content: str,
                       options: FormattingOptions) -> List[Edit]:
    eol = options.eol
    indent = _line_indent(text, container.offset) + options.indent_unit
    close_indent = _line_indent(text, container.offset)
    inner_start = container.offset + 1
    inner_end = container.end - 1

    last_comment_end = -1
    for token in tokenize(text[:inner_end], inner_start):
        if token.kind in COMMENT_KINDS:
            last_comment_end = token.end

    if last_comment_end < 0:
        return [Edit(inner_start, inner_end - inner_start, eol + indent + content + eol + close_indent)]

    # Comments-only container: add the member below the last comment
    addition = eol + indent + content
    if not LINE_BREAK_RE.search(text, last_comment_end, inner_end):
        addition += eol + close_indent
    return [Edit(last_comment_end, 0, addition)]


def _remove_members(text: str, container: Node, indices: Sequence[int]) -> List[Edit]:
    """Delete members together with the commas that separate them."""
    children = container.children
    doomed = set(indices)
    kept = [i for i in range(len(children)) if i not in doomed]
    if not kept:
        begin = container.offset + 1
        end = container.end - 1
        return [Edit(begin, end - begin, "")]

    first = kept[0]
    edits = []
    if first > 0:
        # Leading members go up to the first survivor
        edits.append(Edit(children[0].offset, children[first].offset - children[0].offset, ""))
    for index in sorted(doomed):
        if index > first:
            begin = children[index - 1].end
            edits.append(Edit(begin, children[index].end - begin, ""))
    return edits


def modify(
    text: str,
    path: Sequence[PathSegment],
    value: Any,
    options: Optional[FormattingOptions] = None,
    is_array_insertion: bool = False
) -> List[Edit]:
    """
    Compute edits that set ``path`` to ``value`` in ``text``.

    Args:
        text: JSONC document
        path: Keys (str) and indices (int) from the root
        value: New JSON value, or REMOVE to delete the member at ``path``
        options: Layout for inserted text
        is_array_insertion: Insert before the element at the final index
            instead of replacing it

    Returns:
        List of edits; empty when the document already holds ``value``

    Raises:
        JsoncSyntaxError: If ``text`` cannot be parsed
        IllegalArgumentError: If the path conflicts with the document shape
        IndexOutOfBoundsError: If an array index is past the end
    """
    options = options or FormattingOptions()
    root, diagnostics = parse_tree(text, allow_empty_content=True)
    if diagnostics:
        raise JsoncSyntaxError(diagnostics) from diagnostics[0]

    path = list(path)
    if not path:
        return _replace_root(text, root, value, options)

    last = path.pop()
    parent = find_node(root, path)
    # Build missing parents bottom-up; find_node(root, []) is the root itself
    while parent is None and root is not None:
        if value is REMOVE:
            return []
        value = _wrap(last, value)
        last = path.pop()
        parent = find_node(root, path)

    if parent is None:
        # Empty document: the whole path becomes the new root value
        if value is REMOVE:
            return []
        value = _wrap(last, value)
        while path:
            value = _wrap(path.pop(), value)
        return _replace_root(text, root, value, options)

    if parent.type == "object" and isinstance(last, str):
        prop = find_property(parent, last)
        if prop is not None:
            if value is REMOVE:
                # Duplicate keys go too, or an earlier one would resurface
                duplicates = [i for i, child in enumerate(parent.children) if child.key == last]
                return _remove_members(text, parent, duplicates)
            return _replace_node(text, prop.value_node, value, options)
        if value is REMOVE:
            return []
        indent = _child_indent(text, parent, options)
        content = json.dumps(last, ensure_ascii=False) + ": " + serialize(value, options, indent)
        return _insert_member(text, parent, len(parent.children), content, options)

    if parent.type == "array" and isinstance(last, int):
        size = len(parent.children)
        index = size if last == -1 else last
        if value is REMOVE:
            if not 0 <= index < size:
                raise IndexOutOfBoundsError(last, size)
            return _remove_members(text, parent, [index])
        if is_array_insertion or index == size:
            if not 0 <= index <= size:
                raise IndexOutOfBoundsError(last, size)
            indent = _child_indent(text, parent, options)
            return _insert_member(text, parent, index, serialize(value, options, indent), options)
        if not 0 <= index < size:
            raise IndexOutOfBoundsError(last, size)
        return _replace_node(text, parent.children[index], value, options)

    raise IllegalArgumentError(
        last, f"cannot address {type(last).__name__} segment inside a JSON {parent.type}"
    )


def _wrap(segment: PathSegment, value: Any) -> Any:
    return {segment: value} if isinstance(segment, str) else [value]


def _replace_node(text: str, node: Node, value: Any, options: FormattingOptions) -> List[Edit]:
    if values_equal(node_value(node), value):
        return []
    content = serialize(value, options, _line_indent(text, node.offset))
    return [Edit(node.offset, node.length, content)]


def _replace_root(text: str, root: Optional[Node], value: Any, options: FormattingOptions) -> List[Edit]:
    if value is REMOVE:
        raise IllegalArgumentError(value, "the document root cannot be removed")
    if root is not None:
        return _replace_node(text, root, value, options)
    content = serialize(value, options)
    if text.strip() == "":
        return [Edit(0, len(text), content)]
    # Only comments so far: keep them above the value
    return [Edit(len(text), 0, options.eol + content)]


def set_value(
    text: str,
    path: Sequence[PathSegment],
    value: Any,
    options: Optional[FormattingOptions] = None,
    is_array_insertion: bool = False
) -> str:
    """Return ``text`` with ``value`` set at ``path`` (see ``modify``)."""
    return apply_edits(text, modify(text, path, value, options, is_array_insertion))
