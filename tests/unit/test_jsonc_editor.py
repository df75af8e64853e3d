"""
Unit tests for comment-preserving JSONC edits.
"""

import pytest

from reactive_config.errors import IllegalArgumentError, IndexOutOfBoundsError, JsoncSyntaxError
from reactive_config.jsonc.editor import REMOVE, Edit, apply_edits, modify, set_value
from reactive_config.jsonc.parser import parse
from reactive_config.models import FormattingOptions


class TestReplace:
    """Replacing existing values."""

    def test_replace_keeps_comments(self):
        text = '{\n    // port\n    "port": 80, // inline\n    "host": "a"\n}\n'
        assert set_value(text, ("port",), 8080) == '{\n    // port\n    "port": 8080, // inline\n    "host": "a"\n}\n'

    def test_equal_value_produces_no_edits(self):
        assert modify('{"a": {"b": [1, 2]}}', ("a",), {"b": [1, 2]}) == []

    def test_boolean_replaces_number(self):
        assert set_value('{"a": 1}', ("a",), True) == '{"a": true}'

    def test_nested_value_uses_line_indent(self):
        text = '{\n    "a": 1\n}'
        assert set_value(text, ("a",), {"b": 2}) == '{\n    "a": {\n        "b": 2\n    }\n}'

    def test_replace_root(self):
        assert set_value("[1]", (), [2]) == "[\n    2\n]"


class TestInsert:
    """Inserting properties and elements."""

    def test_insert_after_last_member_keeps_inline_comment(self):
        text = '{\n    "a": 1 // one\n}'
        assert set_value(text, ("b",), 2) == '{\n    "a": 1, // one\n    "b": 2\n}'

    def test_insert_after_trailing_comma(self):
        text = '{\n    "a": 1,\n}'
        assert set_value(text, ("b",), 2) == '{\n    "a": 1,\n    "b": 2\n}'

    def test_insert_into_empty_object(self):
        assert set_value("{}", ("a",), 1) == '{\n    "a": 1\n}'

    def test_insert_into_comment_only_object(self):
        text = '{\n    // nothing yet\n}'
        assert set_value(text, ("a",), 1) == '{\n    // nothing yet\n    "a": 1\n}'

    def test_missing_parents_are_created(self):
        result = set_value("{}", ("a", "b"), 1)
        assert result == '{\n    "a": {\n        "b": 1\n    }\n}'
        assert parse(result) == {"a": {"b": 1}}

    def test_empty_document_becomes_value(self):
        assert set_value("", ("a", "b"), 1) == '{\n    "a": {\n        "b": 1\n    }\n}'
        assert parse(set_value("", (0,), "x")) == ["x"]

    def test_append_to_inline_array(self):
        assert set_value("[1, 2]", (-1,), 3) == "[1, 2, 3]"

    def test_insert_into_inline_array(self):
        assert set_value("[1, 2]", (0,), 0, is_array_insertion=True) == "[0, 1, 2]"

    def test_append_to_multiline_array(self):
        text = '{\n    "l": [\n        1\n    ]\n}'
        assert set_value(text, ("l", 1), 2) == '{\n    "l": [\n        1,\n        2\n    ]\n}'

    def test_unicode_line_separators_set_indentation(self):
        text = '{\u2028  "a": 1\u2028}'
        assert set_value(text, ("b",), 2) == '{\u2028  "a": 1,\n  "b": 2\u2028}'

    def test_custom_indentation(self):
        options = FormattingOptions(tab_size=2)
        assert set_value("{}", ("a",), [1], options) == '{\n  "a": [\n    1\n  ]\n}'


class TestRemove:
    """Removing members."""

    def test_remove_last_member(self):
        text = '{\n    "a": 1,\n    "b": 2\n}'
        assert set_value(text, ("b",), REMOVE) == '{\n    "a": 1\n}'

    def test_remove_first_member(self):
        text = '{\n    "a": 1,\n    "b": 2\n}'
        assert set_value(text, ("a",), REMOVE) == '{\n    "b": 2\n}'

    def test_remove_only_member(self):
        assert set_value('{"a": 1}', ("a",), REMOVE) == "{}"

    def test_remove_array_element(self):
        assert set_value("[1, 2, 3]", (1,), REMOVE) == "[1, 3]"

    def test_remove_every_duplicate_key(self):
        assert set_value('{"a": 1, "a": 2, "b": 0}', ("a",), REMOVE) == '{"b": 0}'
        assert set_value('{"b": 0, "a": 1, "a": 2}', ("a",), REMOVE) == '{"b": 0}'
        assert set_value('{"a": 1, "a": 2}', ("a",), REMOVE) == "{}"

    def test_remove_scattered_duplicates(self):
        text = '{\n    "a": 1,\n    "b": 0,\n    "a": 2\n}'
        assert set_value(text, ("a",), REMOVE) == '{\n    "b": 0\n}'

    def test_remove_missing_is_noop(self):
        assert modify('{"a": 1}', ("b",), REMOVE) == []
        assert modify('{"a": 1}', ("x", "y"), REMOVE) == []


class TestErrors:
    """Invalid edits raise structured errors."""

    def test_unparsable_text(self):
        with pytest.raises(JsoncSyntaxError):
            modify('{"a": }', ("a",), 1)

    def test_index_out_of_bounds(self):
        with pytest.raises(IndexOutOfBoundsError) as exc_info:
            modify("[1]", (5,), 0)
        assert isinstance(exc_info.value, IndexError)
        assert exc_info.value.length == 1

    def test_index_into_object(self):
        with pytest.raises(IllegalArgumentError):
            modify('{"a": 1}', (0,), 1)

    def test_key_into_scalar(self):
        with pytest.raises(IllegalArgumentError):
            modify('{"a": 1}', ("a", "b"), 2)

    def test_remove_root(self):
        with pytest.raises(IllegalArgumentError):
            modify("{}", (), REMOVE)

    def test_not_json_value(self):
        with pytest.raises(IllegalArgumentError) as exc_info:
            modify("{}", ("a",), object())
        assert isinstance(exc_info.value, ValueError)


class TestApplyEdits:
    """apply_edits ordering and overlap checks."""

    def test_edits_in_any_order(self):
        edits = [Edit(0, 1, "X"), Edit(4, 1, "Y")]
        assert apply_edits("abcdef", list(reversed(edits))) == "XbcdYf"

    def test_overlap_rejected(self):
        with pytest.raises(IllegalArgumentError):
            apply_edits("abcdef", [Edit(0, 3, "X"), Edit(2, 2, "Y")])
