"""tests for the balanced-brace scanner."""

from emvlua.decode import BRACKET_KEY
from emvlua.scan import (
    extract_block_after, extract_block_from, keyed_blocks, shallow,
    strip_comments, top_level_objects,
)


class TestExtractBlockAfter:

    def test_simple(self):
        assert extract_block_after("EMV.Auto = { {a} }", "EMV.Auto") == " {a} "

    def test_brace_inside_double_quotes(self):
        text = 'X = { Name = "a}b", Y = 1 }'
        assert extract_block_after(text, "X") == ' Name = "a}b", Y = 1 '

    def test_brace_inside_single_quotes(self):
        text = "X = { N = 'a{', Y = 1 }"
        assert extract_block_after(text, "X") == " N = 'a{', Y = 1 "

    def test_escaped_quote_keeps_string_open(self):
        text = r'X = { Name = "a\"}", Y = 1 }'
        assert extract_block_after(text, "X") == r' Name = "a\"}", Y = 1 '

    def test_escaped_backslash_closes_string(self):
        text = r'X = { Name = "a\\", Y = { 1 } }'
        assert extract_block_after(text, "X") == r' Name = "a\\", Y = { 1 } '

    def test_brace_inside_comment(self):
        text = "X = { -- a } b\n Y = 1 }"
        assert extract_block_after(text, "X") == " -- a } b\n Y = 1 "

    def test_missing_name(self):
        assert extract_block_after("Y = { }", "X") is None

    def test_missing_brace(self):
        assert extract_block_after("X = 5", "X") is None

    def test_unbalanced(self):
        assert extract_block_after("X = { {", "X") is None

    def test_first_occurrence_wins(self):
        assert extract_block_after("X = {1} X = {2}", "X") == "1"


class TestExtractBlockFrom:

    def test_nested(self):
        text = "a = { b = { c } }"
        assert extract_block_from(text, text.index("{", 5)) == " c "

    def test_not_a_brace(self):
        assert extract_block_from("abc", 0) is None

    def test_out_of_range(self):
        assert extract_block_from("{}", 5) is None
        assert extract_block_from("{}", -1) is None


class TestTopLevelObjects:

    def test_siblings(self):
        assert top_level_objects(" {a}, {b = {c}}, ") == ["a", "b = {c}"]

    def test_empty(self):
        assert top_level_objects("") == []

    def test_commented_object_skipped(self):
        assert top_level_objects("-- {x}\n{y}") == ["y"]


class TestKeyedBlocks:

    def test_nested_keys_not_siblings(self):
        block = '["g"] = { ["p"] = {1} }, ["h"] = {2}'
        assert keyed_blocks(block, BRACKET_KEY) == [("g", ' ["p"] = {1} '), ("h", "2")]

    def test_key_in_comment_ignored(self):
        block = '-- ["x"] = {9}\n["y"] = {1}'
        assert keyed_blocks(block, BRACKET_KEY) == [("y", "1")]


class TestMasking:

    def test_shallow_blanks_nested(self):
        text = "a = {b}, c"
        out = shallow(text)
        assert out == "a = { }, c"
        assert len(out) == len(text)

    def test_shallow_keeps_strings(self):
        assert shallow('N = "x{y}"') == 'N = "x{y}"'

    def test_strip_comments(self):
        text = "x -- hi\ny"
        out = strip_comments(text)
        assert len(out) == len(text)
        assert "hi" not in out
        assert out.startswith("x")
        assert out.endswith("\ny")

    def test_strip_long_comment(self):
        out = strip_comments("a --[[ one\ntwo ]] b")
        assert "one" not in out
        assert "two" not in out
        assert out.endswith(" b")
