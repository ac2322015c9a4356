"""tests for the field readers."""

from emvlua.fields import (
    is_identifier, parse_entries, parse_int_list, read_angle, read_int_list,
    read_label, read_number, read_rgba, read_string, read_string_or_ident,
    read_vector, to_number,
)
from emvlua.types import Ang, ColorRef, Entry, RGBA, Vec


class TestScalars:

    def test_read_string(self):
        assert read_string('ID = "A1", Scale = 1', "ID") == "A1"

    def test_read_string_escaped_quote(self):
        text = r'ID = "say \"hi\"", Scale = 1'
        assert read_string(text, "ID") == r'say \"hi\"'

    def test_read_string_escaped_backslash(self):
        assert read_string(r'ID = "a\\", Scale = 1', "ID") == r"a\\"

    def test_read_string_missing(self):
        assert read_string("Scale = 1", "ID") is None

    def test_field_name_must_stand_alone(self):
        assert read_string('XID = "A1"', "ID") is None

    def test_order_does_not_matter(self):
        text = 'Scale = 2, ID = "late"'
        assert read_string(text, "ID") == "late"
        assert read_number(text, "Scale") == 2

    def test_read_number(self):
        assert read_number("Scale = -0.5", "Scale") == -0.5

    def test_read_number_exponent(self):
        assert read_number("Scale = 1e-05", "Scale") == 1e-05
        assert read_number("Scale = 2.5E+2", "Scale") == 250

    def test_read_number_not_a_number(self):
        assert read_number("Scale = big", "Scale") is None

    def test_color_quoted(self):
        assert read_string_or_ident('Color1 = "WHITE"', "Color1") == ColorRef("WHITE", quoted=True)

    def test_color_bare(self):
        assert read_string_or_ident("Color1 = AMBER", "Color1") == ColorRef("AMBER", quoted=False)

    def test_color_named_like_its_field(self):
        assert read_string_or_ident("Color1 = Color1", "Color1") == ColorRef("Color1", quoted=False)

    def test_color_quoted_with_escape(self):
        got = read_string_or_ident(r'Color1 = "A\"B"', "Color1")
        assert got == ColorRef(r'A\"B', quoted=True)

    def test_color_missing(self):
        assert read_string_or_ident("Color2 = AMBER", "Color1") is None

    def test_prefix_field_not_matched(self):
        assert read_string_or_ident("Color1 = RED", "Color") is None

    def test_label(self):
        assert read_label('Stage = "M1"', "Stage") == "M1"
        assert read_label("Stage = M2", "Stage") == "M2"
        assert read_label("Stage = 3", "Stage") == "3"


class TestConstructors:

    def test_vector(self):
        assert read_vector("Pos = Vector(1, -2.5, 3)") == Vec(1, -2.5, 3)

    def test_vector_leading_dot(self):
        assert read_vector("Pos = Vector( .5 , 2, 3 )") == Vec(0.5, 2, 3)

    def test_vector_with_junk(self):
        assert read_vector("Pos = Vector(1, x, 3)") is None

    def test_vector_two_parts(self):
        assert read_vector("Pos = Vector(1, 2)") is None

    def test_angle(self):
        assert read_angle("Ang = Angle(0, 90, 0)") == Ang(0, 90, 0)

    def test_rgba(self):
        assert read_rgba("Color = Color(255, 128, 0, 200)") == RGBA(255, 128, 0, 200)

    def test_rgb(self):
        assert read_rgba("Color = Color(255, 128, 0)") == RGBA(255, 128, 0, None)


class TestLists:

    def test_int_list(self):
        assert parse_int_list("1, 2,3 -- 4") == [1, 2, 3]

    def test_read_int_list(self):
        assert read_int_list("Auto = {4, 5}", "Auto") == [4, 5]
        assert read_int_list("Auto = {}", "Auto") == []
        assert read_int_list("Name = 1", "Auto") is None

    def test_entries(self):
        got = parse_entries('{1, "R", 1}, {2, B, 0.5}')
        assert got == [Entry(1, "R", 1.0), Entry(2, "B", 0.5)]

    def test_entries_escaped_code(self):
        assert parse_entries(r'{1, "R\"", 1}') == [Entry(1, r'R\"', 1.0)]

    def test_entries_skip_malformed(self):
        assert parse_entries("{1, R}, {2, B, 1}") == [Entry(2, "B", 1.0)]


class TestHelpers:

    def test_is_identifier(self):
        assert is_identifier("AMBER")
        assert is_identifier("_x1")
        assert not is_identifier("LIGHT BLUE")
        assert not is_identifier("1A")

    def test_to_number(self):
        assert to_number("12abc") == 12.0
        assert to_number(" -3.5") == -3.5
        assert to_number("abc") is None
