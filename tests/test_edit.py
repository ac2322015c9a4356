"""tests for structural edits and index bookkeeping."""

import pytest

from emvlua.edit import (
    add_component, duplicate_component, get_collection, link_component,
    new_component, remove_component, update_component,
)
from emvlua.types import Ang, ColorRef, Component, Document, Group, Option, Vec


def _doc():
    return Document(
        auto=[Component(1, id="A"), Component(2, id="B"), Component(3, id="C")],
        selections=[
            Group("G", [Option("O1", [3, 2, 1]), Option("O2", [2])]),
            Group("H", [Option("X", [1, 3])]),
        ],
    )


class TestRemove:

    def test_renumbers_components(self):
        out = remove_component(_doc(), 2)
        assert [(c.index, c.id) for c in out.auto] == [(1, "A"), (2, "C")]

    def test_fixes_option_references(self):
        out = remove_component(_doc(), 2)
        assert out.selections[0].options[0].auto == [2, 1]
        assert out.selections[0].options[1].auto == []
        assert out.selections[1].options[0].auto == [1, 2]

    def test_first(self):
        out = remove_component(_doc(), 1)
        assert [(c.index, c.id) for c in out.auto] == [(1, "B"), (2, "C")]
        assert out.selections[1].options[0].auto == [2]

    def test_missing_index_is_noop(self):
        doc = _doc()
        assert remove_component(doc, 9) == doc

    def test_input_untouched(self):
        doc = _doc()
        remove_component(doc, 1)
        assert [c.index for c in doc.auto] == [1, 2, 3]
        assert doc.selections[0].options[0].auto == [3, 2, 1]


class TestAdd:

    def test_defaults(self):
        c = new_component(4)
        assert c.index == 4
        assert c.id == "New Component"
        assert c.scale == 1
        assert c.pos == Vec(0, 0, 0)
        assert c.ang == Ang(0, 0, 0)
        assert c.color1 == ColorRef("AMBER")
        assert c.color2 == ColorRef("AMBER")

    def test_next_index(self):
        out = add_component(_doc())
        assert out.auto[-1].index == 4
        assert out.auto[-1].id == "New Component"

    def test_fields_override(self):
        out = add_component(_doc(), id="Spot")
        assert out.auto[-1].id == "Spot"

    def test_linked(self):
        out = add_component(_doc(), group=1, option=0)
        assert out.selections[1].options[0].auto == [1, 3, 4]

    def test_input_untouched(self):
        doc = _doc()
        add_component(doc)
        assert len(doc.auto) == 3


class TestDuplicate:

    def test_copy_at_next_index(self):
        out = duplicate_component(_doc(), 2)
        assert out.auto[-1] == Component(4, id="B")

    def test_linked(self):
        out = duplicate_component(_doc(), 1, group=0, option=1)
        assert out.selections[0].options[1].auto == [2, 4]

    def test_missing_source(self):
        doc = _doc()
        assert duplicate_component(doc, 9) == doc


class TestLinkAndUpdate:

    def test_link(self):
        out = link_component(_doc(), 2, 1, 0)
        assert out.selections[1].options[0].auto == [1, 3, 2]

    def test_update(self):
        out = update_component(_doc(), 3, id="Deck", phase="B")
        assert out.component(3) == Component(3, id="Deck", phase="B")
        assert out.component(1).id == "A"

    def test_update_missing_is_noop(self):
        doc = _doc()
        assert update_component(doc, 9, id="Z") == doc


class TestGetCollection:

    def test_present(self):
        assert get_collection(_doc(), "auto")[0].id == "A"

    def test_unknown(self):
        with pytest.raises(KeyError):
            get_collection(_doc(), "nope")

    def test_absent(self):
        with pytest.raises(KeyError):
            get_collection(_doc(), "patterns")
