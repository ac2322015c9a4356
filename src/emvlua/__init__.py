"""emvlua: reads EMV lighting tables out of loose Lua, writes them back the same way."""

from emvlua.parser import parse, parse_cached, ParseCache
from emvlua.encode import (
    encode_auto, encode_selections, encode_indicators, encode_lamps,
    encode_sequences, encode_sections, encode_patterns, encode_document,
)
from emvlua.edit import (
    get_collection, remove_component, add_component, duplicate_component,
    link_component, update_component,
)
from emvlua.validate import Issue, find_issues
from emvlua.types import (
    Document, Component, Group, Option, Indicators, Lamp, LampEntry,
    Sequence, Vec, Ang, ColorRef, RGBA, Entry,
)

__all__ = [
    "parse", "parse_cached", "ParseCache",
    "encode_auto", "encode_selections", "encode_indicators", "encode_lamps",
    "encode_sequences", "encode_sections", "encode_patterns", "encode_document",
    "get_collection", "remove_component", "add_component", "duplicate_component",
    "link_component", "update_component",
    "Issue", "find_issues",
    "Document", "Component", "Group", "Option", "Indicators", "Lamp", "LampEntry",
    "Sequence", "Vec", "Ang", "ColorRef", "RGBA", "Entry",
]
