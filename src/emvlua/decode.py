"""decode.py - turn extracted blocks into records.

one decoder per table family. each walks its block with the scanner and
asks fields.py for the values it cares about. a field that is not there
stays None; an object that is half broken still becomes a record.

in the world: sorting the mail. every envelope gets a slot, even the ones
with a smudged address.
"""

import re
from typing import Optional

from emvlua import log
from emvlua.fields import (
    IDENT, INDEXED_PLACEMENT_RE, PLACEMENT_RE, STRING,
    parse_entries, parse_int_list, placement_from_match,
    read_angle, read_block, read_int_list, read_label, read_number,
    read_rgba, read_string, read_string_or_ident, read_vector,
)
from emvlua.scan import (
    extract_block_after, extract_block_from, keyed_blocks, shallow,
    top_level_objects,
)
from emvlua.types import (
    Component, Group, Indicators, Lamp, LampEntry, NamedPosition, Option,
    Patterns, Sections, Sequence, SequenceLight, StateMeta,
)

BRACKET_KEY = re.compile(r'\["([^"]+)"\]\s*=\s*\{')
NAME_KEY = re.compile(rf"(?<![A-Za-z0-9_.])({IDENT})\s*=\s*\{{")
SEQUENCE_GROUP_KEY = re.compile(r"(?<![A-Za-z0-9_.])(Sequences|Traffic|Illumination)\s*=\s*\{")
STATE_ASSIGN = re.compile(rf"PI\.States\.({IDENT})\s*=\s*\{{")
POSITION_ASSIGN = re.compile(r"PI\.Positions" + INDEXED_PLACEMENT_RE.pattern)
_COMPONENT_DICT = re.compile(r'\["([^"]+)"\]\s*=\s*' + STRING)


def is_lamps_dict(block: str) -> bool:
    """True when an EMV.Lamps block uses ["name"] = { ... } keys."""
    return BRACKET_KEY.search(block) is not None


# ============================================================
# EMV.Auto / EMV.Selections
# ============================================================

def decode_auto(block: str) -> list[Component]:
    """components in parse order, indexed from 1."""
    items = []
    for i, obj in enumerate(top_level_objects(block), start=1):
        view = shallow(obj)
        items.append(Component(
            index=i,
            id=read_string(view, "ID") or "",
            scale=read_number(view, "Scale"),
            pos=read_vector(view, "Pos"),
            ang=read_angle(view, "Ang"),
            color1=read_string_or_ident(view, "Color1"),
            color2=read_string_or_ident(view, "Color2"),
            phase=read_string(view, "Phase"),
        ))
    log.debug("decode", f"EMV.Auto: {len(items)} components")
    return items


def decode_options(body: str) -> list[Option]:
    options = []
    for obj in top_level_objects(body):
        view = shallow(obj)
        options.append(Option(
            name=read_string(view, "Name") or "",
            auto=read_int_list(obj, "Auto", view) or [],
        ))
    return options


def decode_selections(block: str) -> list[Group]:
    groups = []
    for obj in top_level_objects(block):
        view = shallow(obj)
        name = read_string(view, "Name")
        body = read_block(obj, "Options", view)
        groups.append(Group(
            name=name if name is not None else "Unnamed",
            options=decode_options(body) if body else [],
        ))
    log.debug("decode", f"EMV.Selections: {len(groups)} groups")
    return groups


# ============================================================
# EMV.Lamps
# ============================================================

def decode_lamps(block: str) -> list[Lamp]:
    """array dialect. index is parse order, like EMV.Auto."""
    lamps = []
    for i, obj in enumerate(top_level_objects(block), start=1):
        view = shallow(obj)
        lamps.append(Lamp(
            index=i,
            id=read_string(view, "ID"),
            pos=read_vector(view, "Pos"),
            ang=read_angle(view, "Ang"),
            color=read_string_or_ident(view, "Color"),
        ))
    log.debug("decode", f"EMV.Lamps: {len(lamps)} array lamps")
    return lamps


def decode_lamps_meta(block: str) -> dict[str, LampEntry]:
    """dictionary dialect: ["name"] = { Color = Color(...), ... }."""
    lamps = {}
    for name, inner in keyed_blocks(block, BRACKET_KEY):
        lamps[name] = LampEntry(
            color=read_rgba(inner, "Color"),
            texture=read_string(inner, "Texture"),
            near=read_number(inner, "Near"),
            fov=read_number(inner, "FOV"),
            distance=read_number(inner, "Distance"),
        )
    log.debug("decode", f"EMV.Lamps: {len(lamps)} named lamps")
    return lamps


# ============================================================
# EMV.Sequences
# ============================================================

def _sequence_components(group: str, body: str):
    if group == "Illumination":
        return parse_entries(body) or None
    pairs = _COMPONENT_DICT.findall(body)
    if pairs:
        return dict(pairs)
    return parse_int_list(body) or None


def _sequence_lights(body: str) -> Optional[list[SequenceLight]]:
    lights = []
    for m in PLACEMENT_RE.finditer(body):
        placed = placement_from_match(m)
        if placed is not None:
            lights.append(SequenceLight(*placed))
    return lights or None


def decode_sequence(group: str, obj: str) -> Sequence:
    """one sequence object. what Components means depends on the group."""
    view = shallow(obj)
    name = read_string(view, "Name")
    seq = Sequence(name=name if name is not None else "Unnamed", group=group)
    seq.stage = read_label(view, "Stage")

    comps = read_block(obj, "Components", view)
    if comps is not None:
        seq.components = _sequence_components(group, comps)

    if group == "Illumination":
        lights = read_block(obj, "Lights", view)
        if lights is not None:
            seq.lights = _sequence_lights(lights)

    seq.disconnect = read_int_list(obj, "Disconnect", view)
    return seq


def decode_sequences(block: str) -> list[Sequence]:
    """Sequences / Traffic / Illumination sub-tables, flattened in order.

    a block with none of the group keys is a flat list of sequence
    objects, all belonging to Sequences.
    """
    groups = keyed_blocks(block, SEQUENCE_GROUP_KEY)
    if not groups:
        groups = [("Sequences", block)]
    result = []
    for group, inner in groups:
        for obj in top_level_objects(inner):
            result.append(decode_sequence(group, obj))
    log.debug("decode", f"EMV.Sequences: {len(result)} sequences")
    return result


# ============================================================
# EMV.Sections / EMV.Patterns
# ============================================================

def decode_sections(block: str) -> Sections:
    """["name"] = { { {1, R, 1}, ... }, { ... } } -> name: [stage entries]."""
    sections = {}
    for name, inner in keyed_blocks(block, BRACKET_KEY):
        stages = []
        for stage in top_level_objects(inner):
            entries = parse_entries(stage)
            if entries:
                stages.append(entries)
        if not stages:
            # a single unwrapped stage: ["name"] = { {1, R, 1}, {2, B, 1} }
            flat = parse_entries(inner)
            if flat:
                stages.append(flat)
        sections[name] = stages
    log.debug("decode", f"EMV.Sections: {len(sections)} sections")
    return sections


def decode_patterns(block: str) -> Patterns:
    """["group"] = { ["pattern"] = { 1, 2, 3 } }."""
    patterns = {}
    for group, inner in keyed_blocks(block, BRACKET_KEY):
        patterns[group] = {
            name: parse_int_list(body) for name, body in keyed_blocks(inner, BRACKET_KEY)
        }
    log.debug("decode", f"EMV.Patterns: {len(patterns)} groups")
    return patterns


# ============================================================
# PI
# ============================================================

def decode_positions(block: str) -> dict[int, NamedPosition]:
    """[n] = {Vector(...), Angle(...), "name"} entries."""
    positions = {}
    for m in INDEXED_PLACEMENT_RE.finditer(block):
        placed = placement_from_match(m, offset=1)
        if placed is not None:
            positions[int(m.group(1))] = NamedPosition(*placed)
    return positions


def decode_meta(block: str) -> dict[str, StateMeta]:
    meta = {}
    for name, inner in keyed_blocks(block, NAME_KEY):
        meta[name] = StateMeta(
            angle_offset=read_number(inner, "AngleOffset"),
            w=read_number(inner, "W"),
            h=read_number(inner, "H"),
            sprite=read_string(inner, "Sprite"),
            scale=read_number(inner, "Scale"),
            vis_radius=read_number(inner, "VisRadius"),
            w_mult=read_number(inner, "WMult"),
        )
    return meta


def decode_states(text: str) -> dict:
    """PI.States from both source shapes, merged; later names win.

    pass 1: PI.States.Name = {...} assignments anywhere in the text.
    pass 2: Name = {...} entries inside one PI.States = {...} table.
    """
    states = {}
    for m in STATE_ASSIGN.finditer(text):
        inner = extract_block_from(text, m.end() - 1) or ""
        states[m.group(1)] = parse_entries(inner)

    block = extract_block_after(text, "PI.States")
    if block:
        for name, inner in keyed_blocks(block, NAME_KEY):
            states[name] = parse_entries(inner)
    return states


def decode_indicators(text: str) -> Optional[Indicators]:
    """PI.States, PI.Positions and PI.Meta, scanned over the whole text."""
    states = decode_states(text)

    block = extract_block_after(text, "PI.Positions")
    positions = decode_positions(block) if block else None
    for m in POSITION_ASSIGN.finditer(text):
        placed = placement_from_match(m, offset=1)
        if placed is None:
            continue
        if positions is None:
            positions = {}
        positions[int(m.group(1))] = NamedPosition(*placed)

    block = extract_block_after(text, "PI.Meta")
    meta = decode_meta(block) if block else None

    if not states and positions is None and meta is None and "PI.States" not in text:
        return None
    log.debug("decode", f"PI: {len(states)} states, {len(positions or {})} positions, "
                        f"{len(meta or {})} meta")
    return Indicators(states=states, positions=positions, meta=meta)
