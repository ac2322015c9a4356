"""encode.py - records back to Lua text.

every encoder mirrors a decoder in decode.py. whatever one writes, the
other reads back into the same records. output is diffed by people and
tools, so the layout below is fixed:

- numbers: bare integer when whole, else two decimals
- colours: bare when identifier-shaped and not written quoted, else quoted
- optional fields are left out, except Traffic `Components = {}` and
  every sequence's `Disconnect = {}`
"""

from decimal import Decimal
from typing import Optional, Union

from emvlua.fields import is_identifier
from emvlua.types import (
    Ang, ColorRef, Component, Document, Entry, Group, Indicators, Lamp,
    LampEntry, Patterns, SEQUENCE_GROUPS, Sections, Sequence, Vec,
)


# ============================================================
# PRIMITIVES
# ============================================================

def fmt_number(n: float) -> str:
    """1 -> "1", 1.5 -> "1.50", -10.25 -> "-10.25"."""
    n = float(n)
    if n.is_integer():
        return str(int(n))
    return f"{n:.2f}"


def fmt_plain(n: float) -> str:
    """shortest fixed-point literal: 1 -> "1", 1.25 -> "1.25", 1e-05 -> "0.00001".

    used for Scale. never exponent form.
    """
    n = float(n)
    if n.is_integer():
        return str(int(n))
    return format(Decimal(repr(n)), "f")


def fmt_color(color: Union[ColorRef, str]) -> str:
    if isinstance(color, str):
        color = ColorRef(color)
    if color.quoted:
        return f'"{color.value}"'
    if is_identifier(color.value):
        return color.value
    return f'"{color.value}"'


def fmt_vector(v: Vec) -> str:
    return f"Vector({fmt_number(v.x)}, {fmt_number(v.y)}, {fmt_number(v.z)})"


def fmt_angle(a: Ang) -> str:
    return f"Angle({fmt_number(a.p)}, {fmt_number(a.y)}, {fmt_number(a.r)})"


def fmt_entry(e: Entry) -> str:
    return f"{{{e.index}, {fmt_color(e.color)}, {fmt_number(e.value)}}}"


def fmt_ints(nums) -> str:
    return ", ".join(str(n) for n in nums)


def _comma(i: int, n: int) -> str:
    return "," if i < n - 1 else ""


# ============================================================
# EMV.Auto / EMV.Selections
# ============================================================

def usage_map(selections: list[Group]) -> dict[int, dict[str, list[str]]]:
    """component index -> group name -> option names that reference it."""
    usage: dict[int, dict[str, list[str]]] = {}
    for group in selections:
        group_name = group.name or "(unnamed)"
        for opt in group.options:
            opt_name = opt.name or "(unnamed option)"
            for idx in opt.auto:
                names = usage.setdefault(idx, {}).setdefault(group_name, [])
                if opt_name not in names:
                    names.append(opt_name)
    return usage


def _usage_comment(index: int, usage: dict) -> str:
    used_by = usage.get(index)
    if not used_by:
        return "  -- Not referenced in any selection"
    parts = [f"{group} ({', '.join(opts)})" for group, opts in used_by.items()]
    return f"  -- Used in selections: {'; '.join(parts)}"


def _component_fields(c: Component) -> list[str]:
    fields = []
    if c.id:
        fields.append(f'ID = "{c.id}"')
    if c.scale is not None:
        fields.append(f"Scale = {fmt_plain(c.scale)}")
    if c.pos:
        fields.append(f"Pos = {fmt_vector(c.pos)}")
    if c.ang:
        fields.append(f"Ang = {fmt_angle(c.ang)}")
    if c.color1 and c.color1.value:
        fields.append(f"Color1 = {fmt_color(c.color1)}")
    if c.color2 and c.color2.value:
        fields.append(f"Color2 = {fmt_color(c.color2)}")
    if c.phase:
        fields.append(f'Phase = "{c.phase}"')
    return fields


def encode_auto(auto: list[Component], selections: Optional[list[Group]] = None,
                usage: Optional[bool] = None) -> str:
    """EMV.Auto table.

    with usage on, each component is preceded by a comment naming the
    groups and options that reference it. usage defaults to on whenever
    selections are passed.
    """
    if usage is None:
        usage = selections is not None
    refs = usage_map(selections or [])

    lines = ["EMV.Auto = {"]
    for i, c in enumerate(auto):
        if usage:
            lines.append(_usage_comment(c.index, refs))
        lines.append(f"  {{ {', '.join(_component_fields(c))} }}{_comma(i, len(auto))}")
    lines.append("}")
    return "\n".join(lines)


def encode_selections(selections: list[Group]) -> str:
    lines = ["EMV.Selections = {"]
    for si, group in enumerate(selections):
        lines.append("  {")
        lines.append(f'    Name = "{group.name}",')
        lines.append("    Options = {")
        for oi, opt in enumerate(group.options):
            lines.append("      {")
            lines.append(f'        Name = "{opt.name}",')
            lines.append(f"        Auto = {{{fmt_ints(opt.auto)}}}")
            lines.append(f"      }}{_comma(oi, len(group.options))}")
        lines.append("    }")
        lines.append(f"  }}{_comma(si, len(selections))}")
    lines.append("}")
    return "\n".join(lines)


# ============================================================
# PI
# ============================================================

def encode_indicators(pi: Indicators) -> str:
    """PI.Meta (if any), then PI.States, then PI.Positions (if any)."""
    lines = []
    if pi.meta:
        lines.append("PI.Meta = {")
        names = list(pi.meta)
        for i, name in enumerate(names):
            m = pi.meta[name]
            fields = []
            if m.angle_offset is not None:
                fields.append(f"AngleOffset = {fmt_number(m.angle_offset)}")
            if m.w is not None:
                fields.append(f"W = {fmt_number(m.w)}")
            if m.h is not None:
                fields.append(f"H = {fmt_number(m.h)}")
            if m.sprite:
                fields.append(f'Sprite = "{m.sprite}"')
            if m.scale is not None:
                fields.append(f"Scale = {fmt_number(m.scale)}")
            if m.vis_radius is not None:
                fields.append(f"VisRadius = {fmt_number(m.vis_radius)}")
            if m.w_mult is not None:
                fields.append(f"WMult = {fmt_number(m.w_mult)}")
            lines.append(f"  {name} = {{ {', '.join(fields)} }}{_comma(i, len(names))}")
        lines.append("}")
        lines.append("")

    lines.append("PI.States = {}")
    for name, entries in pi.states.items():
        lines.append(f"PI.States.{name} = {{{', '.join(fmt_entry(e) for e in entries)}}}")

    if pi.positions is not None:
        lines.append("")
        lines.append("PI.Positions = {}")
        for idx in sorted(pi.positions):
            p = pi.positions[idx]
            name = f', "{p.name}"' if p.name else ""
            lines.append(f"PI.Positions[{idx}] = {{{fmt_vector(p.pos)}, {fmt_angle(p.ang)}{name}}}")
    return "\n".join(lines)


# ============================================================
# EMV.Lamps
# ============================================================

def encode_lamps_array(lamps: list[Lamp]) -> str:
    lines = ["EMV.Lamps = {"]
    for i, lamp in enumerate(lamps):
        fields = []
        if lamp.id:
            fields.append(f'ID = "{lamp.id}"')
        if lamp.pos:
            fields.append(f"Pos = {fmt_vector(lamp.pos)}")
        if lamp.ang:
            fields.append(f"Ang = {fmt_angle(lamp.ang)}")
        if lamp.color and lamp.color.value:
            fields.append(f"Color = {fmt_color(lamp.color)}")
        lines.append(f"  {{ {', '.join(fields)} }}{_comma(i, len(lamps))}")
    lines.append("}")
    return "\n".join(lines)


def encode_lamps_meta(lamps: dict[str, LampEntry]) -> str:
    lines = ["EMV.Lamps = {"]
    names = list(lamps)
    for i, name in enumerate(names):
        entry = lamps[name]
        fields = []
        if entry.color:
            c = entry.color
            channels = [c.r, c.g, c.b] + ([c.a] if c.a is not None else [])
            fields.append(f"Color = Color({', '.join(fmt_number(x) for x in channels)})")
        if entry.texture:
            fields.append(f'Texture = "{entry.texture}"')
        if entry.near is not None:
            fields.append(f"Near = {fmt_number(entry.near)}")
        if entry.fov is not None:
            fields.append(f"FOV = {fmt_number(entry.fov)}")
        if entry.distance is not None:
            fields.append(f"Distance = {fmt_number(entry.distance)}")
        lines.append(f'  ["{name}"] = {{ {", ".join(fields)} }}{_comma(i, len(names))}')
    lines.append("}")
    return "\n".join(lines)


def encode_lamps(lamps: Optional[list[Lamp]] = None,
                 lamps_meta: Optional[dict[str, LampEntry]] = None) -> str:
    """whichever dialect is populated; the dictionary one wins a tie."""
    if lamps_meta:
        return encode_lamps_meta(lamps_meta)
    return encode_lamps_array(lamps or [])


# ============================================================
# EMV.Sequences
# ============================================================

def _components_field(components) -> str:
    if isinstance(components, dict):
        parts = [f'["{k}"] = "{v}"' for k, v in components.items()]
        return f"Components = {{{', '.join(parts)}}}"
    if components and isinstance(components[0], Entry):
        return f"Components = {{{', '.join(fmt_entry(e) for e in components)}}}"
    return f"Components = {{{fmt_ints(components)}}}"


def _sequence_line(seq: Sequence, group: str) -> str:
    fields = [f'Name = "{seq.name}"']
    if seq.stage is not None:
        fields.append(f'Stage = "{seq.stage}"')
    if seq.components:
        fields.append(_components_field(seq.components))
    elif group == "Traffic":
        fields.append("Components = {}")
    if group == "Illumination" and seq.lights:
        lights = []
        for light in seq.lights:
            name = f', "{light.name}"' if light.name else ""
            lights.append(f"{{{fmt_vector(light.pos)}, {fmt_angle(light.ang)}{name}}}")
        fields.append(f"Lights = {{{', '.join(lights)}}}")
    fields.append(f"Disconnect = {{{fmt_ints(seq.disconnect or [])}}}")
    return f"{{ {', '.join(fields)} }}"


def encode_sequences(sequences: list[Sequence]) -> str:
    """all three groups, always, in Sequences / Traffic / Illumination order."""
    by_group: dict[str, list[Sequence]] = {g: [] for g in SEQUENCE_GROUPS}
    for seq in sequences:
        group = seq.group if seq.group in by_group else "Sequences"
        by_group[group].append(seq)

    lines = ["EMV.Sequences = {"]
    for gi, group in enumerate(SEQUENCE_GROUPS):
        seqs = by_group[group]
        lines.append(f"  {group} = {{")
        for si, seq in enumerate(seqs):
            lines.append(f"    {_sequence_line(seq, group)}{_comma(si, len(seqs))}")
        lines.append(f"  }}{_comma(gi, len(SEQUENCE_GROUPS))}")
    lines.append("}")
    return "\n".join(lines)


# ============================================================
# EMV.Sections / EMV.Patterns
# ============================================================

def encode_sections(sections: Sections) -> str:
    lines = ["EMV.Sections = {"]
    names = list(sections)
    for i, name in enumerate(names):
        stages = ", ".join(
            "{ " + ", ".join(fmt_entry(e) for e in entries) + " }"
            for entries in sections[name]
        )
        lines.append(f'  ["{name}"] = {{ {stages} }}{_comma(i, len(names))}')
    lines.append("}")
    return "\n".join(lines)


def encode_patterns(patterns: Patterns) -> str:
    lines = ["EMV.Patterns = {"]
    groups = list(patterns)
    for gi, group in enumerate(groups):
        lines.append(f'  ["{group}"] = {{')
        names = list(patterns[group])
        for pi, name in enumerate(names):
            nums = patterns[group][name]
            lines.append(f'    ["{name}"] = {{ {fmt_ints(nums)} }}{_comma(pi, len(names))}')
        lines.append(f"  }}{_comma(gi, len(groups))}")
    lines.append("}")
    return "\n".join(lines)


# ============================================================
# WHOLE DOCUMENT
# ============================================================

def encode_document(doc: Document, usage: Optional[bool] = None) -> str:
    """every populated table, separated by blank lines."""
    parts = []
    if doc.auto:
        parts.append(encode_auto(doc.auto, doc.selections, usage=usage))
    if doc.selections:
        parts.append(encode_selections(doc.selections))
    if doc.indicators is not None:
        parts.append(encode_indicators(doc.indicators))
    if doc.lamps or doc.lamps_meta:
        parts.append(encode_lamps(doc.lamps, doc.lamps_meta))
    if doc.sequences:
        parts.append(encode_sequences(doc.sequences))
    if doc.sections is not None:
        parts.append(encode_sections(doc.sections))
    if doc.patterns is not None:
        parts.append(encode_patterns(doc.patterns))
    return "\n\n".join(parts) + "\n" if parts else ""
