"""types.py - the records a lighting file decodes into.

plain dataclasses. no behavior beyond small conveniences; decoders build
them, encoders read them, edit.py copies them.
"""

from dataclasses import dataclass, field
from typing import Optional, Union


SEQUENCE_GROUPS = ("Sequences", "Traffic", "Illumination")


@dataclass
class Vec:
    """Vector(x, y, z)."""
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Ang:
    """Angle(p, y, r)."""
    p: float = 0.0
    y: float = 0.0
    r: float = 0.0


@dataclass
class ColorRef:
    """a colour written either as "WHITE" or as a bare name like AMBER.

    quoted is True for a string literal, False for an identifier and None
    when nobody recorded how it was written.
    """
    value: str
    quoted: Optional[bool] = None


@dataclass
class RGBA:
    """Color(r, g, b[, a])."""
    r: float
    g: float
    b: float
    a: Optional[float] = None


# ============================================================
# EMV.Auto / EMV.Selections
# ============================================================

@dataclass
class Component:
    """one EMV.Auto item. index is parse order, never read from source."""
    index: int
    id: str = ""
    scale: Optional[float] = None
    pos: Optional[Vec] = None
    ang: Optional[Ang] = None
    color1: Optional[ColorRef] = None
    color2: Optional[ColorRef] = None
    phase: Optional[str] = None


@dataclass
class Option:
    name: str = ""
    auto: list[int] = field(default_factory=list)


@dataclass
class Group:
    name: str = ""
    options: list[Option] = field(default_factory=list)


# ============================================================
# PI (indicator states, positions, meta)
# ============================================================

@dataclass
class Entry:
    """{index, COLOR, value} - used by PI.States, EMV.Sections and Illumination."""
    index: int
    color: str
    value: float


@dataclass
class NamedPosition:
    pos: Vec
    ang: Ang
    name: Optional[str] = None


@dataclass
class StateMeta:
    angle_offset: Optional[float] = None
    w: Optional[float] = None
    h: Optional[float] = None
    sprite: Optional[str] = None
    scale: Optional[float] = None
    vis_radius: Optional[float] = None
    w_mult: Optional[float] = None


@dataclass
class Indicators:
    states: dict[str, list[Entry]] = field(default_factory=dict)
    positions: Optional[dict[int, NamedPosition]] = None
    meta: Optional[dict[str, StateMeta]] = None


# ============================================================
# EMV.Lamps (two dialects)
# ============================================================

@dataclass
class Lamp:
    """array dialect: { ID = "...", Pos = Vector(...), Color = AMBER }."""
    index: int
    id: Optional[str] = None
    pos: Optional[Vec] = None
    ang: Optional[Ang] = None
    color: Optional[ColorRef] = None


@dataclass
class LampEntry:
    """dictionary dialect: ["name"] = { Color = Color(...), Texture = "..." }."""
    color: Optional[RGBA] = None
    texture: Optional[str] = None
    near: Optional[float] = None
    fov: Optional[float] = None
    distance: Optional[float] = None


# ============================================================
# EMV.Sequences
# ============================================================

@dataclass
class SequenceLight:
    pos: Vec
    ang: Ang
    name: Optional[str] = None


SequenceComponents = Union[dict[str, str], list[int], list[Entry]]


@dataclass
class Sequence:
    name: str
    group: str = "Sequences"
    stage: Optional[str] = None
    components: Optional[SequenceComponents] = None
    lights: Optional[list[SequenceLight]] = None
    disconnect: Optional[list[int]] = None


Sections = dict[str, list[list[Entry]]]
Patterns = dict[str, dict[str, list[int]]]


# ============================================================
# AGGREGATE
# ============================================================

@dataclass
class Document:
    """everything parse() found. auto and selections are always lists."""
    auto: list[Component] = field(default_factory=list)
    selections: list[Group] = field(default_factory=list)
    indicators: Optional[Indicators] = None
    lamps: list[Lamp] = field(default_factory=list)
    lamps_meta: Optional[dict[str, LampEntry]] = None
    sequences: list[Sequence] = field(default_factory=list)
    sections: Optional[Sections] = None
    patterns: Optional[Patterns] = None

    def component(self, index: int) -> Optional[Component]:
        for c in self.auto:
            if c.index == index:
                return c
        return None
