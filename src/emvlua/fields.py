"""fields.py - read one field out of a record's inner text.

order-agnostic and forgiving: every reader returns None when its field is
missing or does not look the way it expects. nothing here raises.
"""

import re
from typing import Optional

from emvlua.scan import extract_block_from, strip_comments
from emvlua.types import Ang, ColorRef, Entry, RGBA, Vec

VECTOR = "Vector"
ANGLE = "Angle"

IDENT = r"[A-Za-z_][A-Za-z0-9_]*"
NUMBER = r"[+-]?(?:\d+(?:\.\d+)?|\.\d+)(?:[eE][+-]?\d+)?"
# escapes stay verbatim in the captured text
STRING = r'"((?:[^"\\]|\\.)*)"'

_IDENT_RE = re.compile(rf"^{IDENT}$")
_NUM_PREFIX = re.compile(rf"^\s*({NUMBER})")
_INT_RE = re.compile(r"[+-]?\d+")

_TRIPLE = r"\(\s*([^,()]+?)\s*,\s*([^,()]+?)\s*,\s*([^,()]+?)\s*\)"
_PLACEMENT = (
    rf"{VECTOR}{_TRIPLE}\s*,\s*{ANGLE}{_TRIPLE}"
    r"(?:\s*,\s*" + STRING + ")?"
)
PLACEMENT_RE = re.compile(r"\{\s*" + _PLACEMENT + r"\s*\}")
INDEXED_PLACEMENT_RE = re.compile(r"\[\s*(\d+)\s*\]\s*=\s*\{\s*" + _PLACEMENT + r"\s*\}")

ENTRY_RE = re.compile(
    rf'\{{\s*(\d+)\s*,\s*(?:{STRING}|({IDENT}))\s*,\s*({NUMBER})\s*\}}'
)


def is_identifier(s: str) -> bool:
    return bool(_IDENT_RE.match(s))


def to_number(s: str) -> Optional[float]:
    """leading decimal literal of s as a float, or None."""
    m = _NUM_PREFIX.match(s)
    return float(m.group(1)) if m else None


def _field(name: str) -> str:
    return rf"(?<![A-Za-z0-9_.]){re.escape(name)}\s*=\s*"


# ============================================================
# SCALARS
# ============================================================

def read_string(text: str, name: str) -> Optional[str]:
    """`name = "..."` -> inner text verbatim."""
    m = re.search(_field(name) + STRING, text)
    return m.group(1) if m else None


def read_string_or_ident(text: str, name: str) -> Optional[ColorRef]:
    """`name = "WHITE"` or `name = AMBER`, tagged with how it was written."""
    m = re.search(_field(name) + STRING, text)
    if m:
        return ColorRef(m.group(1), quoted=True)
    m = re.search(_field(name) + rf"({IDENT})", text)
    if m:
        return ColorRef(m.group(1), quoted=False)
    return None


def read_label(text: str, name: str) -> Optional[str]:
    """`name = "M1"`, `name = M1` or `name = 1`, always as text."""
    s = read_string(text, name)
    if s is not None:
        return s
    m = re.search(_field(name) + r"([A-Za-z0-9_.+-]+)", text)
    return m.group(1) if m else None


def read_number(text: str, name: str) -> Optional[float]:
    m = re.search(_field(name) + rf"({NUMBER})", text)
    return float(m.group(1)) if m else None


# ============================================================
# CONSTRUCTORS
# ============================================================

def _triple(parts) -> Optional[tuple[float, float, float]]:
    nums = [to_number(p) for p in parts]
    if any(n is None for n in nums):
        return None
    return nums[0], nums[1], nums[2]


def read_triple(text: str, name: str, ctor: str) -> Optional[tuple[float, float, float]]:
    """`name = Ctor(a, b, c)` -> (a, b, c)."""
    m = re.search(_field(name) + re.escape(ctor) + _TRIPLE, text)
    if not m:
        return None
    return _triple(m.groups())


def read_vector(text: str, name: str = "Pos") -> Optional[Vec]:
    t = read_triple(text, name, VECTOR)
    return Vec(*t) if t else None


def read_angle(text: str, name: str = "Ang") -> Optional[Ang]:
    t = read_triple(text, name, ANGLE)
    return Ang(*t) if t else None


def read_rgba(text: str, name: str = "Color") -> Optional[RGBA]:
    """`name = Color(r, g, b[, a])`."""
    m = re.search(
        _field(name) + rf"Color\(\s*({NUMBER})\s*,\s*({NUMBER})\s*,\s*({NUMBER})"
        rf"(?:\s*,\s*({NUMBER}))?\s*\)",
        text,
    )
    if not m:
        return None
    a = float(m.group(4)) if m.group(4) is not None else None
    return RGBA(float(m.group(1)), float(m.group(2)), float(m.group(3)), a)


# ============================================================
# LISTS
# ============================================================

def parse_int_list(text: str) -> list[int]:
    """every integer in a comma/space separated list body."""
    return [int(tok) for tok in _INT_RE.findall(strip_comments(text))]


def read_block(text: str, name: str, view: Optional[str] = None) -> Optional[str]:
    """inner text of `name = { ... }` inside a record.

    view, when given, is an offset-preserving copy of text (see
    scan.shallow) used to locate the field; the block comes from text.
    """
    m = re.search(_field(name) + r"\{", view if view is not None else text)
    if not m:
        return None
    return extract_block_from(text, m.end() - 1)


def read_int_list(text: str, name: str, view: Optional[str] = None) -> Optional[list[int]]:
    body = read_block(text, name, view)
    return parse_int_list(body) if body is not None else None


def parse_entries(text: str) -> list[Entry]:
    """all {index, COLOR, value} triples; COLOR may be quoted or bare."""
    entries = []
    for m in ENTRY_RE.finditer(strip_comments(text)):
        color = m.group(2) if m.group(2) is not None else m.group(3)
        entries.append(Entry(int(m.group(1)), color, float(m.group(4))))
    return entries


def placement_from_match(m, offset: int = 0):
    """(Vec, Ang, name) from a PLACEMENT_RE / INDEXED_PLACEMENT_RE match.

    offset skips leading groups (the index for the indexed form).
    """
    g = m.groups()[offset:]
    pos = _triple(g[0:3])
    ang = _triple(g[3:6])
    if pos is None or ang is None:
        return None
    return Vec(*pos), Ang(*ang), g[6]
