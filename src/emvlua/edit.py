"""edit.py - structural edits that keep component numbering honest.

components are numbered by position, and option lists point at those
numbers. anything that adds or removes a component has to fix both sides.
every function here returns a new Document and leaves its input alone.

in the world: renumbering the seats after someone leaves the row, then
telling everyone holding a ticket.
"""

import copy
from dataclasses import replace
from typing import Optional

from emvlua import log
from emvlua.types import Ang, ColorRef, Component, Document, Vec


COLLECTIONS = (
    "auto", "selections", "indicators", "lamps", "lamps_meta",
    "sequences", "sections", "patterns",
)


def get_collection(doc: Document, name: str):
    """one collection off the document. unknown or absent raises KeyError."""
    if name not in COLLECTIONS:
        raise KeyError(f"unknown collection '{name}'. available: {', '.join(COLLECTIONS)}")
    value = getattr(doc, name)
    if value is None:
        raise KeyError(f"collection '{name}' is not present in this document")
    return value


def remove_component(doc: Document, index: int) -> Document:
    """drop a component and close the gap it leaves.

    components above it move down one; every option loses references to
    it and has references above it decremented, order preserved. a missing
    index is a no-op.
    """
    out = copy.deepcopy(doc)
    if out.component(index) is None:
        log.debug("edit", f"remove: no component #{index}")
        return out

    remaining = [c for c in out.auto if c.index != index]
    for c in remaining:
        if c.index > index:
            c.index -= 1
    out.auto = sorted(remaining, key=lambda c: c.index)

    for group in out.selections:
        for opt in group.options:
            opt.auto = [n - 1 if n > index else n for n in opt.auto if n != index]

    log.debug("edit", f"removed component #{index}, {len(out.auto)} left")
    return out


def _link(doc: Document, index: int, group: int, option: int):
    doc.selections[group].options[option].auto.append(index)


def link_component(doc: Document, index: int, group: int, option: int) -> Document:
    """append index to selections[group].options[option]."""
    out = copy.deepcopy(doc)
    _link(out, index, group, option)
    return out


def new_component(index: int, **fields) -> Component:
    """a component with the editor's starting values."""
    base = Component(
        index=index,
        id="New Component",
        scale=1,
        pos=Vec(0, 0, 0),
        ang=Ang(0, 0, 0),
        color1=ColorRef("AMBER"),
        color2=ColorRef("AMBER"),
    )
    return replace(base, **fields)


def add_component(doc: Document, group: Optional[int] = None,
                  option: Optional[int] = None, **fields) -> Document:
    """append a fresh component at the next index, optionally linked."""
    out = copy.deepcopy(doc)
    next_index = len(out.auto) + 1
    out.auto.append(new_component(next_index, **fields))
    if group is not None and option is not None:
        _link(out, next_index, group, option)
    return out


def duplicate_component(doc: Document, index: int, group: Optional[int] = None,
                        option: Optional[int] = None) -> Document:
    """append a copy of component #index at the next index, optionally linked."""
    out = copy.deepcopy(doc)
    src = out.component(index)
    if src is None:
        log.debug("edit", f"duplicate: no component #{index}")
        return out
    next_index = len(out.auto) + 1
    out.auto.append(replace(copy.deepcopy(src), index=next_index))
    if group is not None and option is not None:
        _link(out, next_index, group, option)
    log.debug("edit", f"duplicated component #{index} to #{next_index}")
    return out


def update_component(doc: Document, index: int, **changes) -> Document:
    """replace fields on component #index. a missing index is a no-op."""
    out = copy.deepcopy(doc)
    out.auto = [replace(c, **changes) if c.index == index else c for c in out.auto]
    return out
