"""validate.py - advisory checks over a parsed Document.

none of these states are errors. a dangling index or an unreferenced
component is perfectly good parse output; this module only points them
out so an editor can show them. nothing here blocks parse or encode.
"""

from dataclasses import dataclass

from emvlua.types import Document


@dataclass
class Issue:
    """one thing worth a second look."""
    selection: str = ""      # group name, or "Auto #n - ID" for components
    option_index: int = -1   # -1 when the issue is about the group itself
    message: str = ""
    anchor: str = ""         # sel-<name>, sel-<n> or auto-<n>

    def summary(self) -> str:
        where = self.selection
        if self.option_index >= 0:
            where += f" / option {self.option_index + 1}"
        return f"{where}: {self.message}"


NO_INDICES = 'Option has no Auto indices. Add an index or set the option name to "None".'


def find_issues(doc: Document) -> list[Issue]:
    """group, option and component issues, deduplicated, in document order."""
    issues = []
    seen = set()

    def add(selection: str, option_index: int, message: str, anchor: str):
        key = (anchor, option_index, message)
        if key in seen:
            return
        seen.add(key)
        issues.append(Issue(selection, option_index, message, anchor))

    existing = {c.index for c in doc.auto}
    name_counts: dict[str, int] = {}
    for group in doc.selections:
        name = group.name.strip()
        if name:
            name_counts[name] = name_counts.get(name, 0) + 1

    for si, group in enumerate(doc.selections):
        name = group.name.strip()
        label = group.name or "(unnamed)"
        anchor = f"sel-{group.name}" if name else f"sel-{si}"

        if not name:
            add(label, -1, "Group has no name", anchor)
        elif name_counts.get(name, 0) > 1:
            add(name, -1, "Duplicate group name", anchor)

        for oi, opt in enumerate(group.options):
            if not opt.name.strip():
                add(label, oi, "Option has no name", anchor)
            if not opt.auto:
                if opt.name.strip().lower() != "none":
                    add(label, oi, NO_INDICES, anchor)
                continue
            missing = [n for n in opt.auto if n not in existing]
            if missing:
                add(label, oi, f"Missing Auto indices: {', '.join(str(n) for n in missing)}", anchor)

    referenced = {n for g in doc.selections for o in g.options for n in o.auto}
    for c in doc.auto:
        if c.index not in referenced:
            add(f"Auto #{c.index} - {c.id}", -1,
                "Auto item not referenced in any selection", f"auto-{c.index}")
    return issues
