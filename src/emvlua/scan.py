"""scan.py - balanced-brace extraction over loosely structured Lua.

the one primitive every decoder stands on. find an assignment, walk its
braces while ignoring anything inside quotes or comments, hand back the
inner text. no grammar, no AST; anything not found is None.

in the world: a flashlight. you point it at a name and it shows you the
table behind it, nothing more.
"""

import re
from typing import Optional

_QUOTES = ('"', "'")


def _comment_end(text: str, i: int) -> int:
    """end of a -- comment starting at i, or i when there is none."""
    if not text.startswith("--", i):
        return i
    if text.startswith("--[[", i):
        end = text.find("]]", i + 4)
        return len(text) if end < 0 else end + 2
    end = text.find("\n", i)
    return len(text) if end < 0 else end


def _walk(text: str, start: int = 0):
    """yield (offset, char) for every char outside strings and comments."""
    in_string = None
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string is not None:
            if ch == "\\":
                i += 2  # backslash and the char it escapes
                continue
            if ch == in_string:
                in_string = None
            i += 1
            continue
        if ch in _QUOTES:
            in_string = ch
            i += 1
            continue
        j = _comment_end(text, i)
        if j != i:
            i = j
            continue
        yield i, ch
        i += 1


def _scan_close(text: str, brace_start: int) -> int:
    """offset of the brace that closes text[brace_start], or -1."""
    depth = 0
    for i, ch in _walk(text, brace_start):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return i
    return -1


def _next_brace(text: str, start: int) -> int:
    for i, ch in _walk(text, start):
        if ch == "{":
            return i
    return -1


def extract_block_from(text: str, brace_start: int) -> Optional[str]:
    """text strictly inside the braces opened at brace_start."""
    if brace_start < 0 or brace_start >= len(text) or text[brace_start] != "{":
        return None
    end = _scan_close(text, brace_start)
    if end < 0:
        return None
    return text[brace_start + 1:end]


def extract_block_after(text: str, name: str) -> Optional[str]:
    """inner text of the first `name = { ... }` assignment.

    finds name, then the next '=', then the next '{'. any of them missing,
    or braces that never balance, gives None.
    """
    start = text.find(name)
    if start < 0:
        return None
    eq = text.find("=", start)
    if eq < 0:
        return None
    brace = text.find("{", eq)
    if brace < 0:
        return None
    return extract_block_from(text, brace)


def top_level_objects(block: str) -> list[str]:
    """inner text of each consecutive top-level {...} object in block."""
    result = []
    i = 0
    while i < len(block):
        brace = _next_brace(block, i)
        if brace < 0:
            break
        body = extract_block_from(block, brace)
        if body is None:
            break
        result.append(body)
        i = brace + len(body) + 2
    return result


def keyed_blocks(block: str, pattern) -> list[tuple[str, str]]:
    """(key, inner) for each `key = {` match of pattern in block.

    pattern must capture the key in group 1 and end on the opening brace.
    scanning resumes after each value, so keys nested inside a value are
    not reported as siblings. keys inside comments are not seen.
    """
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern
    view = strip_comments(block)
    out = []
    pos = 0
    while True:
        m = regex.search(view, pos)
        if not m:
            break
        brace = m.end() - 1
        inner = extract_block_from(block, brace)
        if inner is None:
            out.append((m.group(1), ""))
            pos = m.end()
            continue
        out.append((m.group(1), inner))
        pos = brace + len(inner) + 2
    return out


def _mask(text: str, nested: bool) -> str:
    chars = list(text)
    in_string = None
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if in_string is not None:
            if ch == "\\":
                i += 2
                continue
            if ch == in_string:
                in_string = None
            i += 1
            continue
        if ch in _QUOTES:
            in_string = ch
            i += 1
            continue
        j = _comment_end(text, i)
        if j != i:
            for k in range(i, j):
                if chars[k] != "\n":
                    chars[k] = " "
            i = j
            continue
        if nested and ch == "{":
            end = _scan_close(text, i)
            if end < 0:
                break
            for k in range(i + 1, end):
                chars[k] = " "
            i = end
        i += 1
    return "".join(chars)


def strip_comments(text: str) -> str:
    """text with -- comments blanked to spaces. offsets are preserved."""
    return _mask(text, nested=False)


def shallow(text: str) -> str:
    """text with comments and every nested {...} body blanked to spaces.

    offsets are preserved, so a field lookup on the result only sees the
    object's own fields and never one belonging to a child table.
    """
    return _mask(text, nested=True)
