"""Line-level diff between existing and desired file content."""

from __future__ import annotations

import difflib
from typing import Literal

import click
from pydantic import BaseModel

DiffKind = Literal["added", "removed", "unchanged"]

_COLORS: dict[str, str] = {"added": "green", "removed": "red"}


class DiffSegment(BaseModel):
    """One line of a rendered diff."""

    text: str
    kind: DiffKind


def render_diff(old_text: str, new_text: str) -> list[DiffSegment]:
    """Classify every line of *old_text* / *new_text* as kept, removed or added.

    Lines keep their trailing newline so that joining the ``unchanged`` and
    ``added`` segments reproduces *new_text* exactly.
    """
    old_lines = old_text.splitlines(keepends=True)
    new_lines = new_text.splitlines(keepends=True)
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)

    segments: list[DiffSegment] = []
    for tag, i1, i2, j1, j2 in matcher.get_opcodes():
        if tag == "equal":
            segments.extend(DiffSegment(text=line, kind="unchanged") for line in old_lines[i1:i2])
            continue
        # "replace" shows the removed block before the added one
        if tag in ("replace", "delete"):
            segments.extend(DiffSegment(text=line, kind="removed") for line in old_lines[i1:i2])
        if tag in ("replace", "insert"):
            segments.extend(DiffSegment(text=line, kind="added") for line in new_lines[j1:j2])
    return segments


def format_diff(segments: list[DiffSegment], color: bool = True) -> str:
    """Join segments into printable text, green for additions and red for removals."""
    parts: list[str] = []
    for seg in segments:
        fg = _COLORS.get(seg.kind)
        parts.append(click.style(seg.text, fg=fg) if (color and fg) else seg.text)
    text = "".join(parts)
    if text and not text.endswith("\n"):
        text += "\n"
    return text
