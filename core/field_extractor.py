"""
Field Extractor - Locates labeled sections in free-form model output

Every extraction returns either a value or None. None means "not found" and is
never an error: the record assembler replaces it with a default.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple, Union

ExtractedValue = Union[str, List[str], None]

# Leading ordinals and bullets: "1.", "-", "*", "2)" style prefixes.
_LIST_MARKER = re.compile(r"^[\d\-\*\.\s]+")
# A line that opens a new section, e.g. "Key Concepts:".
_HEADING_LINE = re.compile(r"^[A-Z][\w ]{0,40}:\s*$")
_NEW_HEADING = re.compile(r"^[A-Z]")
# Any line that starts with a label, with or without a value.
_LABELLED_LINE = re.compile(r"^[A-Z][\w ]{0,40}:")

class FieldKind(str, Enum):
    SCALAR = "scalar"
    BLOCK = "block"
    LISTED = "listed"
    KEYWORD = "keyword"

@dataclass(frozen=True)
class FieldSpec:
    """How to find one field in a completion.

    ``labels`` holds a single label except for KEYWORD specs, whose labels are
    synonyms tried in priority order. ``terminal`` marks the last section a
    prompt asks for; only that section may run to the end of the text.
    """
    kind: FieldKind
    labels: Tuple[str, ...]
    terminal: bool = False

    @classmethod
    def scalar(cls, label: str) -> "FieldSpec":
        return cls(FieldKind.SCALAR, (label,))

    @classmethod
    def block(cls, label: str, terminal: bool = False) -> "FieldSpec":
        return cls(FieldKind.BLOCK, (label,), terminal)

    @classmethod
    def listed(cls, label: str, terminal: bool = False) -> "FieldSpec":
        return cls(FieldKind.LISTED, (label,), terminal)

    @classmethod
    def keywords(cls, *labels: str) -> "FieldSpec":
        if not labels:
            raise ValueError("At least one keyword label is required")
        return cls(FieldKind.KEYWORD, tuple(labels))

def extract_scalar(text: str, label: str) -> Optional[str]:
    """Return the value written after the first occurrence of ``label``.

    The value is the rest of the label line, or the next non-blank line when
    the label stands alone.
    """
    text = text or ""
    pattern = re.compile(re.escape(label) + r"[^\S\n]*:?([^\n]*)", re.IGNORECASE)
    for match in pattern.finditer(text):
        value = match.group(1).strip() or _value_on_next_line(text[match.end():])
        if value:
            return value
    return None

def _value_on_next_line(rest: str) -> Optional[str]:
    for line in rest.split("\n")[1:]:
        if line.strip():
            # another label means this one was left empty
            return None if _LABELLED_LINE.match(line) else line.strip()
    return None

def extract_keyword(text: str, labels: Tuple[str, ...]) -> Optional[str]:
    """Try each synonym in order; the first label that yields a value wins."""
    for label in labels:
        value = extract_scalar(text, label)
        if value is not None:
            return value
    return None

def extract_section(text: str, label: str, terminal: bool = False) -> Optional[str]:
    """Return the body that follows ``label`` up to the nearest terminator.

    Terminators are a blank line or a line starting with a capital letter.
    End of text only terminates a ``terminal`` section.
    """
    match = re.search(re.escape(label) + r"[^\S\n]*:?", text or "", re.IGNORECASE)
    if not match:
        return None

    head, newline, tail = text[match.end():].partition("\n")
    body: List[str] = [head.strip()] if head.strip() else []
    following = tail.split("\n") if newline else []

    terminated = False
    for line in following:
        if not line.strip():
            if not body:
                # blank lines between a label and its body
                continue
            terminated = True
            break
        if body and _NEW_HEADING.match(line):
            terminated = True
            break
        if not body and _HEADING_LINE.match(line):
            # the label is immediately followed by another heading
            terminated = True
            break
        body.append(line.rstrip())

    if not terminated and not terminal:
        return None

    section = "\n".join(body).strip()
    return section or None

def split_list_items(body: Optional[str]) -> Optional[List[str]]:
    """Split a section body into list items, dropping bullets and ordinals."""
    if not body:
        return None
    items = []
    for line in body.split("\n"):
        item = _LIST_MARKER.sub("", line).strip()
        if item:
            items.append(item)
    return items or None

def extract_field(text: str, spec: FieldSpec) -> ExtractedValue:
    """Extract one field described by ``spec`` from ``text``."""
    if spec.kind == FieldKind.SCALAR:
        return extract_scalar(text, spec.labels[0])
    if spec.kind == FieldKind.KEYWORD:
        return extract_keyword(text, spec.labels)

    section = extract_section(text, spec.labels[0], spec.terminal)
    if spec.kind == FieldKind.LISTED:
        return split_list_items(section)
    return section
