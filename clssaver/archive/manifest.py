"""Jar manifest model, serializer and parser."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

MANIFEST_DIR = "META-INF/"
MANIFEST_NAME = "META-INF/MANIFEST.MF"
MANIFEST_VERSION = "Manifest-Version"

MAX_LINE_BYTES = 72
_NEWLINE = "\r\n"
_LINE_SPLIT = re.compile(r"\r\n|\r|\n")


@dataclass
class Manifest:
    """Main attributes plus named per-entry sections, both kept in insertion order."""

    main_attributes: dict[str, str] = field(default_factory=dict)
    entries: dict[str, dict[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for section in [self.main_attributes, *self.entries.values()]:
            for key, value in section.items():
                _check_attribute(key, value)

    def to_bytes(self) -> bytes:
        """Serialize in the jar manifest format (CRLF lines wrapped at 72 bytes)."""
        main = dict(self.main_attributes)
        version = main.pop(MANIFEST_VERSION, "1.0")

        lines = [_header(MANIFEST_VERSION, version)]
        lines.extend(_header(k, v) for k, v in main.items())
        out = [_NEWLINE.join(lines), _NEWLINE, _NEWLINE]

        for name, attributes in self.entries.items():
            section = [_header("Name", name)]
            section.extend(_header(k, v) for k, v in attributes.items() if k != "Name")
            out.extend([_NEWLINE.join(section), _NEWLINE, _NEWLINE])

        return "".join(out).encode("utf-8")

    @classmethod
    def parse(cls, data: bytes) -> Manifest:
        """Parse manifest bytes. Unparseable lines raise ValueError."""
        text = data.decode("utf-8")
        sections: list[dict[str, str]] = []
        current: dict[str, str] = {}
        last_key: str | None = None

        for line in _LINE_SPLIT.split(text):
            if not line:
                if current:
                    sections.append(current)
                current, last_key = {}, None
                continue
            if line.startswith(" "):
                if last_key is None:
                    raise ValueError(f"Continuation line without attribute: {line!r}")
                current[last_key] += line[1:]
                continue
            key, sep, value = line.partition(": ")
            if not sep:
                raise ValueError(f"Malformed manifest line: {line!r}")
            current[key] = value
            last_key = key
        if current:
            sections.append(current)

        manifest = cls(main_attributes=sections[0] if sections else {})
        for section in sections[1:]:
            name = section.pop("Name", None)
            if name is None:
                raise ValueError("Manifest entry section is missing a Name attribute")
            manifest.entries[name] = section
        return manifest


def _check_attribute(key: str, value: str) -> None:
    if not key or not re.fullmatch(r"[A-Za-z0-9_-]+", key) or len(key) > 70:
        raise ValueError(f"Invalid manifest attribute name: {key!r}")
    if any(c in value for c in "\r\n\x00"):
        raise ValueError(f"Invalid manifest attribute value for {key}: {value!r}")


def _header(key: str, value: str) -> str:
    """Render one attribute, splitting it into continuation lines on UTF-8 boundaries."""
    text = f"{key}: {value}"
    lines: list[str] = []
    current = ""
    size = 0
    for char in text:
        width = len(char.encode("utf-8"))
        if size + width > MAX_LINE_BYTES:
            lines.append(current)
            current, size = " ", 1
        current += char
        size += width
    lines.append(current)
    return _NEWLINE.join(lines)
