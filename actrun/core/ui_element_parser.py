"""Parse UI elements from uiautomator XML dumps."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class UIElement:
    """Parsed UI element from uiautomator dump."""

    class_name: str
    text: str | None
    resource_id: str | None
    content_desc: str | None
    bounds: tuple[int, int, int, int]  # left, top, right, bottom
    clickable: bool = False
    enabled: bool = True
    focused: bool = False
    scrollable: bool = False
    checked: bool = False
    index: int = 0

    @property
    def width(self) -> int:
        return self.bounds[2] - self.bounds[0]

    @property
    def height(self) -> int:
        return self.bounds[3] - self.bounds[1]

    def center(self) -> tuple[int, int]:
        """Center of the element bounds in screen pixels."""
        left, top, right, bottom = self.bounds
        return (left + right) // 2, (top + bottom) // 2

    def point_at(self, nx: float, ny: float) -> tuple[int, int]:
        """Screen point at normalized (0..1) position inside the bounds."""
        left, top, _, _ = self.bounds
        return int(left + self.width * nx), int(top + self.height * ny)

    def is_visible(self) -> bool:
        return self.width > 0 and self.height > 0

    def attributes(self) -> dict[str, Any]:
        """Attribute mapping reported by getAttributes."""
        left, top, _, _ = self.bounds
        return {
            "className": self.class_name,
            "text": self.text,
            "identifier": self.resource_id,
            "label": self.content_desc,
            "enabled": self.enabled,
            "focused": self.focused,
            "checked": self.checked,
            "visible": self.is_visible(),
            "frame": {"x": left, "y": top, "width": self.width, "height": self.height},
        }

    def __str__(self) -> str:
        name = self.resource_id or self.content_desc or self.text or ""
        short_class = self.class_name.split(".")[-1]
        return f"<{short_class} {name!r} {list(self.bounds)}>"


class UIElementParser:
    """Parse uiautomator XML dumps to find UI elements."""

    def parse_xml_file(self, path: Path) -> list[UIElement]:
        """Parse XML file to list of UI elements.

        Args:
            path: Path to XML file

        Returns:
            List of UIElement objects
        """
        tree = ET.parse(path)
        return self._parse_tree(tree.getroot())

    def parse_xml_string(self, xml_string: str) -> list[UIElement]:
        """Parse XML string to list of UI elements."""
        root = ET.fromstring(xml_string)
        return self._parse_tree(root)

    def _parse_tree(self, root: ET.Element) -> list[UIElement]:
        elements: list[UIElement] = []
        for node in root.iter("node"):
            bounds = self._parse_bounds(node.get("bounds", ""))
            # Only add elements with valid bounds
            if bounds == (0, 0, 0, 0):
                continue
            elements.append(UIElement(
                class_name=node.get("class", ""),
                text=node.get("text") or None,
                resource_id=node.get("resource-id") or None,
                content_desc=node.get("content-desc") or None,
                bounds=bounds,
                clickable=node.get("clickable", "false") == "true",
                enabled=node.get("enabled", "true") == "true",
                focused=node.get("focused", "false") == "true",
                scrollable=node.get("scrollable", "false") == "true",
                checked=node.get("checked", "false") == "true",
                index=int(node.get("index", 0)),
            ))
        return elements

    def _parse_bounds(self, bounds_str: str) -> tuple[int, int, int, int]:
        """Parse bounds string like '[0,0][1080,2340]'."""
        match = re.match(r"\[(-?\d+),(-?\d+)\]\[(-?\d+),(-?\d+)\]", bounds_str)
        if match:
            left, top, right, bottom = match.groups()
            return (int(left), int(top), int(right), int(bottom))
        return (0, 0, 0, 0)
