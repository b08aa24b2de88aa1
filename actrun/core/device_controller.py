"""UI backend driving an Android device via adb."""

from __future__ import annotations

import logging
import math
import re
import subprocess
import tempfile
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from actrun.core.ui_element_parser import UIElement, UIElementParser
from actrun.errors import BackendError

logger = logging.getLogger("actrun.adb")

KEYCODE_ENTER = 66
KEYCODE_DEL = 67
KEYCODE_MOVE_END = 123

# Characters typed as key events rather than via `input text`
SPECIAL_KEYS = {"\b": KEYCODE_DEL, "\n": KEYCODE_ENTER}


class AdbBackend:
    """UI primitives implemented with `adb shell input`.

    Targets are UIElement records from a uiautomator dump.
    """

    def __init__(
        self,
        device_id: str,
        swipe_duration_ms: int = 300,
        tap_delay_ms: int = 100,
        max_edge_swipes: int = 20,
    ):
        """Initialize backend for a specific device.

        Args:
            device_id: ADB device identifier
            swipe_duration_ms: Duration of a swipe at velocity 1.0
            tap_delay_ms: Delay between taps of a multi-tap
            max_edge_swipes: Upper bound on swipes when scrolling to an edge
        """
        self._device_id = device_id
        self._swipe_duration_ms = swipe_duration_ms
        self._tap_delay_ms = tap_delay_ms
        self._max_edge_swipes = max_edge_swipes
        self._parser = UIElementParser()

    @property
    def device_id(self) -> str:
        return self._device_id

    @staticmethod
    def list_devices() -> list[dict[str, str]]:
        """List connected Android devices.

        Returns:
            List of device dicts with id, name, status
        """
        result = subprocess.run(
            ["adb", "devices", "-l"],
            capture_output=True,
            text=True,
        )

        devices = []
        for line in result.stdout.strip().split("\n")[1:]:  # Skip header
            parts = line.split()
            if len(parts) < 2:
                continue

            name = "unknown"
            model_match = re.search(r"model:(\S+)", line)
            if model_match:
                name = model_match.group(1).replace("_", " ")

            devices.append({"id": parts[0], "name": name, "status": parts[1]})

        return devices

    # Hierarchy

    def dump_hierarchy_xml(self) -> str:
        """Dump the current UI hierarchy as uiautomator XML."""
        remote_path = "/sdcard/actrun_ui_dump.xml"
        self._adb(["shell", "uiautomator", "dump", remote_path])
        with tempfile.TemporaryDirectory() as tmp:
            local_path = Path(tmp) / "ui.xml"
            self._adb(["pull", remote_path, str(local_path)])
            return local_path.read_text(encoding="utf-8")

    def dump_hierarchy(self) -> list[UIElement]:
        """Current UI elements, in document order."""
        return self._parser.parse_xml_string(self.dump_hierarchy_xml())

    # Primitives

    def tap(self, target: UIElement, point: tuple[float, float] | None = None) -> None:
        """Tap the element center, or a point relative to its top-left corner."""
        if point is None:
            x, y = target.center()
        else:
            x, y = int(target.bounds[0] + point[0]), int(target.bounds[1] + point[1])
        self._input("tap", x, y)

    def long_press(self, target: UIElement, duration: float) -> None:
        """Long press the element center for duration seconds."""
        duration_ms = int(duration * 1000)
        if duration_ms <= 0:
            raise BackendError(f"Duration must be positive: {duration}")
        x, y = target.center()
        # Swipe from same point to same point = long press
        self._input("swipe", x, y, x, y, duration_ms)

    def multi_tap(self, target: UIElement, taps: int) -> None:
        if taps <= 0:
            raise BackendError(f"Number of taps must be positive: {taps}")
        x, y = target.center()
        for i in range(taps):
            if i:
                time.sleep(self._tap_delay_ms / 1000)
            self._input("tap", x, y)

    def type_text(self, target: UIElement, text: str) -> None:
        """Type text into the focused field; backspace and newline become key events."""
        chunk = ""
        for char in text:
            if char in SPECIAL_KEYS:
                if chunk:
                    self._input_text(chunk)
                    chunk = ""
                self._input("keyevent", SPECIAL_KEYS[char])
            else:
                chunk += char
        if chunk:
            self._input_text(chunk)

    def clear_text(self, target: UIElement) -> None:
        """Focus the field and delete its current text."""
        self.tap(target)
        self._input("keyevent", KEYCODE_MOVE_END)
        count = len(target.text or "")
        if count:
            self._adb(["shell", "input", "keyevent"] + [str(KEYCODE_DEL)] * count)

    def replace_text(self, target: UIElement, text: str) -> None:
        self.clear_text(target)
        self.type_text(target, text)

    def scroll(
        self,
        target: UIElement,
        offset: tuple[float, float],
        normalized_start: tuple[float, float],
    ) -> None:
        """Drag inside the element by a pixel offset.

        Raises:
            BackendError: If the hierarchy did not change (edge reached)
        """
        nx, ny = normalized_start
        start = target.point_at(
            0.5 if math.isnan(nx) else nx,
            0.5 if math.isnan(ny) else ny,
        )
        end = self._clamp(target, start[0] + offset[0], start[1] + offset[1])

        before = self.dump_hierarchy_xml()
        self._input("swipe", start[0], start[1], end[0], end[1], self._swipe_duration_ms)
        if self.dump_hierarchy_xml() == before:
            raise BackendError(f"Unable to scroll {target}: content did not move")

    def scroll_to_edge(self, target: UIElement, edge: tuple[float, float]) -> None:
        """Swipe repeatedly toward edge until the content stops moving."""
        start = target.center()
        # Drag the finger away from the edge to reveal it
        end = self._clamp(
            target,
            start[0] - edge[0] * target.width * 0.4,
            start[1] - edge[1] * target.height * 0.4,
        )
        previous = self.dump_hierarchy_xml()
        for attempt in range(1, self._max_edge_swipes + 1):
            self._input("swipe", start[0], start[1], end[0], end[1], self._swipe_duration_ms)
            current = self.dump_hierarchy_xml()
            if current == previous:
                logger.debug("Reached edge %s after %d swipes", edge, attempt)
                return
            previous = current
        raise BackendError(f"Edge not reached after {self._max_edge_swipes} swipes")

    def swipe(
        self,
        target: UIElement,
        normalized_offset: tuple[float, float],
        velocity: float,
    ) -> None:
        """Swipe from the element center by a fraction of its size."""
        start = target.center()
        end = (
            int(start[0] + normalized_offset[0] * target.width),
            int(start[1] + normalized_offset[1] * target.height),
        )
        duration_ms = max(1, int(self._swipe_duration_ms / velocity))
        self._input("swipe", start[0], start[1], end[0], end[1], duration_ms)

    def pinch(self, target: UIElement, scale: float, velocity: float, angle: float) -> None:
        raise BackendError("Pinch is not supported by adb input")

    def adjust_slider(self, target: UIElement, position: float) -> None:
        """Tap the slider track at a normalized position."""
        x, y = target.point_at(position, 0.5)
        self._input("tap", x, y)

    def set_picker_column(self, target: UIElement, column: int, value: str) -> None:
        raise BackendError("Picker columns are not supported by adb input")

    def set_date(self, target: UIElement, date: datetime) -> None:
        raise BackendError("Date pickers are not supported by adb input")

    def attributes(self, target: UIElement) -> dict[str, Any]:
        return target.attributes()

    # Helpers

    def _clamp(self, target: UIElement, x: float, y: float) -> tuple[int, int]:
        left, top, right, bottom = target.bounds
        return (
            int(min(max(x, left + 1), right - 1)),
            int(min(max(y, top + 1), bottom - 1)),
        )

    def _input_text(self, text: str) -> None:
        # Escape special characters for adb
        escaped = text.replace(" ", "%s").replace("'", "\\'").replace('"', '\\"')
        self._adb(["shell", "input", "text", escaped])

    def _input(self, command: str, *args: Any) -> None:
        self._adb(["shell", "input", command] + [str(a) for a in args])

    def _adb(self, args: list[str]) -> str:
        """Execute adb command.

        Args:
            args: Command arguments (without 'adb -s device')

        Returns:
            Command stdout

        Raises:
            BackendError: If adb exits with non-zero status
        """
        cmd = ["adb", "-s", self._device_id] + args
        logger.debug("adb %s", " ".join(args))
        result = subprocess.run(cmd, capture_output=True, text=True)

        if result.returncode != 0:
            raise BackendError(f"adb command failed: {result.stderr.strip()}")

        return result.stdout
