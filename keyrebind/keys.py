"""Key names and the action and axis mapping records that bind them."""

from __future__ import annotations

from dataclasses import dataclass, field


class Keys:
    """Names of the keys the package refers to. The empty name is no key."""

    INVALID = ""

    SPACE_BAR = "SpaceBar"
    ESCAPE = "Escape"
    ENTER = "Enter"
    TAB = "Tab"
    A = "A"
    D = "D"
    E = "E"
    I = "I"  # noqa: E741
    Q = "Q"
    S = "S"
    W = "W"

    LEFT_SHIFT = "LeftShift"
    RIGHT_SHIFT = "RightShift"
    LEFT_CONTROL = "LeftControl"
    RIGHT_CONTROL = "RightControl"
    LEFT_ALT = "LeftAlt"
    RIGHT_ALT = "RightAlt"
    LEFT_COMMAND = "LeftCommand"
    RIGHT_COMMAND = "RightCommand"

    LEFT_MOUSE_BUTTON = "LeftMouseButton"
    RIGHT_MOUSE_BUTTON = "RightMouseButton"
    MIDDLE_MOUSE_BUTTON = "MiddleMouseButton"
    MOUSE_X = "MouseX"
    MOUSE_Y = "MouseY"
    MOUSE_SCROLL_UP = "MouseScrollUp"
    MOUSE_SCROLL_DOWN = "MouseScrollDown"

    GAMEPAD_LEFT_X = "Gamepad_LeftX"
    GAMEPAD_LEFT_Y = "Gamepad_LeftY"
    GAMEPAD_RIGHT_X = "Gamepad_RightX"
    GAMEPAD_RIGHT_Y = "Gamepad_RightY"
    GAMEPAD_LEFT_STICK_UP = "Gamepad_LeftStick_Up"
    GAMEPAD_LEFT_STICK_DOWN = "Gamepad_LeftStick_Down"
    GAMEPAD_LEFT_STICK_LEFT = "Gamepad_LeftStick_Left"
    GAMEPAD_LEFT_STICK_RIGHT = "Gamepad_LeftStick_Right"
    GAMEPAD_RIGHT_STICK_UP = "Gamepad_RightStick_Up"
    GAMEPAD_RIGHT_STICK_DOWN = "Gamepad_RightStick_Down"
    GAMEPAD_RIGHT_STICK_LEFT = "Gamepad_RightStick_Left"
    GAMEPAD_RIGHT_STICK_RIGHT = "Gamepad_RightStick_Right"


def is_valid_key(key: str | None) -> bool:
    """Return True if ``key`` names an actual key."""
    return bool(key)


@dataclass(frozen=True)
class ActionKeyMapping:
    """A key chord bound to a named action.

    ``is_default`` records whether the mapping came from the base preset; it
    takes no part in equality.
    """

    action_name: str = ""
    key: str = Keys.INVALID
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    cmd: bool = False
    is_default: bool = field(default=False, compare=False)

    def to_debug_string(self) -> str:
        """Describe the mapping on one line."""
        return (
            f"ActionName: {self.action_name}, Key: {self.key or 'None'}, "
            f"Shift: {self.shift}, Ctrl: {self.ctrl}, Alt: {self.alt}, "
            f"Cmd: {self.cmd}, IsDefault: {self.is_default}"
        )


@dataclass(frozen=True)
class AxisKeyMapping:
    """A key bound to a named axis with a scale.

    ``is_default`` records whether the mapping came from the base preset; it
    takes no part in equality.
    """

    axis_name: str = ""
    key: str = Keys.INVALID
    scale: float = 1.0
    is_default: bool = field(default=False, compare=False)

    def to_debug_string(self) -> str:
        """Describe the mapping on one line."""
        return (
            f"AxisName: {self.axis_name}, Key: {self.key or 'None'}, "
            f"Scale: {self.scale}, IsDefault: {self.is_default}"
        )