"""Capturing a key chord or axis from raw input events to rebind a mapping."""

from __future__ import annotations

import enum
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Optional

from keyrebind.config import InputConfig
from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, Keys, is_valid_key

_log = logging.getLogger(__name__)

_SHIFT_KEYS = frozenset({Keys.LEFT_SHIFT, Keys.RIGHT_SHIFT})
_CTRL_KEYS = frozenset({Keys.LEFT_CONTROL, Keys.RIGHT_CONTROL})
_ALT_KEYS = frozenset({Keys.LEFT_ALT, Keys.RIGHT_ALT})
_CMD_KEYS = frozenset({Keys.LEFT_COMMAND, Keys.RIGHT_COMMAND})


class CaptureMode(enum.Enum):
    """Whether a binding is taken when a key goes down or when it is released."""

    ON_PRESSED = "on_pressed"
    ON_RELEASED = "on_released"


@dataclass(frozen=True)
class InputChord:
    """A primary key with the modifier keys held alongside it."""

    key: str = Keys.INVALID
    shift: bool = False
    ctrl: bool = False
    alt: bool = False
    cmd: bool = False

    def __str__(self) -> str:
        parts = [
            name
            for name, held in (
                ("Shift", self.shift),
                ("Ctrl", self.ctrl),
                ("Alt", self.alt),
                ("Cmd", self.cmd),
            )
            if held
        ]
        parts.append(self.key or "None")
        return "+".join(parts)


@dataclass(frozen=True)
class CapturedInput:
    """A captured chord and the axis direction it was captured with."""

    chord: InputChord = InputChord()
    axis_scale: float = 1.0


CaptureCallback = Callable[[CapturedInput], None]
CloseCallback = Callable[[bool], None]


class BindCapturePrompt:
    """Listens to one player's input events and captures the chord to bind.

    Event methods return True when the prompt handled the event. Captured and
    rejected inputs, and the prompt closing, are reported to the callbacks in
    ``on_chord_captured``, ``on_chord_rejected`` and ``on_closed``.

    When ``viewport`` is given and ``ignore_game_viewport_input_while_capturing``
    is set, its ``ignore_input`` attribute is set while the prompt is open and
    restored when it closes.
    """

    def __init__(
        self,
        config: Optional[InputConfig] = None,
        *,
        controller_id: int = 0,
        key_group: Optional[str] = None,
        restrict_key_group: bool = False,
        capture_mode: CaptureMode = CaptureMode.ON_RELEASED,
        ignore_game_viewport_input_while_capturing: bool = True,
        viewport: Any = None,
    ) -> None:
        self.config = config if config is not None else InputConfig()
        self.controller_id = controller_id
        self.key_group = key_group
        self.restrict_key_group = restrict_key_group
        self.capture_mode = capture_mode
        self.ignore_game_viewport_input_while_capturing = (
            ignore_game_viewport_input_while_capturing
        )
        self.viewport = viewport
        self.keys_down: list[str] = []
        self.accumulated_mouse_delta: tuple[float, float] = (0.0, 0.0)
        self.on_chord_captured: list[CaptureCallback] = []
        self.on_chord_rejected: list[CaptureCallback] = []
        self.on_closed: list[CloseCallback] = []
        self.is_open = True
        self._previous_ignore_input = False

        if self.ignore_game_viewport_input_while_capturing and self.viewport is not None:
            self._previous_ignore_input = bool(getattr(self.viewport, "ignore_input", False))
            self.viewport.ignore_input = True
        _log.info("BindCapturePrompt: Listening for input")

    # Event handling

    def _ignores(self, user_index: int) -> bool:
        return user_index != self.controller_id

    def _press(self, key: str) -> None:
        if key not in self.keys_down:
            self.keys_down.append(key)
        if self.capture_mode is CaptureMode.ON_PRESSED:
            self.capture(key)
            self._release(key)

    def _release(self, key: str) -> None:
        if key in self.keys_down:
            self.keys_down.remove(key)

    def key_down(self, key: str, user_index: int = 0) -> bool:
        """Handle a key being pressed."""
        if self._ignores(user_index):
            return False
        self._press(key)
        return True

    def key_up(self, key: str, user_index: int = 0) -> bool:
        """Handle a key being released."""
        if self._ignores(user_index):
            return False
        if self.capture_mode is not CaptureMode.ON_RELEASED:
            self._release(key)
            return True
        # Only keys pressed while listening count, so the key that opened the
        # prompt does not bind itself on release.
        if key in self.keys_down:
            self.capture(key)
            self._release(key)
            return True
        return False

    def mouse_button_down(self, button: str, user_index: int = 0) -> bool:
        """Handle a mouse button being pressed."""
        if self._ignores(user_index):
            return False
        _log.debug("BindCapturePrompt: mouse button down")
        self._press(button)
        return True

    def mouse_button_up(self, button: str, user_index: int = 0) -> bool:
        """Handle a mouse button being released."""
        if self._ignores(user_index):
            return False
        _log.debug("BindCapturePrompt: mouse button up")
        if self.capture_mode is not CaptureMode.ON_RELEASED:
            return True
        self.capture(button)
        self._release(button)
        return True

    def mouse_wheel(self, delta: float, user_index: int = 0) -> bool:
        """Handle the mouse wheel turning; captures scroll up or down."""
        if self._ignores(user_index):
            return False
        self.capture(Keys.MOUSE_SCROLL_UP if delta > 0 else Keys.MOUSE_SCROLL_DOWN)
        return True

    def mouse_move(self, dx: float, dy: float, user_index: int = 0) -> bool:
        """Handle mouse movement; captures a mouse axis once it has moved far enough."""
        cfg = self.config
        if not cfg.is_key_allowed(Keys.MOUSE_X) and not cfg.is_key_allowed(Keys.MOUSE_Y):
            return False
        if self._ignores(user_index):
            return False

        acc_x, acc_y = self.accumulated_mouse_delta
        acc_x += dx
        acc_y += dy
        self.accumulated_mouse_delta = (acc_x, acc_y)

        required = max(cfg.mouse_move_capture_distance, 0.0)
        if math.hypot(acc_x, acc_y) <= required:
            return False

        _log.info("BindCapturePrompt: Capture axis from mouse delta: (%s, %s)", acc_x, acc_y)
        if abs(acc_x) > abs(acc_y):
            # Positive X delta is right, as is the positive MouseX axis.
            self.capture(Keys.MOUSE_X, 1.0 if acc_x >= 0.0 else -1.0)
        else:
            # Positive Y delta is down, but the positive MouseY axis is up.
            self.capture(Keys.MOUSE_Y, 1.0 if acc_y < 0.0 else -1.0)
        return True

    # Capturing

    def is_key_allowed(self, key: str) -> bool:
        """Extra check on the primary key; subclasses narrow what may be bound."""
        return True

    def capture(self, primary_key: str = Keys.INVALID, axis_scale: float = 1.0) -> None:
        """Build a chord from ``primary_key`` and the keys held, then accept or reject it."""
        cfg = self.config
        shift = ctrl = alt = cmd = False
        non_modifier = Keys.INVALID

        if cfg.allow_modifier_keys:
            for key in self.keys_down:
                if key in _SHIFT_KEYS:
                    shift = True
                elif key in _CTRL_KEYS:
                    ctrl = True
                elif key in _ALT_KEYS:
                    alt = True
                elif key in _CMD_KEYS:
                    cmd = True
                else:
                    non_modifier = key

        # Prefer the last non-modifier key held, else the last key held at all.
        if not is_valid_key(primary_key):
            if is_valid_key(non_modifier):
                primary_key = non_modifier
            elif self.keys_down:
                primary_key = self.keys_down[-1]

        if primary_key in cfg.binding_escape_keys:
            _log.info("BindCapturePrompt: Escape key pressed: %s - Cancelling", primary_key)
            self.cancel()
            return

        # A modifier that is itself the primary key is not also a modifier.
        if primary_key in _SHIFT_KEYS:
            shift = False
        elif primary_key in _CTRL_KEYS:
            ctrl = False
        elif primary_key in _ALT_KEYS:
            alt = False
        elif primary_key in _CMD_KEYS:
            cmd = False

        chord = InputChord(primary_key, shift, ctrl, alt, cmd)
        captured = CapturedInput(chord, axis_scale)

        if not cfg.is_key_allowed(primary_key):
            _log.info("BindCapturePrompt: Ignored globally disallowed key: %s", primary_key)
            self._reject(captured)
            return
        if not self.is_key_allowed(primary_key):
            _log.info("BindCapturePrompt: Ignored key disallowed by prompt: %s", primary_key)
            self._reject(captured)
            return
        if self.restrict_key_group and not cfg.does_key_group_contain_key(
            self.key_group, primary_key
        ):
            _log.info("BindCapturePrompt: Rejecting key not in key group: %s", primary_key)
            self._reject(captured)
            return

        _log.info("BindCapturePrompt: Captured chord: %s, AxisScale: %f", chord, axis_scale)
        self._confirm(captured)

    def cancel(self) -> None:
        """Close the prompt without capturing anything."""
        self._close(True)

    def _confirm(self, captured: CapturedInput) -> None:
        for callback in list(self.on_chord_captured):
            callback(captured)
        self._close(False)

    def _reject(self, captured: CapturedInput) -> None:
        # The prompt stays open after a rejection.
        for callback in list(self.on_chord_rejected):
            callback(captured)

    def _close(self, cancelled: bool) -> None:
        if self.ignore_game_viewport_input_while_capturing and self.viewport is not None:
            self.viewport.ignore_input = self._previous_ignore_input
        self.is_open = False
        for callback in list(self.on_closed):
            callback(cancelled)


def action_mapping_from_capture(action_name: str, captured: CapturedInput) -> ActionKeyMapping:
    """The action mapping that binds ``action_name`` to the captured chord."""
    chord = captured.chord
    return ActionKeyMapping(action_name, chord.key, chord.shift, chord.ctrl, chord.alt, chord.cmd)


def axis_mapping_from_capture(
    config: InputConfig, axis_name: str, scale: float, captured: CapturedInput
) -> AxisKeyMapping:
    """The axis mapping for a captured key; button keys of an axis bind the axis itself."""
    key = captured.chord.key
    axis_key_scale = config.get_axis_key(key)
    use_axis_key = is_valid_key(axis_key_scale.key)

    final_key = axis_key_scale.key if use_axis_key else key
    final_scale = scale * captured.axis_scale
    if use_axis_key:
        final_scale *= axis_key_scale.scale
    return AxisKeyMapping(axis_name, final_key, final_scale)