"""A group of action and axis mappings, with the unbound mappings that mask others."""

from __future__ import annotations

import warnings
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, is_valid_key


class UndefinedKeyGroupWarning(UserWarning):
    """A lookup named a key group that the configuration does not define."""


class _ConfigLike(Protocol):
    preserved_actions: Any
    preserved_axes: Any

    def is_key_group_defined(self, key_group_tag: str | None) -> bool: ...

    def get_key_group_of_key(self, key: str) -> str | None: ...

    def is_axis_key(self, key: str) -> bool: ...


def _without(items: list, removals: list) -> list:
    return [item for item in items if item not in removals]


@dataclass(eq=True)
class InputMappingGroup:
    """Action and axis mappings of one mapping group.

    Unbound mappings mark action or axis bindings that were removed, so that
    they are masked when this group is laid over a base preset.
    """

    config: _ConfigLike | None = field(default=None, compare=False, repr=False)
    action_mappings: list[ActionKeyMapping] = field(default_factory=list)
    axis_mappings: list[AxisKeyMapping] = field(default_factory=list)
    unbound_action_mappings: list[ActionKeyMapping] = field(default_factory=list)
    unbound_axis_mappings: list[AxisKeyMapping] = field(default_factory=list)

    def __copy__(self) -> InputMappingGroup:
        return InputMappingGroup(
            self.config,
            list(self.action_mappings),
            list(self.axis_mappings),
            list(self.unbound_action_mappings),
            list(self.unbound_axis_mappings),
        )

    @property
    def _cfg(self) -> _ConfigLike:
        if self.config is None:
            raise RuntimeError("mapping group has no configuration")
        return self.config

    def _new(self, **lists: list) -> InputMappingGroup:
        return InputMappingGroup(self.config, **lists)

    def set_config(self, config: _ConfigLike | None) -> None:
        """Attach the configuration used for key group and axis key lookups."""
        self.config = config

    def _check_key_group(self, key_group: str | None) -> bool:
        cfg = self._cfg
        any_key_group = not key_group
        if not any_key_group and not cfg.is_key_group_defined(key_group):
            warnings.warn(
                f"Undefined Key Group with tag '{key_group}'. Please add a Key "
                "Group with the tag to the input configuration.",
                UndefinedKeyGroupWarning,
                stacklevel=3,
            )
        return any_key_group

    def _in_key_group(self, key: str, key_group: str | None) -> bool:
        return not key_group or self._cfg.get_key_group_of_key(key) == key_group

    def get_all_actions(
        self, action_name: str, key_group: str | None = None
    ) -> list[ActionKeyMapping]:
        """All action mappings with this name, in the given key group or any."""
        any_key_group = self._check_key_group(key_group)
        cfg = self._cfg
        return [
            action
            for action in self.action_mappings
            if action.action_name == action_name
            and (any_key_group or cfg.get_key_group_of_key(action.key) == key_group)
        ]

    def get_all_axes(
        self,
        axis_name: str,
        scale: float,
        key_group: str | None = None,
        any_scale: bool = False,
    ) -> list[AxisKeyMapping]:
        """All axis mappings with this name and scale, in the given key group or any.

        Mappings on an axis key match every scale.
        """
        any_key_group = self._check_key_group(key_group)
        cfg = self._cfg
        return [
            axis
            for axis in self.axis_mappings
            if axis.axis_name == axis_name
            and (any_scale or axis.scale == scale or cfg.is_axis_key(axis.key))
            and (any_key_group or cfg.get_key_group_of_key(axis.key) == key_group)
        ]

    def get_action(self, action_name: str, key_group: str | None = None) -> ActionKeyMapping:
        """The most recently added matching action, or an empty mapping."""
        actions = self.get_all_actions(action_name, key_group)
        return actions[-1] if actions else ActionKeyMapping()

    def get_axis(
        self, axis_name: str, scale: float, key_group: str | None = None
    ) -> AxisKeyMapping:
        """The most recently added matching axis, or an empty mapping."""
        axes = self.get_all_axes(axis_name, scale, key_group)
        return axes[-1] if axes else AxisKeyMapping()

    def replace_action(
        self, action: ActionKeyMapping, any_key_group: bool = False
    ) -> InputMappingGroup:
        """Bind ``action`` in place of existing ones; return the displaced ones as unbound."""
        key_group = None if any_key_group else self._cfg.get_key_group_of_key(action.key)
        to_remove = self._new(
            action_mappings=self.get_all_actions(action.action_name, key_group)
        )
        self.remove_mappings(to_remove)
        self.action_mappings.append(action)
        self.remove_action(action.action_name, key_group, True)
        return to_remove.to_unbound_mappings()

    def replace_axis(
        self, axis: AxisKeyMapping, any_key_group: bool = False
    ) -> InputMappingGroup:
        """Bind ``axis`` in place of existing ones; return the displaced ones as unbound."""
        cfg = self._cfg
        is_axis_key = cfg.is_axis_key(axis.key)
        key_group = None if any_key_group else cfg.get_key_group_of_key(axis.key)
        to_remove = self._new(
            axis_mappings=self.get_all_axes(axis.axis_name, axis.scale, key_group, is_axis_key)
        )
        self.remove_mappings(to_remove)
        self.axis_mappings.append(axis)
        # A button key leaves unbound axis-key entries alone, since they still
        # mask the other scales; an axis key clears unbound entries of all scales.
        self.remove_axis(
            axis.axis_name,
            axis.scale,
            key_group,
            True,
            not is_axis_key,
            is_axis_key,
        )
        return to_remove.to_unbound_mappings()

    def unbind_chord(
        self,
        key: str,
        shift: bool = False,
        ctrl: bool = False,
        alt: bool = False,
        cmd: bool = False,
    ) -> InputMappingGroup:
        """Remove mappings on this chord, skipping preserved names; return them as unbound."""
        cfg = self._cfg
        actions = [
            action
            for action in self.action_mappings
            if action.key == key
            and action.shift == shift
            and action.ctrl == cmd
            and action.alt == alt
            and action.cmd == cmd
            and action.action_name not in cfg.preserved_actions
        ]
        axes: list[AxisKeyMapping] = []
        # Axes carry no modifiers, so they only clash with a bare key.
        if not (shift or ctrl or alt or cmd):
            axes = [
                axis
                for axis in self.axis_mappings
                if axis.key == key and axis.axis_name not in cfg.preserved_axes
            ]
        to_remove = self._new(action_mappings=actions, axis_mappings=axes)
        self.remove_mappings(to_remove)
        return to_remove.to_unbound_mappings()

    def remove_action(
        self, action_name: str, key_group: str | None = None, from_unbound: bool = False
    ) -> None:
        """Remove bound (or unbound) actions with this name in the key group."""
        target = self.unbound_action_mappings if from_unbound else self.action_mappings
        found = [
            action
            for action in target
            if action.action_name == action_name and self._in_key_group(action.key, key_group)
        ]
        if from_unbound:
            self.remove_mappings(self._new(unbound_action_mappings=found))
        else:
            self.remove_mappings(self._new(action_mappings=found))

    def remove_axis(
        self,
        axis_name: str,
        scale: float,
        key_group: str | None = None,
        from_unbound: bool = False,
        ignore_axis_keys: bool = False,
        any_scale: bool = False,
    ) -> None:
        """Remove bound (or unbound) axes with this name and scale in the key group."""
        cfg = self._cfg
        target = self.unbound_axis_mappings if from_unbound else self.axis_mappings
        found = [
            axis
            for axis in target
            if not (ignore_axis_keys and cfg.is_axis_key(axis.key))
            and axis.axis_name == axis_name
            and (any_scale or axis.scale == scale)
            and self._in_key_group(axis.key, key_group)
        ]
        if from_unbound:
            self.remove_mappings(self._new(unbound_axis_mappings=found))
        else:
            self.remove_mappings(self._new(axis_mappings=found))

    def remove_mappings(self, to_remove: InputMappingGroup) -> None:
        """Remove every mapping equal to one held in ``to_remove``."""
        self.action_mappings[:] = _without(self.action_mappings, to_remove.action_mappings)
        self.axis_mappings[:] = _without(self.axis_mappings, to_remove.axis_mappings)
        self.unbound_action_mappings[:] = _without(
            self.unbound_action_mappings, to_remove.unbound_action_mappings
        )
        self.unbound_axis_mappings[:] = _without(
            self.unbound_axis_mappings, to_remove.unbound_axis_mappings
        )

    def find_unbound_mappings(self, source: InputMappingGroup) -> InputMappingGroup:
        """Mappings of ``source`` whose action or axis this group does not bind, as unbound."""
        unbound_actions = [
            action
            for action in source.action_mappings
            if not self.get_all_actions(action.action_name, None)
        ]
        unbound_axes = [
            axis
            for axis in source.axis_mappings
            if not self.get_all_axes(axis.axis_name, axis.scale, None, False)
        ]
        return self._new(
            unbound_action_mappings=unbound_actions, unbound_axis_mappings=unbound_axes
        )

    def to_unbound_mappings(self) -> InputMappingGroup:
        """A new group holding this group's bound mappings as unbound ones."""
        return self._new(
            unbound_action_mappings=list(self.action_mappings),
            unbound_axis_mappings=list(self.axis_mappings),
        )

    def remove_unbound_mappings(self) -> None:
        """Drop unbound entries that carry no key."""
        self.remove_mappings(
            self._new(
                unbound_action_mappings=[
                    a for a in self.unbound_action_mappings if not is_valid_key(a.key)
                ],
                unbound_axis_mappings=[
                    a for a in self.unbound_axis_mappings if not is_valid_key(a.key)
                ],
            )
        )

    def remove_redundant_mappings(self, base: InputMappingGroup) -> None:
        """Drop overrides that ``base`` already has, and unbound entries it does not bind."""
        cfg = self._cfg
        actions = [a for a in self.action_mappings if a in base.action_mappings]

        axes = []
        for axis in self.axis_mappings:
            if axis not in base.axis_mappings:
                continue
            # Not redundant when it overrides an unbound axis key of the same axis.
            overriding_unbound_axis = any(
                unbound.axis_name == axis.axis_name and cfg.is_axis_key(unbound.key)
                for unbound in self.unbound_axis_mappings
            )
            if not overriding_unbound_axis:
                axes.append(axis)

        # Unbound entries only flag that something was unbound; their own key is
        # not compared against the base.
        unbound_actions = [
            unbound
            for unbound in self.unbound_action_mappings
            if not is_valid_key(
                base.get_action(
                    unbound.action_name, cfg.get_key_group_of_key(unbound.key)
                ).key
            )
        ]
        unbound_axes = [
            unbound
            for unbound in self.unbound_axis_mappings
            if not is_valid_key(
                base.get_axis(
                    unbound.axis_name, unbound.scale, cfg.get_key_group_of_key(unbound.key)
                ).key
            )
        ]
        self.remove_mappings(
            self._new(
                action_mappings=actions,
                axis_mappings=axes,
                unbound_action_mappings=unbound_actions,
                unbound_axis_mappings=unbound_axes,
            )
        )

    def mark_all_mappings_default(self) -> None:
        """Flag every bound mapping as coming from the base preset."""
        self.action_mappings[:] = [replace(a, is_default=True) for a in self.action_mappings]
        self.axis_mappings[:] = [replace(a, is_default=True) for a in self.axis_mappings]

    def __iadd__(self, other: InputMappingGroup) -> InputMappingGroup:
        self.action_mappings.extend(other.action_mappings)
        self.axis_mappings.extend(other.axis_mappings)
        self.unbound_action_mappings.extend(other.unbound_action_mappings)
        self.unbound_axis_mappings.extend(other.unbound_axis_mappings)
        return self