"""A layout of numbered mapping groups, and the merging of overrides onto presets."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable

from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, is_valid_key
from keyrebind.mapping_group import InputMappingGroup

_log = logging.getLogger(__name__)


@dataclass(eq=True)
class InputMappingLayout:
    """An ordered list of mapping groups sharing one configuration."""

    config: Any = field(default=None, compare=False, repr=False)
    mapping_groups: list[InputMappingGroup] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.config is not None:
            self.set_config(self.config)

    def __copy__(self) -> InputMappingLayout:
        result = InputMappingLayout(self.config)
        result.mapping_groups = [copy.copy(group) for group in self.mapping_groups]
        return result

    def __deepcopy__(self, memo: dict) -> InputMappingLayout:
        return self.__copy__()

    @property
    def _cfg(self) -> Any:
        if self.config is None:
            raise RuntimeError("mapping layout has no configuration")
        return self.config

    def set_config(self, config: Any) -> None:
        """Attach the configuration to the layout and to every group in it."""
        self.config = config
        for group in self.mapping_groups:
            group.set_config(config)

    def mapping_groups_to_unbind(self, source_group: int) -> list[int]:
        """Indices of groups whose bindings must stay unique with ``source_group``."""
        cfg = self._cfg
        return [
            index
            for index in range(len(self.mapping_groups))
            if cfg.should_bindings_be_unique_between_mapping_groups(source_group, index)
        ]

    def set_mappings(
        self,
        action_mappings: Iterable[ActionKeyMapping],
        axis_mappings: Iterable[AxisKeyMapping],
    ) -> None:
        """Spread mappings over groups, each into the first group not yet binding it."""
        cfg = self._cfg
        self.mapping_groups = []

        for action in action_mappings:
            key_group = cfg.get_key_group_of_key(action.key)
            target = next(
                (
                    group
                    for group in self.mapping_groups
                    if not group.get_all_actions(action.action_name, key_group)
                ),
                None,
            )
            if target is None:
                target = InputMappingGroup(self.config)
                self.mapping_groups.append(target)
            target.action_mappings.append(action)

        for axis in axis_mappings:
            is_axis_key = cfg.is_axis_key(axis.key)
            key_group = cfg.get_key_group_of_key(axis.key)
            target = next(
                (
                    group
                    for group in self.mapping_groups
                    if not group.get_all_axes(axis.axis_name, axis.scale, key_group, is_axis_key)
                ),
                None,
            )
            if target is None:
                target = InputMappingGroup(self.config)
                self.mapping_groups.append(target)
            target.axis_mappings.append(axis)

    def replace_action(
        self, action: ActionKeyMapping, mapping_group: int = 0, any_key_group: bool = False
    ) -> InputMappingLayout:
        """Bind ``action`` in a group, unbinding clashing chords; return what was unbound."""
        mapping_group = max(mapping_group, 0)
        unbound = InputMappingLayout(self.config)
        # Several unbound mappings may share the empty key, so only real keys clash.
        if is_valid_key(action.key):
            unbound = self.unbind_chord(
                action.key,
                self.mapping_groups_to_unbind(mapping_group),
                action.shift,
                action.ctrl,
                action.alt,
                action.cmd,
            )
        target = unbound.mapping_group(mapping_group)
        target += self.mapping_group(mapping_group).replace_action(action, any_key_group)
        return unbound

    def replace_axis(
        self, axis: AxisKeyMapping, mapping_group: int = 0, any_key_group: bool = False
    ) -> InputMappingLayout:
        """Bind ``axis`` in a group, unbinding clashing keys; return what was unbound."""
        mapping_group = max(mapping_group, 0)
        unbound = InputMappingLayout(self.config)
        if is_valid_key(axis.key):
            unbound = self.unbind_chord(axis.key, self.mapping_groups_to_unbind(mapping_group))
        target = unbound.mapping_group(mapping_group)
        target += self.mapping_group(mapping_group).replace_axis(axis, any_key_group)
        return unbound

    def unbind_chord(
        self,
        key: str,
        group_ids: Iterable[int],
        shift: bool = False,
        ctrl: bool = False,
        alt: bool = False,
        cmd: bool = False,
    ) -> InputMappingLayout:
        """Unbind a chord from the given groups; return the removed mappings as unbound."""
        unbound = InputMappingLayout(self.config)
        for group_id in group_ids:
            removed = self.mapping_groups[group_id].unbind_chord(key, shift, ctrl, alt, cmd)
            unbound.mapping_group(group_id)
            unbound.mapping_groups[group_id] = removed
        return unbound

    def remove_action(
        self,
        action_name: str,
        group_id: int,
        key_group: str | None = None,
        from_unbound: bool = False,
    ) -> None:
        """Remove bound (or unbound) actions with this name from one group."""
        self.mapping_group(group_id).remove_action(action_name, key_group, from_unbound)

    def remove_axis(
        self,
        axis_name: str,
        scale: float,
        group_id: int,
        key_group: str | None = None,
        from_unbound: bool = False,
        ignore_axis_keys: bool = False,
        any_scale: bool = False,
    ) -> None:
        """Remove bound (or unbound) axes with this name and scale from one group."""
        self.mapping_group(group_id).remove_axis(
            axis_name, scale, key_group, from_unbound, ignore_axis_keys, any_scale
        )

    def has_mapping_group(self, index: int) -> bool:
        """True if a group exists at ``index``."""
        return 0 <= index < len(self.mapping_groups)

    def mapping_group(self, index: int) -> InputMappingGroup:
        """The group at ``index``, adding empty groups up to it if needed."""
        if index < 0:
            raise IndexError(f"mapping group index {index} is negative")
        while len(self.mapping_groups) <= index:
            self.mapping_groups.append(InputMappingGroup(self.config))
        return self.mapping_groups[index]

    def _existing_group(self, index: int) -> InputMappingGroup:
        if not self.has_mapping_group(index):
            raise IndexError(f"no mapping group at index {index}")
        return self.mapping_groups[index]

    def get_action(
        self, mapping_group: int, action_name: str, key_group: str | None = None
    ) -> ActionKeyMapping:
        """The current action mapping in a group, or an empty mapping."""
        if not self.has_mapping_group(mapping_group):
            return ActionKeyMapping()
        return self.mapping_groups[mapping_group].get_action(action_name, key_group)

    def get_axis(
        self,
        mapping_group: int,
        axis_name: str,
        scale: float,
        key_group: str | None = None,
    ) -> AxisKeyMapping:
        """The current axis mapping in a group, or an empty mapping."""
        if not self.has_mapping_group(mapping_group):
            return AxisKeyMapping()
        return self.mapping_groups[mapping_group].get_axis(axis_name, scale, key_group)

    def actions(self, include_unbound: bool = False) -> list[ActionKeyMapping]:
        """All action mappings of all groups, optionally with the unbound ones."""
        result: list[ActionKeyMapping] = []
        for group in self.mapping_groups:
            result.extend(group.action_mappings)
            if include_unbound:
                result.extend(group.unbound_action_mappings)
        return result

    def axes(self, include_unbound: bool = False) -> list[AxisKeyMapping]:
        """All axis mappings of all groups, optionally with the unbound ones."""
        result: list[AxisKeyMapping] = []
        for group in self.mapping_groups:
            result.extend(group.axis_mappings)
            if include_unbound:
                result.extend(group.unbound_axis_mappings)
        return result

    def total_num_input_definitions(self) -> int:
        """Number of bound and unbound mappings across all groups."""
        return len(self.actions(True)) + len(self.axes(True))

    def find_unbound_mappings(self, source: InputMappingLayout) -> InputMappingLayout:
        """Mappings of ``source`` that this layout does not bind, as unbound mappings."""
        unbound = InputMappingLayout(self.config)
        for index, source_group in enumerate(source.mapping_groups):
            unbound.mapping_group(index)
            if self.has_mapping_group(index):
                unbound.mapping_groups[index] = self.mapping_groups[index].find_unbound_mappings(
                    source_group
                )
            else:
                unbound.mapping_groups[index] = copy.copy(source_group)
        return unbound

    def merge_mappings(self, overrides: InputMappingLayout) -> InputMappingLayout:
        """Replace mappings with every bound mapping of ``overrides``; return self."""
        for index, group in enumerate(list(overrides.mapping_groups)):
            for action in list(group.action_mappings):
                self.replace_action(action, index, False)
            for axis in list(group.axis_mappings):
                self.replace_axis(axis, index, False)
        return self

    def merge_unbound_mappings(self, overrides: InputMappingLayout) -> InputMappingLayout:
        """Take over the unbound mappings of ``overrides``; return self."""
        cfg = self._cfg
        for index, group in enumerate(list(overrides.mapping_groups)):
            for unbound_action in list(group.unbound_action_mappings):
                self.remove_action(
                    unbound_action.action_name,
                    index,
                    cfg.get_key_group_of_key(unbound_action.key),
                    True,
                )
                self.mapping_group(index).unbound_action_mappings.append(unbound_action)
            for unbound_axis in list(group.unbound_axis_mappings):
                # A button key leaves unbound axis-key entries, which still mask
                # other scales; an axis key clears unbound entries of all scales.
                is_axis_key = cfg.is_axis_key(unbound_axis.key)
                self.remove_axis(
                    unbound_axis.axis_name,
                    unbound_axis.scale,
                    index,
                    cfg.get_key_group_of_key(unbound_axis.key),
                    True,
                    not is_axis_key,
                )
                self.mapping_group(index).unbound_axis_mappings.append(unbound_axis)
        return self

    def apply_unbound_mappings(self) -> None:
        """Remove the bindings that unbound mappings mask, then drop the unbound ones."""
        cfg = self._cfg
        for index, group in enumerate(self.mapping_groups):
            for unbound_action in list(group.unbound_action_mappings):
                self.remove_action(
                    unbound_action.action_name,
                    index,
                    cfg.get_key_group_of_key(unbound_action.key),
                    False,
                )
            group.unbound_action_mappings.clear()
            for unbound_axis in list(group.unbound_axis_mappings):
                # An unbound axis key spans all scales of its axis.
                self.remove_axis(
                    unbound_axis.axis_name,
                    unbound_axis.scale,
                    index,
                    cfg.get_key_group_of_key(unbound_axis.key),
                    False,
                    False,
                    cfg.is_axis_key(unbound_axis.key),
                )
            group.unbound_axis_mappings.clear()

    def to_unbound_mappings(self) -> InputMappingLayout:
        """A new layout holding this layout's bound mappings as unbound ones."""
        result = InputMappingLayout(self.config)
        result.mapping_groups = [group.to_unbound_mappings() for group in self.mapping_groups]
        return result

    def remove_unbound_mappings(self) -> None:
        """Drop unbound entries that carry no key from every group."""
        for group in self.mapping_groups:
            group.remove_unbound_mappings()

    def remove_redundant_mappings(self, base: InputMappingLayout) -> None:
        """Drop overrides that the matching groups of ``base`` make redundant."""
        for index, group in enumerate(self.mapping_groups):
            if base.has_mapping_group(index):
                group.remove_redundant_mappings(base.mapping_groups[index])

    def mark_all_mappings_default(self) -> None:
        """Flag every bound mapping as coming from the base preset."""
        for group in self.mapping_groups:
            group.mark_all_mappings_default()

    def consolidate_default_changes(self, base: InputMappingLayout) -> None:
        """Bring mappings flagged as default in line with the current ``base``."""
        cfg = self._cfg
        for index, group in enumerate(self.mapping_groups):
            base_group = base._existing_group(index)

            actions = []
            for mapping in group.action_mappings:
                if mapping.is_default:
                    default = base_group.get_action(
                        mapping.action_name, cfg.get_key_group_of_key(mapping.key)
                    )
                    if mapping != default:
                        mapping = replace(default, is_default=True)
                actions.append(mapping)
            group.action_mappings[:] = actions

            axes = []
            for mapping in group.axis_mappings:
                if mapping.is_default:
                    default = base_group.get_axis(
                        mapping.axis_name, mapping.scale, cfg.get_key_group_of_key(mapping.key)
                    )
                    if mapping != default:
                        mapping = replace(default, is_default=True)
                axes.append(mapping)
            group.axis_mappings[:] = axes

    def dump_to_log(self, logger: logging.Logger | None = None) -> None:
        """Write every group's mappings to ``logger`` at info level."""
        logger = logger or _log
        logger.info("        Mapping Groups:")
        if not self.mapping_groups:
            logger.info("            NONE")
        for index, group in enumerate(self.mapping_groups):
            logger.info("            %i:", index)
            sections = (
                ("Actions", group.action_mappings),
                ("Axes", group.axis_mappings),
                ("Unbound Actions", group.unbound_action_mappings),
                ("Unbound Axes", group.unbound_axis_mappings),
            )
            for title, mappings in sections:
                logger.info("                %s:", title)
                if not mappings:
                    logger.info("                    NONE")
                for number, mapping in enumerate(mappings):
                    logger.info("                    %i: %s", number, mapping.to_debug_string())