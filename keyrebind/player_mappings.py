"""A player's input mappings: a base preset plus the player's own overrides."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field, replace
from typing import Any

from keyrebind.config import InputMappingPreset
from keyrebind.keys import ActionKeyMapping, AxisKeyMapping
from keyrebind.layout import InputMappingLayout

_log = logging.getLogger(__name__)


@dataclass
class PlayerInputMappings:
    """The input mappings of one player.

    The final layout is the base preset with ``mapping_overrides`` laid over
    it. With ``null_base_preset`` the base is an empty layout.
    """

    player_id: str = ""
    base_preset_tag: str | None = None
    config: Any = field(default=None, compare=False, repr=False)
    null_base_preset: bool = False
    player_key_group: str | None = None
    mapping_overrides: InputMappingLayout = field(default_factory=InputMappingLayout)
    player_index_deprecated: int = -1
    preset_deprecated: InputMappingPreset = field(default_factory=InputMappingPreset)

    def __post_init__(self) -> None:
        if self.config is not None:
            self.set_config(self.config)
            if self.player_key_group is None:
                self.apply_default_key_group()

    def __copy__(self) -> PlayerInputMappings:
        result = PlayerInputMappings(
            player_id=self.player_id,
            base_preset_tag=self.base_preset_tag,
            null_base_preset=self.null_base_preset,
            player_key_group=self.player_key_group,
            mapping_overrides=copy.copy(self.mapping_overrides),
            player_index_deprecated=self.player_index_deprecated,
            preset_deprecated=copy.copy(self.preset_deprecated),
        )
        result.config = self.config
        return result

    @property
    def _cfg(self) -> Any:
        if self.config is None:
            raise RuntimeError("player input mappings have no configuration")
        return self.config

    def set_config(self, config: Any) -> None:
        """Attach the configuration to these mappings and their overrides."""
        self.config = config
        self.mapping_overrides.set_config(config)

    def apply_default_key_group(self) -> None:
        """Use the first configured key group as the player's key group."""
        key_groups = self._cfg.key_groups
        if key_groups:
            self.player_key_group = key_groups[0].key_group_tag

    def _dump(self, title: str, layout: InputMappingLayout) -> None:
        if _log.isEnabledFor(logging.DEBUG):
            _log.debug(title)
            layout.dump_to_log(_log)

    def add_action_override(
        self,
        new_mapping: ActionKeyMapping,
        mapping_group: int = 0,
        any_key_group: bool = False,
    ) -> None:
        """Bind an action for this player, recording whatever it unbinds."""
        _log.debug(
            "AddActionOverride: %s, MappingGroup: %i, AnyKeyGroup: %s",
            new_mapping.to_debug_string(),
            mapping_group,
            any_key_group,
        )
        base = self.get_base_preset_mappings()
        base_has_mapping = base.has_mapping_group(mapping_group) and any(
            existing == new_mapping
            for existing in base.mapping_groups[mapping_group].get_all_actions(
                new_mapping.action_name, None
            )
        )
        mapping = replace(new_mapping, is_default=base_has_mapping)

        merged = self.build_merged_mapping_layout()
        unbound = merged.replace_action(mapping, mapping_group, any_key_group)
        self._dump("UnboundMappings:", unbound)

        self.mapping_overrides.merge_unbound_mappings(unbound)
        self._dump("MappingOverrides after merge_unbound_mappings:", self.mapping_overrides)

        self.mapping_overrides.replace_action(mapping, mapping_group, any_key_group)
        self._dump("MappingOverrides after replace_action:", self.mapping_overrides)

        self.mapping_overrides.remove_redundant_mappings(base)
        self._dump("MappingOverrides after remove_redundant_mappings:", self.mapping_overrides)

    def add_axis_override(
        self,
        new_mapping: AxisKeyMapping,
        mapping_group: int = 0,
        any_key_group: bool = False,
    ) -> None:
        """Bind an axis for this player, recording whatever it unbinds."""
        _log.debug(
            "AddAxisOverride: %s, MappingGroup: %i, AnyKeyGroup: %s",
            new_mapping.to_debug_string(),
            mapping_group,
            any_key_group,
        )
        base = self.get_base_preset_mappings()
        base_has_mapping = base.has_mapping_group(mapping_group) and any(
            existing == new_mapping
            for existing in base.mapping_groups[mapping_group].get_all_axes(
                new_mapping.axis_name, new_mapping.scale, None
            )
        )
        mapping = replace(new_mapping, is_default=base_has_mapping)

        merged = self.build_merged_mapping_layout()
        unbound = merged.replace_axis(mapping, mapping_group, any_key_group)
        self._dump("UnboundMappings:", unbound)

        self.mapping_overrides.merge_unbound_mappings(unbound)
        self._dump("MappingOverrides after merge_unbound_mappings:", self.mapping_overrides)

        self.mapping_overrides.replace_axis(mapping, mapping_group, any_key_group)
        self._dump("MappingOverrides after replace_axis:", self.mapping_overrides)

        self.mapping_overrides.remove_redundant_mappings(base)
        self._dump("MappingOverrides after remove_redundant_mappings:", self.mapping_overrides)

    def build_merged_mapping_layout(self, debug_log: bool = False) -> InputMappingLayout:
        """The base preset with this player's overrides applied on top."""
        layout = self.get_base_preset_mappings()

        if debug_log:
            _log.info("Base preset:")
            layout.dump_to_log(_log)
            _log.info("Overrides:")
            self.mapping_overrides.dump_to_log(_log)

        layout.merge_unbound_mappings(self.mapping_overrides)
        if debug_log:
            _log.info("Merge unbound:")
            layout.dump_to_log(_log)

        layout.apply_unbound_mappings()
        if debug_log:
            _log.info("Apply unbound:")
            layout.dump_to_log(_log)

        layout.merge_mappings(self.mapping_overrides)
        if debug_log:
            _log.info("Merge overrides:")
            layout.dump_to_log(_log)

        return layout

    def get_base_preset_mappings(self) -> InputMappingLayout:
        """A fresh copy of the base preset's layout, or an empty one."""
        if self.null_base_preset:
            return InputMappingLayout(self._cfg)
        return self._cfg.get_input_preset_by_tag(self.base_preset_tag).input_layout

    def migrate_deprecated_properties(self) -> None:
        """Turn values held in deprecated fields into a player id and overrides."""
        cfg = self._cfg

        if self.player_index_deprecated >= 0 and not self.player_id:
            self.player_id = str(self.player_index_deprecated)
            self.player_index_deprecated = -1

        old_groups = self.preset_deprecated.mapping_groups_deprecated
        if old_groups and self.mapping_overrides.total_num_input_definitions() == 0:
            self.base_preset_tag = self.preset_deprecated.preset_tag

            old_mappings = InputMappingLayout(cfg, [copy.copy(group) for group in old_groups])
            preset_mappings = cfg.get_input_preset_by_tag(self.base_preset_tag).input_layout

            # Base preset mappings the old mappings had no binding for become unbound,
            # and the old mappings are laid over them.
            unbound = old_mappings.find_unbound_mappings(preset_mappings)
            self.mapping_overrides = unbound.merge_mappings(old_mappings)
            self.mapping_overrides.set_config(cfg)
            self.mapping_overrides.remove_redundant_mappings(preset_mappings)

            self.preset_deprecated = InputMappingPreset()