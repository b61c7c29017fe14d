"""Tracks players, stores their input overrides and applies merged layouts to them."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from keyrebind.config import InputConfig, InputMappingPreset
from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, is_valid_key
from keyrebind.layout import InputMappingLayout
from keyrebind.player_mappings import PlayerInputMappings

_log = logging.getLogger(__name__)

MappingsChangedCallback = Callable[["Player"], None]


class InvalidPlayerError(ValueError):
    """The player cannot take part in input rebinding."""


@dataclass(eq=False)
class Player:
    """A locally controlled player whose input mappings are managed.

    ``load_input_mappings`` and ``save_input_mappings`` let a player keep its
    mappings in its own storage; when they are not set, the manager's store
    alone is used. ``action_mappings`` and ``axis_mappings`` hold the merged
    mappings last applied to the player.
    """

    name: str = "Player"
    unique_id: str = "0"
    is_local: bool = True
    has_local_player: bool = True
    destroyed: bool = False
    default_preset_tag: Optional[str] = None
    controller_id: int = 0
    load_input_mappings: Optional[Callable[[], Optional[PlayerInputMappings]]] = None
    save_input_mappings: Optional[Callable[[PlayerInputMappings], None]] = None
    action_mappings: list[ActionKeyMapping] = field(default_factory=list)
    axis_mappings: list[AxisKeyMapping] = field(default_factory=list)

    @property
    def alive(self) -> bool:
        """True while the player has not been destroyed."""
        return not self.destroyed


def _player_problem(player: Optional[Player], context: str) -> Optional[str]:
    if player is None or not player.alive:
        return f"{context}: Invalid Player Controller object"
    if not player.is_local:
        return f"{context}: Player Controller '{player.name}' is not locally controlled"
    if not player.has_local_player:
        return f"{context}: Player Controller '{player.name}' does not have a valid LocalPlayer"
    return None


def is_valid_player(player: Optional[Player], context: str = "") -> bool:
    """True if ``player`` exists, is alive, local, and has a local player; logs why not."""
    problem = _player_problem(player, context)
    if problem is not None:
        _log.error(problem)
        return False
    return True


def _require_player(player: Optional[Player], context: str) -> Player:
    problem = _player_problem(player, context)
    if problem is not None:
        raise InvalidPlayerError(problem)
    assert player is not None
    return player


class InputMappingManager:
    """Keeps each player's input overrides and applies them on top of presets."""

    def __init__(
        self,
        config: Optional[InputConfig] = None,
        player_input_overrides: Optional[Iterable[PlayerInputMappings]] = None,
        debug: bool = False,
    ) -> None:
        self.config = config if config is not None else InputConfig()
        self.debug = debug
        self.player_input_overrides: list[PlayerInputMappings] = list(
            player_input_overrides or ()
        )
        self.registered_players: list[Player] = []
        self._subscribers: list[MappingsChangedCallback] = []
        for mappings in self.player_input_overrides:
            mappings.set_config(self.config)
            mappings.migrate_deprecated_properties()

    # Notifications

    def subscribe(self, callback: MappingsChangedCallback) -> Callable[[], None]:
        """Call ``callback`` with the player whenever a player's mappings change.

        Returns a function that removes the subscription.
        """
        if callback not in self._subscribers:
            self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _broadcast(self, player: Player) -> None:
        for callback in list(self._subscribers):
            callback(player)

    # Registration and storage

    def _apply(self, player: Player, mappings: PlayerInputMappings) -> None:
        layout = mappings.build_merged_mapping_layout()
        player.action_mappings = layout.actions(False)
        player.axis_mappings = layout.axes(False)

    def register_player(self, player: Player) -> None:
        """Load, refresh and apply a player's mappings, and track the player."""
        if player is None or not player.alive:
            raise InvalidPlayerError("Register Player: Invalid Player Controller object")
        _log.info("Registering input overrides for %s", player.name)

        mappings = self.find_player_input_mappings(player)
        mappings.migrate_deprecated_properties()
        mappings.mapping_overrides.consolidate_default_changes(
            mappings.get_base_preset_mappings()
        )
        self.save_player_input_mappings(player, mappings)

        self._apply(player, mappings)
        if player not in self.registered_players:
            self.registered_players.append(player)
        self._broadcast(player)

    def unregister_player(self, player: Player) -> None:
        """Stop tracking a player, for instance once it has been destroyed."""
        _log.debug("Registered player %s unregistered", player.name)
        if player in self.registered_players:
            self.registered_players.remove(player)

    def find_player_input_mappings(self, player: Player) -> PlayerInputMappings:
        """The player's stored mappings, or fresh ones on its default preset."""
        if player is None:
            raise InvalidPlayerError("Find Player Input Mappings: Invalid Player Controller object")

        found: Optional[PlayerInputMappings] = None
        if player.load_input_mappings is not None:
            found = player.load_input_mappings()
            if found is not None:
                _log.debug("Found input mappings for %s via custom storage", player.name)

        player_id = player.unique_id
        if found is None:
            _log.debug("Checking stored mappings for %s with ID %s", player.name, player_id)
            for stored in self.player_input_overrides:
                if stored.player_id == player_id:
                    found = copy.copy(stored)

        if found is not None:
            found.set_config(self.config)
            return found

        return PlayerInputMappings(
            player_id=player_id,
            base_preset_tag=player.default_preset_tag,
            config=self.config,
        )

    def _find_or_default(self, player: Optional[Player]) -> PlayerInputMappings:
        if player is not None and player.alive:
            return self.find_player_input_mappings(player)
        return PlayerInputMappings(config=self.config)

    def save_player_input_mappings(
        self, player: Player, mappings: PlayerInputMappings
    ) -> None:
        """Store ``mappings`` in place of any with the same player id."""
        _log.info("Saving input overrides for %s", player.name)
        self.player_input_overrides = [
            existing
            for existing in self.player_input_overrides
            if existing.player_id != mappings.player_id
        ]
        self.player_input_overrides.append(copy.copy(mappings))

        if player is None or not player.alive:
            raise InvalidPlayerError("Save Player Input Mappings: Invalid Player Controller object")
        if player.save_input_mappings is not None:
            player.save_input_mappings(mappings)

    # Changing mappings

    def set_player_key_group(self, player: Player, key_group: Optional[str]) -> None:
        """Set the key group the player's labels and lookups use."""
        player = _require_player(player, "Set Player Key Group")
        mappings = self.find_player_input_mappings(player)
        if mappings.player_key_group == key_group:
            return
        mappings.player_key_group = key_group
        self.save_player_input_mappings(player, mappings)
        self._broadcast(player)

    def add_player_action_override(
        self,
        player: Player,
        new_mapping: ActionKeyMapping,
        mapping_group: int = 0,
        any_key_group: bool = False,
    ) -> None:
        """Bind an action for the player, then apply and store the result."""
        player = _require_player(player, "Add Player Action Override")
        _log.info("InputMappingManager: Adding action override: %s", new_mapping.action_name)
        mappings = self.find_player_input_mappings(player)
        mappings.add_action_override(new_mapping, mapping_group, any_key_group)
        self._apply(player, mappings)
        self.save_player_input_mappings(player, mappings)
        self._broadcast(player)
        if self.debug:
            self.dump_players()

    def add_player_axis_override(
        self,
        player: Player,
        new_mapping: AxisKeyMapping,
        mapping_group: int = 0,
        any_key_group: bool = False,
    ) -> None:
        """Bind an axis for the player, then apply and store the result."""
        player = _require_player(player, "Add Player Axis Override")
        _log.info(
            "InputMappingManager: Adding axis override: %s, Scale: %f",
            new_mapping.axis_name,
            new_mapping.scale,
        )
        mappings = self.find_player_input_mappings(player)
        mappings.add_axis_override(new_mapping, mapping_group, any_key_group)
        self._apply(player, mappings)
        self.save_player_input_mappings(player, mappings)
        self._broadcast(player)
        if self.debug:
            self.dump_players()

    def set_player_input_preset(self, player: Player, preset: InputMappingPreset) -> None:
        """Switch the player to ``preset``, discarding the player's overrides."""
        player = _require_player(player, "Set Player Input Preset")
        _log.info(
            "Setting input preset for '%s', tag: %s", player.name, preset.preset_tag or "Invalid"
        )
        if player not in self.registered_players:
            self.register_player(player)

        mappings = self.find_player_input_mappings(player)
        mappings.base_preset_tag = preset.preset_tag
        mappings.mapping_overrides = InputMappingLayout(self.config)
        self._apply(player, mappings)
        self.save_player_input_mappings(player, mappings)
        self._broadcast(player)

    def set_player_input_preset_by_tag(self, player: Player, preset_tag: Optional[str]) -> bool:
        """Switch the player to the configured preset with this tag.

        Returns False, changing nothing, when no preset has the tag.
        """
        preset = next(
            (p for p in self.config.get_input_presets() if p.preset_tag == preset_tag), None
        )
        if preset is None:
            return False
        self.set_player_input_preset(player, preset)
        return True

    # Queries

    def _merged_layout(
        self, player: Optional[Player], key_group: Optional[str], use_player_key_group: bool
    ) -> tuple[InputMappingLayout, Optional[str]]:
        mappings = self._find_or_default(player)
        if use_player_key_group:
            key_group = mappings.player_key_group
        return mappings.build_merged_mapping_layout(), key_group

    def get_player_action_mapping(
        self,
        player: Optional[Player],
        action_name: str,
        mapping_group: int = -1,
        key_group: Optional[str] = None,
        use_player_key_group: bool = True,
    ) -> ActionKeyMapping:
        """The player's action mapping; group -1 means the first group that binds it."""
        layout, key_group = self._merged_layout(player, key_group, use_player_key_group)
        if mapping_group == -1:
            for group in layout.mapping_groups:
                mapping = group.get_action(action_name, key_group)
                if is_valid_key(mapping.key):
                    return mapping
            return ActionKeyMapping()
        if layout.has_mapping_group(mapping_group):
            return layout.mapping_groups[mapping_group].get_action(action_name, key_group)
        return ActionKeyMapping()

    def get_player_axis_mapping(
        self,
        player: Optional[Player],
        axis_name: str,
        scale: float,
        mapping_group: int = -1,
        key_group: Optional[str] = None,
        use_player_key_group: bool = True,
    ) -> AxisKeyMapping:
        """The player's axis mapping; group -1 means the first group that binds it."""
        layout, key_group = self._merged_layout(player, key_group, use_player_key_group)
        if mapping_group == -1:
            for group in layout.mapping_groups:
                mapping = group.get_axis(axis_name, scale, key_group)
                if is_valid_key(mapping.key):
                    return mapping
            return AxisKeyMapping()
        if layout.has_mapping_group(mapping_group):
            return layout.mapping_groups[mapping_group].get_axis(axis_name, scale, key_group)
        return AxisKeyMapping()

    def get_player_action_mappings(
        self,
        player: Player,
        action_name: str,
        mapping_group: int = -1,
        key_group: Optional[str] = None,
        use_player_key_group: bool = True,
    ) -> list[ActionKeyMapping]:
        """All of the player's mappings for an action, in one group or all (-1)."""
        _require_player(player, "Get Player Action Mappings")
        layout, key_group = self._merged_layout(player, key_group, use_player_key_group)
        if mapping_group == -1:
            return [
                mapping
                for group in layout.mapping_groups
                for mapping in group.get_all_actions(action_name, key_group)
            ]
        if layout.has_mapping_group(mapping_group):
            return layout.mapping_groups[mapping_group].get_all_actions(action_name, key_group)
        return []

    def get_player_axis_mappings(
        self,
        player: Player,
        axis_name: str,
        scale: float,
        mapping_group: int = -1,
        key_group: Optional[str] = None,
        use_player_key_group: bool = True,
    ) -> list[AxisKeyMapping]:
        """All of the player's mappings for an axis and scale, in one group or all (-1)."""
        _require_player(player, "Get Player Axis Mappings")
        layout, key_group = self._merged_layout(player, key_group, use_player_key_group)
        if mapping_group == -1:
            return [
                mapping
                for group in layout.mapping_groups
                for mapping in group.get_all_axes(axis_name, scale, key_group)
            ]
        if layout.has_mapping_group(mapping_group):
            return layout.mapping_groups[mapping_group].get_all_axes(axis_name, scale, key_group)
        return []

    def get_player_mappings_by_key(
        self, player: Player, key: str
    ) -> tuple[list[ActionKeyMapping], list[AxisKeyMapping]]:
        """The player's action and axis mappings bound to ``key``."""
        _require_player(player, "Get Player Key Mappings")
        layout = self._find_or_default(player).build_merged_mapping_layout()
        actions = [action for action in layout.actions() if action.key == key]
        axes = [axis for axis in layout.axes() if axis.key == key]
        return actions, axes

    # Diagnostics

    def dump_players(self, logger: Optional[logging.Logger] = None) -> None:
        """Log every registered player with its overrides and merged mappings."""
        logger = logger or _log
        logger.info("----- DumpPlayers -----")
        for index, player in enumerate(self.registered_players):
            logger.info("PlayerController %i: ", index)
            if not player.alive:
                logger.info("INVALID")
                continue
            logger.info("    Object name: %s", player.name)
            logger.info("    Custom storage: %s", player.load_input_mappings is not None)
            mappings = self.find_player_input_mappings(player)
            logger.info("    Player ID (if applicable): %s", mappings.player_id or "EMPTY")
            logger.info("    Key Group: %s", mappings.player_key_group)
            logger.info("    Base Preset Tag: %s", mappings.base_preset_tag)
            logger.info(
                "    Custom Mappings: %i",
                mappings.mapping_overrides.total_num_input_definitions(),
            )
            mappings.mapping_overrides.dump_to_log(logger)
            merged = mappings.build_merged_mapping_layout()
            logger.info("    Merged Mappings: %i", merged.total_num_input_definitions())
            merged.dump_to_log(logger)
        logger.info("----- End DumpPlayers -----")