"""Input configuration: presets, key groups, axis associations and key icons."""

from __future__ import annotations

import copy
import logging
from dataclasses import InitVar, dataclass, field
from typing import Any, Iterable

from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, Keys, is_valid_key
from keyrebind.layout import InputMappingLayout
from keyrebind.mapping_group import InputMappingGroup

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyScale:
    """A key together with the axis scale it stands for."""

    key: str = Keys.INVALID
    scale: float = 1.0


@dataclass
class AxisAssociation:
    """An analog axis key and the button keys that each drive one direction of it."""

    axis_key: str = Keys.INVALID
    button_keys: list[KeyScale] = field(default_factory=list)
    analog_key_deprecated: str = Keys.INVALID
    boolean_keys_deprecated: list[KeyScale] = field(default_factory=list)


@dataclass
class KeyGroup:
    """A tagged set of keys, such as all keyboard and mouse keys."""

    key_group_tag: str | None = None
    keys: list[str] = field(default_factory=list)

    def contains(self, key: str) -> bool:
        """True if ``key`` belongs to this group."""
        return key in self.keys


@dataclass
class MappingGroupLink:
    """Mapping groups whose bindings must stay unique between each other."""

    mapping_groups: list[int] = field(default_factory=list)


@dataclass
class KeyIconSet:
    """Icons for keys, selected by a set of tags."""

    tags: frozenset[str] = field(default_factory=frozenset)
    icon_map: dict[str, Any] = field(default_factory=dict)
    icons_deprecated: list[tuple[str, Any]] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.tags = frozenset(self.tags)

    def get_icon(self, key: str) -> Any:
        """The icon for ``key``, or None when the set has no icon for it."""
        if key not in self.icon_map:
            return None
        icon = self.icon_map[key]
        if icon is None:
            _log.warning(
                "Key icon defined but empty - Key: %s, tags: %s",
                key,
                ", ".join(sorted(self.tags)),
            )
        return icon


@dataclass
class InputMappingPreset:
    """A named layout of mappings that players start from."""

    preset_tag: str | None = None
    use_default_mappings: bool = False
    config: InitVar[Any] = None
    input_layout: InputMappingLayout = field(default_factory=InputMappingLayout)
    mapping_groups_deprecated: list[InputMappingGroup] = field(default_factory=list)

    def __post_init__(self, config: Any) -> None:
        if config is not None:
            self.set_config(config)

    def __copy__(self) -> InputMappingPreset:
        return InputMappingPreset(
            self.preset_tag,
            self.use_default_mappings,
            None,
            copy.copy(self.input_layout),
            [copy.copy(group) for group in self.mapping_groups_deprecated],
        )

    @classmethod
    def from_mappings(
        cls,
        tag: str | None,
        action_mappings: Iterable[ActionKeyMapping],
        axis_mappings: Iterable[AxisKeyMapping],
    ) -> InputMappingPreset:
        """A preset whose mappings are spread over groups under a default configuration."""
        preset = cls(tag, False, InputConfig())
        preset.input_layout.set_mappings(action_mappings, axis_mappings)
        return preset

    def set_config(self, config: Any) -> None:
        """Attach the configuration to the preset's layout."""
        self.input_layout.set_config(config)


def _default_axis_associations() -> list[AxisAssociation]:
    return [
        AxisAssociation(
            Keys.GAMEPAD_LEFT_X,
            [KeyScale(Keys.GAMEPAD_LEFT_STICK_RIGHT), KeyScale(Keys.GAMEPAD_LEFT_STICK_LEFT, -1.0)],
        ),
        AxisAssociation(
            Keys.GAMEPAD_LEFT_Y,
            [KeyScale(Keys.GAMEPAD_LEFT_STICK_UP), KeyScale(Keys.GAMEPAD_LEFT_STICK_DOWN, -1.0)],
        ),
        AxisAssociation(
            Keys.GAMEPAD_RIGHT_X,
            [
                KeyScale(Keys.GAMEPAD_RIGHT_STICK_RIGHT),
                KeyScale(Keys.GAMEPAD_RIGHT_STICK_LEFT, -1.0),
            ],
        ),
        # Intentionally inverted, matching how the right stick Y values arrive.
        AxisAssociation(
            Keys.GAMEPAD_RIGHT_Y,
            [
                KeyScale(Keys.GAMEPAD_RIGHT_STICK_UP, -1.0),
                KeyScale(Keys.GAMEPAD_RIGHT_STICK_DOWN),
            ],
        ),
        AxisAssociation(Keys.MOUSE_X, [KeyScale(Keys.MOUSE_X), KeyScale(Keys.MOUSE_X, -1.0)]),
        AxisAssociation(Keys.MOUSE_Y, [KeyScale(Keys.MOUSE_Y), KeyScale(Keys.MOUSE_Y, -1.0)]),
    ]


@dataclass(eq=False)
class InputConfig:
    """Settings that govern how input mappings are bound, displayed and merged.

    ``default_action_mappings`` and ``default_axis_mappings`` are the
    project-wide mappings that presets with ``use_default_mappings`` start from.
    """

    auto_initialize_player_input_overrides: bool = True
    allow_modifier_keys: bool = True
    allow_multiple_bindings_per_key: bool = False
    shift_modifier_override_text: str = "Shift"
    ctrl_modifier_override_text: str = "Ctrl"
    alt_modifier_override_text: str = "Alt"
    cmd_modifier_override_text: str = "Cmd"
    mouse_move_capture_distance: float = 0.0
    axis_associations: list[AxisAssociation] = field(default_factory=_default_axis_associations)
    input_presets: list[InputMappingPreset] = field(default_factory=list)
    key_groups: list[KeyGroup] = field(default_factory=list)
    mapping_group_links: list[MappingGroupLink] = field(default_factory=list)
    key_icon_sets: list[KeyIconSet] = field(default_factory=list)
    key_friendly_names: dict[str, str] = field(default_factory=dict)
    allowed_keys: list[str] = field(default_factory=list)
    disallowed_keys: list[str] = field(default_factory=list)
    binding_escape_keys: list[str] = field(default_factory=list)
    preserved_actions: list[str] = field(default_factory=list)
    preserved_axes: list[str] = field(default_factory=list)
    default_action_mappings: list[ActionKeyMapping] = field(default_factory=list)
    default_axis_mappings: list[AxisKeyMapping] = field(default_factory=list)
    blacklisted_actions_deprecated: list[str] = field(default_factory=list)
    blacklisted_axes_deprecated: list[str] = field(default_factory=list)

    def get_input_presets(self) -> list[InputMappingPreset]:
        """Copies of the presets, resolved and with every mapping flagged as default.

        With no presets configured, one untagged preset built from the default
        mappings is returned.
        """
        result = [copy.copy(preset) for preset in self.input_presets]
        for preset in result:
            preset.set_config(self)
        if not self.input_presets:
            result.append(InputMappingPreset(None, True, self))
        for preset in result:
            if preset.use_default_mappings:
                preset.input_layout.set_mappings(
                    self.default_action_mappings, self.default_axis_mappings
                )
            preset.input_layout.mark_all_mappings_default()
        return result

    def get_input_preset_by_tag(self, preset_tag: str | None) -> InputMappingPreset:
        """The preset with this tag, or the first preset when none has it."""
        presets = self.get_input_presets()
        return next((p for p in presets if p.preset_tag == preset_tag), presets[0])

    @staticmethod
    def _icon_from_set(key: str, axis_button: str, icon_set: KeyIconSet) -> Any:
        if is_valid_key(axis_button):
            icon = icon_set.get_icon(axis_button)
            if icon:
                return icon
        return icon_set.get_icon(key)

    def get_icon_for_key(
        self, key: str, tags: Iterable[str] = (), axis_scale: float = 1.0
    ) -> Any:
        """The best icon for ``key``: exact tag match first, then supersets, any overlap, any set."""
        tags = frozenset(tags)
        axis_button = self.get_axis_button(key, axis_scale)
        passes = (
            lambda s: s.tags == tags,
            lambda s: s.tags >= tags,
            lambda s: bool(s.tags & tags),
            lambda s: True,
        )
        for matches in passes:
            for icon_set in self.key_icon_sets:
                if matches(icon_set):
                    icon = self._icon_from_set(key, axis_button, icon_set)
                    if icon:
                        return icon
        return None

    def get_key_friendly_name(self, key: str) -> str:
        """Display text for ``key``."""
        if not is_valid_key(key):
            return "None"
        return self.key_friendly_names.get(key, key)

    def does_key_group_contain_key(self, key_group_tag: str | None, key: str) -> bool:
        """True if the first key group with this tag contains ``key``."""
        group = next((g for g in self.key_groups if g.key_group_tag == key_group_tag), None)
        return group is not None and group.contains(key)

    def same_key_group(self, key_a: str, key_b: str) -> bool:
        """True if both keys fall in the same key group (or in none)."""
        return self.get_key_group_of_key(key_a) == self.get_key_group_of_key(key_b)

    def get_axis_key(self, button_key: str) -> KeyScale:
        """The axis key and scale that ``button_key`` drives, or an invalid KeyScale."""
        for association in self.axis_associations:
            for button in association.button_keys:
                if button.key == button_key:
                    return KeyScale(association.axis_key, button.scale)
        return KeyScale()

    def get_axis_button(self, axis_key: str, axis_scale: float) -> str:
        """The button key for one direction of ``axis_key``, or the invalid key."""
        association = next(
            (a for a in self.axis_associations if a.axis_key == axis_key), None
        )
        if association is None:
            return Keys.INVALID
        button = next((b for b in association.button_keys if b.scale == axis_scale), None)
        return button.key if button is not None else Keys.INVALID

    def is_key_allowed(self, key: str) -> bool:
        """True if ``key`` passes the allow list (when set) and is not disallowed."""
        if self.allowed_keys and key not in self.allowed_keys:
            return False
        return key not in self.disallowed_keys

    def should_bindings_be_unique_between_mapping_groups(
        self, group_a: int, group_b: int
    ) -> bool:
        """True if one key may not be bound in both groups."""
        if not self.allow_multiple_bindings_per_key:
            return True
        return any(
            group_a in link.mapping_groups and group_b in link.mapping_groups
            for link in self.mapping_group_links
        )

    def get_key_group_of_key(self, key: str) -> str | None:
        """Tag of the first key group holding ``key``, or None."""
        return next((g.key_group_tag for g in self.key_groups if g.contains(key)), None)

    def is_key_group_defined(self, key_group_tag: str | None) -> bool:
        """True if a key group has this tag."""
        return any(g.key_group_tag == key_group_tag for g in self.key_groups)

    def is_axis_key(self, key: str) -> bool:
        """True if ``key`` is the analog key of an axis association."""
        return any(a.axis_key == key for a in self.axis_associations)

    def migrate_deprecated_properties(self) -> None:
        """Move values held in deprecated fields into their current ones."""
        for action in self.blacklisted_actions_deprecated:
            if action not in self.preserved_actions:
                self.preserved_actions.append(action)
        self.blacklisted_actions_deprecated.clear()

        for axis in self.blacklisted_axes_deprecated:
            if axis not in self.preserved_axes:
                self.preserved_axes.append(axis)
        self.blacklisted_axes_deprecated.clear()

        for association in self.axis_associations:
            if is_valid_key(association.analog_key_deprecated) and not is_valid_key(
                association.axis_key
            ):
                association.axis_key = association.analog_key_deprecated
                association.analog_key_deprecated = Keys.INVALID
            if association.boolean_keys_deprecated and not association.button_keys:
                association.button_keys = list(association.boolean_keys_deprecated)
                association.boolean_keys_deprecated.clear()

        for preset in self.input_presets:
            if preset.mapping_groups_deprecated and not preset.input_layout.mapping_groups:
                preset.input_layout.mapping_groups = list(preset.mapping_groups_deprecated)
                preset.mapping_groups_deprecated.clear()

        for icon_set in self.key_icon_sets:
            for key, icon in icon_set.icons_deprecated:
                icon_set.icon_map.setdefault(key, icon)

    def load_key_icons(self, tags: Iterable[str] = ()) -> list[Any]:
        """Every icon of the icon sets that carry all of ``tags``."""
        tags = frozenset(tags)
        return [
            icon
            for icon_set in self.key_icon_sets
            if icon_set.tags >= tags
            for icon in icon_set.icon_map.values()
            if icon is not None
        ]


def _duplicates(items: Iterable[Any]) -> list[tuple[Any, int]]:
    counts: dict[Any, int] = {}
    for item in items:
        counts[item] = counts.get(item, 0) + 1
    return [(item, count) for item, count in counts.items() if count > 1]


def validate_config(config: InputConfig) -> list[str]:
    """Report presets, icon sets and key groups that share a tag; each report is also logged."""
    problems = []
    for tag, count in _duplicates(p.preset_tag for p in config.input_presets):
        problems.append(
            f"There are {count} Input Presets defined with the tag '{tag or 'None'}'. "
            "Please give each Input Preset a unique tag in the input configuration."
        )
    for tags, count in _duplicates(s.tags for s in config.key_icon_sets):
        problems.append(
            f"There are {count} Key Icon Sets defined with the tag set "
            f"'{', '.join(sorted(tags))}'. Please give each Key Icon Set a unique "
            "tag set in the input configuration."
        )
    for tag, count in _duplicates(g.key_group_tag for g in config.key_groups):
        problems.append(
            f"There are {count} Key Groups defined with the tag '{tag or 'None'}'. "
            "Please give each Key Group a unique tag in the input configuration."
        )
    for problem in problems:
        _log.error(problem)
    return problems