import pytest

from keyrebind.config import InputConfig, InputMappingPreset, KeyGroup, MappingGroupLink
from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, Keys
from keyrebind.mapping_group import InputMappingGroup
from keyrebind.player_mappings import PlayerInputMappings


def _config_with_preset(*actions):
    config = InputConfig()
    preset = InputMappingPreset(None, False, config)
    config.input_presets.append(preset)
    group = InputMappingGroup(config)
    preset.input_layout.mapping_groups.append(group)
    group.action_mappings.extend(actions)
    return config


def test_empty_preset():
    config = InputConfig()
    mappings = PlayerInputMappings(config=config, null_base_preset=True)
    merged = mappings.build_merged_mapping_layout()
    assert len(merged.actions()) == 0
    assert len(merged.axes()) == 0


def test_default_preset():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    mappings = PlayerInputMappings(config=config, null_base_preset=False)
    jump = mappings.build_merged_mapping_layout().get_action(0, "Jump")
    assert jump.key == Keys.SPACE_BAR


def test_config_registered():
    config = InputConfig()
    mappings = PlayerInputMappings(config=config, null_base_preset=True)
    mappings.add_axis_override(AxisKeyMapping("MoveForward", Keys.I), 0, False)
    assert mappings.mapping_overrides.config is config
    assert mappings.mapping_overrides.mapping_groups[0].config is config


def test_bind_previous_axis_button():
    config = InputConfig()
    mappings = PlayerInputMappings(config=config, null_base_preset=True)
    mappings.add_axis_override(AxisKeyMapping("MoveForward", Keys.MOUSE_Y), 0, False)
    mappings.add_axis_override(AxisKeyMapping("MoveForward", Keys.W), 0, False)
    axis = mappings.build_merged_mapping_layout().get_axis(0, "MoveForward", 1.0)
    assert axis.key == Keys.W


def test_multiple_bindings_per_key_disallow():
    config = InputConfig()
    assert config.allow_multiple_bindings_per_key is False
    mappings = PlayerInputMappings(config=config, null_base_preset=True)
    mappings.add_action_override(ActionKeyMapping("FireWeapon", Keys.LEFT_MOUSE_BUTTON), 0, False)
    mappings.add_action_override(ActionKeyMapping("Jump", Keys.LEFT_MOUSE_BUTTON), 0, False)

    merged = mappings.build_merged_mapping_layout()
    assert merged.get_action(0, "Jump").key == Keys.LEFT_MOUSE_BUTTON
    assert merged.get_action(0, "FireWeapon").key == Keys.INVALID


def test_multiple_bindings_per_key_allow():
    config = InputConfig(allow_multiple_bindings_per_key=True)
    mappings = PlayerInputMappings(config=config, null_base_preset=True)
    mappings.add_action_override(ActionKeyMapping("FireWeapon", Keys.LEFT_MOUSE_BUTTON), 0, False)
    mappings.add_action_override(ActionKeyMapping("Jump", Keys.LEFT_MOUSE_BUTTON), 0, False)

    merged = mappings.build_merged_mapping_layout()
    assert merged.get_action(0, "Jump").key == Keys.LEFT_MOUSE_BUTTON
    assert merged.get_action(0, "FireWeapon").key == Keys.LEFT_MOUSE_BUTTON


def test_linked_mapping_groups():
    config = InputConfig(allow_multiple_bindings_per_key=True)
    config.mapping_group_links.append(MappingGroupLink([0, 1]))
    mappings = PlayerInputMappings(config=config, null_base_preset=True)

    mappings.add_action_override(ActionKeyMapping("FireWeapon", Keys.LEFT_MOUSE_BUTTON), 0, False)
    mappings.add_action_override(ActionKeyMapping("Jump", Keys.LEFT_MOUSE_BUTTON), 1, False)
    mappings.add_action_override(ActionKeyMapping("Crouch", Keys.LEFT_MOUSE_BUTTON), 2, False)

    merged = mappings.build_merged_mapping_layout()
    assert merged.get_action(1, "Jump").key == Keys.LEFT_MOUSE_BUTTON
    assert merged.get_action(0, "FireWeapon").key == Keys.INVALID
    assert merged.get_action(2, "Crouch").key == Keys.LEFT_MOUSE_BUTTON


def test_migrate_deprecated_properties():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))

    mappings = PlayerInputMappings()
    mappings.player_index_deprecated = 1
    mappings.base_preset_tag = None
    old_group = InputMappingGroup()
    mappings.preset_deprecated.mapping_groups_deprecated.append(old_group)
    old_group.action_mappings.append(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    old_group.action_mappings.append(ActionKeyMapping("FireWeapon", Keys.LEFT_MOUSE_BUTTON))

    mappings.set_config(config)
    mappings.migrate_deprecated_properties()

    assert mappings.mapping_overrides.get_action(0, "Jump").key == Keys.INVALID
    assert mappings.mapping_overrides.get_action(0, "FireWeapon").key == Keys.LEFT_MOUSE_BUTTON
    assert mappings.player_id == "1"
    assert mappings.player_index_deprecated == -1
    assert mappings.preset_deprecated.mapping_groups_deprecated == []


def test_preserved_actions():
    config = _config_with_preset(
        ActionKeyMapping("UIAction", Keys.ESCAPE),
        ActionKeyMapping("Jump", Keys.SPACE_BAR),
    )
    config.preserved_actions.append("UIAction")
    mappings = PlayerInputMappings(config=config, null_base_preset=False)

    before = mappings.build_merged_mapping_layout().get_action(0, "UIAction")
    assert before.key == Keys.ESCAPE

    mappings.add_action_override(ActionKeyMapping("Jump", Keys.ESCAPE), 0, False)

    after = mappings.build_merged_mapping_layout().get_action(0, "UIAction")
    assert after.key == Keys.ESCAPE
    assert mappings.build_merged_mapping_layout().get_action(0, "Jump").key == Keys.ESCAPE


def test_binding_preset_mapping_leaves_no_override():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    mappings = PlayerInputMappings(config=config)
    mappings.add_action_override(ActionKeyMapping("Jump", Keys.SPACE_BAR), 0, False)
    assert mappings.mapping_overrides.total_num_input_definitions() == 0
    assert mappings.build_merged_mapping_layout().get_action(0, "Jump").key == Keys.SPACE_BAR


def test_override_not_on_preset_is_not_default():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    mappings = PlayerInputMappings(config=config)
    mappings.add_action_override(ActionKeyMapping("Jump", Keys.E), 0, False)
    override = mappings.mapping_overrides.get_action(0, "Jump")
    assert override.key == Keys.E
    assert override.is_default is False


def test_default_key_group_is_first_configured():
    config = InputConfig(
        key_groups=[KeyGroup("KeyboardMouse", [Keys.W]), KeyGroup("Gamepad", [])]
    )
    mappings = PlayerInputMappings("7", None, config)
    assert mappings.player_key_group == "KeyboardMouse"


def test_no_key_groups_leaves_key_group_unset():
    mappings = PlayerInputMappings(config=InputConfig())
    assert mappings.player_key_group is None


def test_null_base_preset_ignores_configured_preset():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    mappings = PlayerInputMappings(config=config, null_base_preset=True)
    assert mappings.get_base_preset_mappings().mapping_groups == []


def test_base_preset_mappings_are_flagged_default():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    mappings = PlayerInputMappings(config=config)
    base = mappings.get_base_preset_mappings()
    assert base.get_action(0, "Jump").is_default is True


def test_migrate_without_config_raises():
    mappings = PlayerInputMappings()
    with pytest.raises(RuntimeError):
        mappings.migrate_deprecated_properties()


def test_debug_build_matches_plain_build():
    config = _config_with_preset(ActionKeyMapping("Jump", Keys.SPACE_BAR))
    mappings = PlayerInputMappings(config=config)
    mappings.add_action_override(ActionKeyMapping("Fire", Keys.E), 0, False)
    plain = mappings.build_merged_mapping_layout()
    debug = mappings.build_merged_mapping_layout(True)
    assert plain.actions() == debug.actions()
    assert [a.action_name for a in plain.actions()] == ["Jump", "Fire"]