import logging

import pytest

from keyrebind.config import InputConfig, InputMappingPreset, KeyGroup
from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, Keys
from keyrebind.mapping_group import InputMappingGroup
from keyrebind.manager import (
    InputMappingManager,
    InvalidPlayerError,
    Player,
    is_valid_player,
)
from keyrebind.player_mappings import PlayerInputMappings


def _preset(config, tag, actions=(), axes=()):
    preset = InputMappingPreset(tag, False, config)
    group = InputMappingGroup(config)
    group.action_mappings.extend(actions)
    group.axis_mappings.extend(axes)
    preset.input_layout.mapping_groups.append(group)
    return preset


@pytest.fixture
def config():
    cfg = InputConfig()
    cfg.input_presets.append(
        _preset(
            cfg,
            None,
            [ActionKeyMapping("Jump", Keys.SPACE_BAR)],
            [AxisKeyMapping("MoveForward", Keys.W, 1.0)],
        )
    )
    return cfg


@pytest.fixture
def manager(config):
    return InputMappingManager(config)


def test_is_valid_player():
    assert is_valid_player(Player(), "ctx") is True
    assert is_valid_player(None, "ctx") is False
    assert is_valid_player(Player(is_local=False), "ctx") is False
    assert is_valid_player(Player(has_local_player=False), "ctx") is False
    assert is_valid_player(Player(destroyed=True), "ctx") is False


@pytest.mark.parametrize(
    "player",
    [None, Player(is_local=False), Player(has_local_player=False), Player(destroyed=True)],
)
def test_invalid_players_rejected(manager, player):
    with pytest.raises(InvalidPlayerError):
        manager.add_player_action_override(player, ActionKeyMapping("Jump", Keys.W))


def test_register_applies_preset(manager):
    player = Player()
    manager.register_player(player)
    assert player.action_mappings == [ActionKeyMapping("Jump", Keys.SPACE_BAR)]
    assert player.axis_mappings == [AxisKeyMapping("MoveForward", Keys.W, 1.0)]
    assert manager.registered_players == [player]
    manager.register_player(player)
    assert manager.registered_players == [player]


def test_register_destroyed_player_raises(manager):
    with pytest.raises(InvalidPlayerError):
        manager.register_player(Player(destroyed=True))


def test_add_action_override_applies_and_saves(manager):
    player = Player(unique_id="7")
    manager.register_player(player)
    manager.add_player_action_override(player, ActionKeyMapping("Jump", Keys.W))
    assert manager.get_player_action_mapping(player, "Jump").key == Keys.W
    assert ActionKeyMapping("Jump", Keys.W) in player.action_mappings
    ids = [m.player_id for m in manager.player_input_overrides]
    assert ids == ["7"]


def test_add_action_override_unbinds_clashing_axis(manager):
    player = Player()
    manager.register_player(player)
    manager.add_player_action_override(player, ActionKeyMapping("Jump", Keys.W))
    assert manager.get_player_axis_mapping(player, "MoveForward", 1.0).key == Keys.INVALID


def test_add_axis_override(manager):
    player = Player()
    manager.add_player_axis_override(player, AxisKeyMapping("MoveForward", Keys.I, 1.0))
    assert manager.get_player_axis_mapping(player, "MoveForward", 1.0).key == Keys.I
    assert player.axis_mappings == [AxisKeyMapping("MoveForward", Keys.I, 1.0)]


def test_default_mappings_for_missing_player(manager):
    assert manager.get_player_action_mapping(None, "Jump").key == Keys.SPACE_BAR
    assert manager.get_player_action_mapping(None, "Jump", 0).key == Keys.SPACE_BAR
    assert manager.get_player_action_mapping(None, "Jump", 5) == ActionKeyMapping()
    assert manager.get_player_axis_mapping(None, "MoveForward", 1.0, 5) == AxisKeyMapping()


def test_get_all_mappings_and_by_key(manager):
    player = Player()
    assert manager.get_player_action_mappings(player, "Jump") == [
        ActionKeyMapping("Jump", Keys.SPACE_BAR)
    ]
    assert manager.get_player_action_mappings(player, "Jump", 3) == []
    assert manager.get_player_axis_mappings(player, "MoveForward", 1.0) == [
        AxisKeyMapping("MoveForward", Keys.W, 1.0)
    ]
    actions, axes = manager.get_player_mappings_by_key(player, Keys.SPACE_BAR)
    assert actions == [ActionKeyMapping("Jump", Keys.SPACE_BAR)]
    assert axes == []
    with pytest.raises(InvalidPlayerError):
        manager.get_player_mappings_by_key(None, Keys.W)


def test_subscribe_and_unsubscribe(manager):
    seen = []
    unsubscribe = manager.subscribe(seen.append)
    player = Player()
    manager.add_player_action_override(player, ActionKeyMapping("Jump", Keys.W))
    assert seen == [player]
    unsubscribe()
    manager.add_player_action_override(player, ActionKeyMapping("Jump", Keys.E))
    assert seen == [player]


def test_set_player_key_group():
    cfg = InputConfig(
        key_groups=[KeyGroup("KBM", [Keys.W, Keys.SPACE_BAR]), KeyGroup("Gamepad", [])]
    )
    manager = InputMappingManager(cfg)
    seen = []
    manager.subscribe(seen.append)
    player = Player()
    assert manager.find_player_input_mappings(player).player_key_group == "KBM"
    manager.set_player_key_group(player, "KBM")
    assert seen == []
    manager.set_player_key_group(player, "Gamepad")
    assert seen == [player]
    assert manager.find_player_input_mappings(player).player_key_group == "Gamepad"


def test_set_player_input_preset(config):
    config.input_presets.append(_preset(config, "Alt", [ActionKeyMapping("Jump", Keys.E)]))
    manager = InputMappingManager(config)
    player = Player()
    manager.add_player_action_override(player, ActionKeyMapping("Jump", Keys.W))
    assert manager.set_player_input_preset_by_tag(player, "Alt") is True
    assert player in manager.registered_players
    assert manager.get_player_action_mapping(player, "Jump").key == Keys.E
    stored = manager.find_player_input_mappings(player)
    assert stored.base_preset_tag == "Alt"
    assert stored.mapping_overrides.total_num_input_definitions() == 0


def test_set_unknown_preset_tag_changes_nothing(manager):
    player = Player()
    assert manager.set_player_input_preset_by_tag(player, "Missing") is False
    assert manager.player_input_overrides == []


def test_save_replaces_same_id(manager):
    player = Player(unique_id="1")
    first = PlayerInputMappings(player_id="1", config=manager.config)
    second = PlayerInputMappings(player_id="1", base_preset_tag="Other", config=manager.config)
    manager.save_player_input_mappings(player, first)
    manager.save_player_input_mappings(player, second)
    assert [m.base_preset_tag for m in manager.player_input_overrides] == ["Other"]


def test_custom_storage_hooks(config):
    config.input_presets.append(_preset(config, "Alt", [ActionKeyMapping("Jump", Keys.E)]))
    saved = []
    player = Player(
        load_input_mappings=lambda: PlayerInputMappings(player_id="x", base_preset_tag="Alt"),
        save_input_mappings=saved.append,
    )
    manager = InputMappingManager(config)
    manager.register_player(player)
    assert player.action_mappings == [ActionKeyMapping("Jump", Keys.E)]
    assert [m.player_id for m in saved] == ["x"]


def test_unregister_player(manager):
    player = Player()
    manager.register_player(player)
    manager.unregister_player(player)
    assert manager.registered_players == []


def test_constructor_migrates_stored_mappings(config):
    stored = PlayerInputMappings(player_index_deprecated=3)
    manager = InputMappingManager(config, [stored])
    assert manager.player_input_overrides[0].player_id == "3"
    assert manager.player_input_overrides[0].player_index_deprecated == -1


def test_dump_players(manager, caplog):
    alive = Player(name="Alive")
    dead = Player(name="Dead", unique_id="2")
    manager.register_player(alive)
    manager.register_player(dead)
    dead.destroyed = True
    logger = logging.getLogger("keyrebind.test.dump")
    with caplog.at_level(logging.INFO, logger="keyrebind.test.dump"):
        manager.dump_players(logger)
    messages = [record.getMessage() for record in caplog.records]
    assert messages[0] == "----- DumpPlayers -----"
    assert messages[-1] == "----- End DumpPlayers -----"
    assert "INVALID" in messages
    assert "    Object name: Alive" in messages