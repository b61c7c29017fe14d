from dataclasses import FrozenInstanceError

import pytest

from keyrebind.keys import ActionKeyMapping, AxisKeyMapping, Keys, is_valid_key


def test_invalid_key_is_not_valid():
    assert is_valid_key(Keys.INVALID) is False
    assert is_valid_key(None) is False


def test_named_key_is_valid():
    assert is_valid_key(Keys.SPACE_BAR) is True


def test_default_action_mapping_has_no_key():
    mapping = ActionKeyMapping()
    assert not is_valid_key(mapping.key)
    assert mapping.shift is False and mapping.is_default is False


def test_default_axis_mapping_has_no_key_and_unit_scale():
    mapping = AxisKeyMapping()
    assert not is_valid_key(mapping.key)
    assert mapping.scale == 1.0


def test_action_equality_ignores_default_flag():
    a = ActionKeyMapping("Jump", Keys.SPACE_BAR)
    b = ActionKeyMapping("Jump", Keys.SPACE_BAR, is_default=True)
    assert a == b
    assert hash(a) == hash(b)


def test_action_equality_includes_modifiers():
    assert ActionKeyMapping("Jump", Keys.SPACE_BAR) != ActionKeyMapping(
        "Jump", Keys.SPACE_BAR, shift=True
    )


def test_axis_equality_includes_scale_but_not_default():
    base = AxisKeyMapping("MoveForward", Keys.W, 1.0)
    assert base == AxisKeyMapping("MoveForward", Keys.W, 1.0, is_default=True)
    assert base != AxisKeyMapping("MoveForward", Keys.W, -1.0)


def test_mappings_are_immutable():
    mapping = ActionKeyMapping("Jump", Keys.SPACE_BAR)
    with pytest.raises(FrozenInstanceError):
        mapping.key = Keys.W  # type: ignore[misc]
    assert mapping.key == Keys.SPACE_BAR
    assert mapping.action_name == "Jump"


def test_debug_strings_mention_name_and_key():
    action = ActionKeyMapping("Jump", Keys.SPACE_BAR).to_debug_string()
    axis = AxisKeyMapping("MoveForward", Keys.W, -1.0).to_debug_string()
    assert "Jump" in action and Keys.SPACE_BAR in action
    assert "MoveForward" in axis and Keys.W in axis and "-1.0" in axis