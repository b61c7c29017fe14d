# keyrebind

`keyrebind` manages the input bindings that a game lets its players change.
A project defines default bindings in presets. For each player the package
stores only what that player changed, and it merges the two into the final
layout when asked.

Keys are plain strings such as `"SpaceBar"` or `"Gamepad_LeftX"`. The
`Keys` class in `keyrebind.keys` names the ones the package uses itself.
The empty string means "no key", and `is_valid_key` tells the two apart.
Key group and preset tags are strings, or `None` for "no tag".

## Concepts

- **Action mappings** (`ActionKeyMapping`): a named action bound to a key
  chord, which is a key plus Shift, Ctrl, Alt and Cmd flags.
- **Axis mappings** (`AxisKeyMapping`): a named axis bound to a key with a
  scale, for example `MoveForward` on `W` with scale `1.0`. A key that is
  the analog key of an `AxisAssociation` (a thumbstick axis, `MouseX`,
  `MouseY`) is an *axis key*, and it covers every scale of its axis.
- Both mapping types carry an `is_default` flag, which records that the
  mapping came from the base preset. The flag takes no part in equality.
- **Mapping groups** (`InputMappingGroup`): parallel slots for the same
  inputs, such as primary and secondary bindings. A list of groups is an
  `InputMappingLayout`. Besides bound mappings, a group holds *unbound*
  mappings. These are markers saying that a binding was removed, so that
  it stays hidden when the group is laid over a preset.
- **Key groups** (`KeyGroup`): tagged sets of keys, for example keyboard
  and mouse against gamepad. Lookups and replacements can be limited to
  one key group, so one binding per key group can exist side by side.
  Looking up a tag that no key group defines issues an
  `UndefinedKeyGroupWarning`.
- **Conflicts**: binding a key that is already in use unbinds the other
  mappings on that chord. This applies in every mapping group unless
  `InputConfig.allow_multiple_bindings_per_key` is set. When it is set,
  it applies only between groups joined by a `MappingGroupLink`. Action
  and axis names listed in `preserved_actions` and `preserved_axes` are
  never unbound this way.

## Example

```python
from keyrebind.config import InputConfig, InputMappingPreset
from keyrebind.keys import ActionKeyMapping, Keys
from keyrebind.player_mappings import PlayerInputMappings

config = InputConfig()
config.input_presets.append(
    InputMappingPreset.from_mappings(None, [ActionKeyMapping("Jump", Keys.SPACE_BAR)], [])
)

player = PlayerInputMappings(config=config)
player.add_action_override(ActionKeyMapping("Fire", Keys.SPACE_BAR), 0)

layout = player.build_merged_mapping_layout()
layout.get_action(0, "Fire").key   # "SpaceBar"
layout.get_action(0, "Jump").key   # "" - unbound by the new binding
```

## Modules

| Module | Contents |
| --- | --- |
| `keyrebind.keys` | `Keys`, `ActionKeyMapping`, `AxisKeyMapping`, `is_valid_key` |
| `keyrebind.mapping_group` | `InputMappingGroup`, `UndefinedKeyGroupWarning` |
| `keyrebind.layout` | `InputMappingLayout` |
| `keyrebind.config` | `InputConfig`, `InputMappingPreset`, `KeyGroup`, `KeyScale`, `AxisAssociation`, `MappingGroupLink`, `KeyIconSet`, `validate_config` |
| `keyrebind.player_mappings` | `PlayerInputMappings` |
| `keyrebind.manager` | `InputMappingManager`, `Player`, `InvalidPlayerError`, `is_valid_player` |
| `keyrebind.capture` | `BindCapturePrompt`, `CaptureMode`, `InputChord`, `CapturedInput`, `action_mapping_from_capture`, `axis_mapping_from_capture` |

## Configuration

`InputConfig` holds the following:

- the presets (`input_presets`);
- the project-wide `default_action_mappings` and `default_axis_mappings`,
  which presets with `use_default_mappings` are built from;
- key groups, axis associations and mapping group links;
- allowed, disallowed and escape keys;
- preserved actions and axes;
- friendly key names;
- key icon sets.

An `InputConfig` starts out with axis associations for both gamepad
sticks and both mouse axes.

`get_input_presets()` returns copies of the presets with every mapping
marked as default. If no presets are configured, it returns one untagged
preset built from the default mappings. `get_input_preset_by_tag` falls
back to the first preset when no preset has the tag.

`InputMappingPreset.from_mappings(tag, actions, axes)` spreads mappings
over groups. Each mapping goes into the first group that does not yet
bind it.

Other helpers on the config:

- `is_key_allowed`, `get_key_group_of_key`, `get_axis_key`,
  `get_axis_button` and `get_key_friendly_name` answer questions about
  keys.
- `get_icon_for_key(key, tags, axis_scale)` picks an icon from the icon
  sets. Icons are whatever objects you store in `KeyIconSet.icon_map`.
- `load_key_icons(tags)` lists the icons of the icon sets that carry all
  of the given tags.
- `migrate_deprecated_properties()` moves values from the `*_deprecated`
  fields into their current ones.

`validate_config(config)` returns a message for each preset tag, key
group tag or icon tag set that is used more than once, and logs each one
as an error.

## Player mappings

A `PlayerInputMappings` has the following:

- a base preset: `base_preset_tag`, or an empty base when
  `null_base_preset` is set;
- the player's `mapping_overrides`;
- a `player_key_group`, which defaults to the first configured key group.

Its methods:

- `add_action_override(mapping, group, any_key_group)` and
  `add_axis_override(...)` bind a new mapping. Mappings that the new
  binding displaces are recorded as unbound markers. Overrides that the
  base preset already has are dropped.
- `build_merged_mapping_layout(debug_log=False)` returns the base preset
  with the unbound markers and overrides applied on top.
- `get_base_preset_mappings()` returns the base layout alone.

On an `InputMappingLayout`, `get_action(group, name, key_group)` and
`get_axis(group, name, scale, key_group)` return the most recently added
match. If there is no match, they return a mapping whose key is empty.
`actions()` and `axes()` list every bound mapping.

## Managing players

`InputMappingManager(config)` keeps a `PlayerInputMappings` for each
`Player`, matched by `Player.unique_id`. Its methods:

- `register_player` loads, refreshes and applies a player's mappings.
  "Applies" means the merged bound mappings are written to the player's
  `action_mappings` and `axis_mappings` lists.
- `add_player_action_override`, `add_player_axis_override`,
  `set_player_key_group`, `set_player_input_preset` and
  `set_player_input_preset_by_tag` change a player's mappings, then
  store, apply and announce them.
- `subscribe(callback)` calls `callback(player)` whenever a player's
  mappings change. It returns a function that cancels the subscription.
- `get_player_action_mapping`, `get_player_axis_mapping`,
  `get_player_action_mappings`, `get_player_axis_mappings` and
  `get_player_mappings_by_key` query the merged layout. A mapping group
  of `-1` means "any group".

Operations that act on a player raise `InvalidPlayerError` when the
player is missing, destroyed, not local, or has no local player.
`is_valid_player` makes the same check, logs the reason and returns a
bool.

A `Player` can keep its mappings in its own storage by setting
`load_input_mappings` and `save_input_mappings` callbacks. Otherwise the
manager keeps them in `player_input_overrides`.

## Capturing a binding

`BindCapturePrompt` turns one player's raw input into a captured chord.
Feed it events through `key_down`, `key_up`, `mouse_button_down`,
`mouse_button_up`, `mouse_wheel` and `mouse_move`. It takes the
following into account:

- the `CaptureMode`: capture on press or on release;
- the modifier keys that are held;
- escape keys, which cancel the prompt;
- allowed and disallowed keys;
- an optional key group restriction;
- an overridable `is_key_allowed` check;
- the mouse movement threshold.

Results are reported to the callbacks in `on_chord_captured`,
`on_chord_rejected` and `on_closed`. `action_mapping_from_capture` and
`axis_mapping_from_capture` turn a `CapturedInput` into a mapping for
the override methods. A captured button that drives an axis is bound to
the axis key, with the scale adjusted to match.

## Debugging

- `InputMappingLayout.dump_to_log(logger)` writes every group's
  mappings and unbound markers to a `logging.Logger` at info level.
- `InputMappingManager.dump_players(logger)` does the same for every
  registered player.
- `build_merged_mapping_layout(debug_log=True)` logs each step of a
  merge.
- `InputMappingManager(debug=True)` dumps all players after every
  override.

## What it does not do

- Mappings live in memory only. Nothing is written to or read from
  files, so use the players' load and save callbacks to persist them.
- There are no widgets or screens. `BindCapturePrompt` processes events
  that you pass it, and labels are up to the caller.
- It does not hook into any engine's input system. Applying mappings
  fills lists on `Player`, and it is up to you to act on them.
- There are no command-line tools.

## Requirements

Python 3.10 or later, with no third-party dependencies. The tests use
pytest (`pip install keyrebind[test]`).