"""Player-customisable input bindings: presets, key groups, override merging and bind capture."""

__version__ = "1.0.0"