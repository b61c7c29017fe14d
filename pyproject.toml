[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "keyrebind"
version = "1.0.0"
description = "Player-customisable input bindings for games: presets, key groups, mapping groups, override merging and bind capture."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "input",
    "key bindings",
    "rebinding",
    "controls",
    "gamepad",
    "games",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["keyrebind"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
