[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "linmaze"
version = "0.1.0"
description = "A first-person 3D maze game with jetpacks, keys, doors, teleporters and traps"
requires-python = ">=3.10"
dependencies = ["pyglet"]
keywords = ["game", "maze", "3d", "opengl", "puzzle"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Puzzle Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
linmaze = "linmaze.app:main"

[tool.hatch.build.targets.wheel]
packages = ["linmaze"]

[tool.pytest.ini_options]
addopts = "-ra"
