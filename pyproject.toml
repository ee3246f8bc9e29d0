[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "moonlet"
version = "0.1.0"
description = "Building blocks of a small Lua interpreter: value helpers, memory accounting, collector marks, opcodes, a lexer and the math, os, io and package libraries"
requires-python = ">=3.10"
dependencies = []
keywords = ["lua", "interpreter", "lexer", "bytecode", "scripting"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["moonlet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
