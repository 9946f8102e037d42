[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "luacore"
version = "0.1.0"
description = "Core pieces of a Lua 5.2 runtime: opcodes, string interning, number conversion, patterns, string and OS libraries"
requires-python = ">=3.10"
dependencies = []
keywords = ["lua", "interpreter", "bytecode", "patterns", "string library"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Software Development :: Interpreters",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["luacore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
