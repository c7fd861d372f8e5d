[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "moonkit"
version = "0.1.0"
description = "Building blocks of a small scripting-language runtime: bytecode encoding, interned strings, number conversion, message formatting, an OS library and a module loader"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "interpreter",
    "bytecode",
    "virtual machine",
    "module loader",
    "string interning",
]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["moonkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
