[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "smallmap"
version = "0.1.3"
description = "A hash map that keeps a few entries in a fixed-size inline table and spills to a regular dict when it grows."
requires-python = ">=3.10"
dependencies = []
keywords = ["smallmap", "hashmap", "map", "dict", "control bytes"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["smallmap"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
