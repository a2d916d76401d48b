[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "neumannsim"
version = "0.1.0"
description = "Memory hierarchy, paging, cache, JSON assembler and scheduling metrics for a small von Neumann machine simulator"
requires-python = ">=3.10"
dependencies = []
keywords = ["simulator", "von neumann", "mips", "cache", "paging", "swap", "assembler", "scheduling"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["neumannsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
