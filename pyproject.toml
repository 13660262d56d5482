[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nutsdb"
version = "0.1.0"
description = "Building blocks of an embedded key/value store: entry encoding, a file-handle cache, and in-memory list, set and sorted-set structures"
requires-python = ">=3.10"
keywords = ["database", "key-value", "embedded", "sorted-set", "skiplist", "lru"]
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
    "Typing :: Typed",
    "Topic :: Database :: Database Engines/Servers",
]
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["nutsdb"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
