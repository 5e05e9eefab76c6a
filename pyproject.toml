[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "shardkv"
version = "0.1.0"
description = "A small replicated key-value store coordinated with two-phase commit over an in-process message-passing world"
requires-python = ">=3.10"
dependencies = []
keywords = ["key-value", "two-phase commit", "2pc", "distributed", "message passing", "coordinator"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
shardkv = "shardkv.main:main"

[tool.hatch.build.targets.wheel]
packages = ["shardkv"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
