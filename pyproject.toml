[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "lsmutil"
version = "0.1.0"
description = "Building blocks for an LSM-tree key-value store: versioned keys, merge iterators, watermarks, worker coordination, file and mmap helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["lsm", "key-value", "storage", "iterator", "watermark", "mmap"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["lsmutil"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
