[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kitutil"
version = "0.1.0"
description = "Small systems utilities: base16/32/64 codecs, bit masks, per-thread counters, identifiers, rate-limited info logging and graphite counter logs"
requires-python = ">=3.10"
dependencies = []
keywords = ["base64", "base32", "hex", "counters", "bitmask", "guid", "graphite", "logging"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kitutil"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
