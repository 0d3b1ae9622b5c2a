[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "dtulink"
version = "0.1.0"
description = "Protocol layer for Hoymiles micro-inverters: command frames, fragment reassembly and response parsers"
requires-python = ">=3.10"
dependencies = []
keywords = ["hoymiles", "inverter", "solar", "dtu", "protocol", "mqtt", "crc"]
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
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["dtulink"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
