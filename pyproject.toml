[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arcdps_ext"
version = "0.1.0"
description = "Helpers for combat-log addons: ordered event dispatch, localization tables, singletons and a background HTTP request queue."
requires-python = ">=3.10"
dependencies = []
keywords = ["combat log", "events", "localization", "singleton", "http queue"]
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
packages = ["arcdps_ext"]

[tool.pytest.ini_options]
addopts = "-ra"
