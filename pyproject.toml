[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ctitools"
version = "0.1.0"
description = "Cross-domain Typed Identifiers: expression model, matching, schema annotations, compatibility checks and package archiving"
requires-python = ">=3.10"
dependencies = []
keywords = ["cti", "identifiers", "json-schema", "compatibility", "metadata", "archive"]
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
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ctitools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
