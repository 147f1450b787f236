[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "facetkit"
version = "0.1.2"
description = "Runtime type shapes for Python classes, with URL-encoded form and YAML decoding driven by those shapes"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = [
    "reflection",
    "introspection",
    "shape",
    "urlencoded",
    "form",
    "yaml",
    "deserialization",
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["facetkit"]

[tool.hatch.build.targets.sdist]
include = [
    "facetkit",
    "tests",
    "pyproject.toml",
]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
