[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fractalid"
version = "3.0.1"
description = "Render escape-time fractals whose formula is decoded from an integer id."
requires-python = ">=3.10"
keywords = ["fractal", "complex", "escape-time", "rendering", "expression"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: End Users/Desktop",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Graphics",
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
fractalid = "fractalid.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["fractalid"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
