[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "fbas_toolkit"
version = "0.7.4"
description = "Read, write, group and simulate federated byzantine agreement systems (FBASs) such as the Stellar network"
requires-python = ">=3.10"
dependencies = []
keywords = ["fbas", "stellar", "quorum", "consensus", "simulation", "graph"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
    "Topic :: System :: Distributed Computing",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["fbas_toolkit"]

[tool.hatch.build.targets.sdist]
include = ["fbas_toolkit", "tests", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"
