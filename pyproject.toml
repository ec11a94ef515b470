[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "heavykeeper"
version = "0.6.0"
description = "HeavyKeeper sketch for finding the top-k heavy hitters in a stream with high precision and a small memory footprint."
requires-python = ">=3.10"
dependencies = []
keywords = ["heavykeeper", "top-k", "streaming", "sketch", "heavy-hitters", "data-structure"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Topic :: Scientific/Engineering :: Information Analysis",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
heavykeeper-demo = "heavykeeper.demo:main"
heavykeeper-wordcount = "heavykeeper.wordcount:main"
heavykeeper-flows = "heavykeeper.flows:main"

[tool.hatch.build.targets.wheel]
packages = ["heavykeeper"]

[tool.hatch.build.targets.sdist]
include = ["heavykeeper", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
