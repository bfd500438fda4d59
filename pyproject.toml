[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pgtypes"
version = "10.11.1"
description = "Encoding and decoding of PostgreSQL text-format values: literals, identifiers, arrays, hstore, bytea and timestamps."
requires-python = ">=3.10"
dependencies = []
keywords = ["postgresql", "postgres", "sql", "hstore", "array", "bytea", "encoding"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
    "Topic :: Software Development :: Libraries :: Python Modules",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest", "hypothesis"]

[tool.hatch.build.targets.wheel]
packages = ["pgtypes"]

[tool.hatch.build.targets.sdist]
include = ["pgtypes", "tests", "README.md", "pyproject.toml"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
