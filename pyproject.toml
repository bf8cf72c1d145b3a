[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "envcd"
version = "0.1.0"
description = "Reconcilers for Environment and PostgresqlDatabase resources that provision PostgreSQL databases"
requires-python = ">=3.10"
dependencies = []
keywords = ["operator", "reconciler", "postgresql", "environment", "finalizer"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["envcd"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
