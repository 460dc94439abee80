[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "levelcache"
version = "0.1.0"
description = "An on-disk key-value cache with per-key time-to-live, background expiry cleanup and a memory usage estimate"
requires-python = ">=3.10"
dependencies = []
keywords = ["cache", "key-value", "ttl", "expiry", "sqlite"]
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
    "Topic :: Database :: Database Engines/Servers",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
levelcache-example = "levelcache.example:main"
levelcache-benchmark = "levelcache.benchmark:main"

[tool.hatch.build.targets.wheel]
packages = ["levelcache"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
strict = true
