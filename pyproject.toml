[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rouse"
version = "0.1.0"
description = "On-call alert handling: deduplication, grouping, noise scoring, escalation policies and rotating schedules"
requires-python = ">=3.10"
keywords = ["alerting", "on-call", "incident", "escalation", "monitoring", "schedule", "sqlite"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: System :: Monitoring",
]
dependencies = [
    "aiosqlite",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["rouse"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
