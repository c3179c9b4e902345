[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "esetools"
version = "0.1.0"
description = "Replay and relay APDU traffic to an embedded secure element during development"
requires-python = ">=3.10"
dependencies = []
keywords = ["secure element", "ese", "apdu", "smart card", "replay", "relay", "testing"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Testing",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
esetools-replay = "esetools.replay:main"

[tool.hatch.build.targets.wheel]
packages = ["esetools"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 88
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
