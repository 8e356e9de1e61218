[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "quantdesk"
version = "4.0.0"
description = "Option strategy scanning, position and portfolio analytics, and risk and economic data records"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "options",
    "trading",
    "greeks",
    "portfolio",
    "risk",
    "iron-condor",
    "strangle",
    "straddle",
    "calendar-spread",
    "volatility",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Financial and Insurance Industry",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial :: Investment",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["quantdesk"]

[tool.hatch.build.targets.sdist]
include = ["quantdesk", "tests", "pyproject.toml"]

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
