[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gaiafee"
version = "0.1.0"
description = "Global minimum fee rules for Cosmos-style transactions, with bech32 address prefix conversion"
requires-python = ">=3.10"
dependencies = []
keywords = ["cosmos", "fees", "globalfee", "bech32", "gas", "ante-handler"]
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
    "Topic :: Office/Business :: Financial",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
gaiafee = "gaiafee.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["gaiafee"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
