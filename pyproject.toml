[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "iccertified"
version = "0.1.0"
description = "Certified maps, hash trees and ledger account types with Merkle witnesses"
requires-python = ">=3.10"
dependencies = [
    "cbor2",
]
keywords = ["hash tree", "merkle", "red-black tree", "certified data", "ledger", "witness"]
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
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["iccertified"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
