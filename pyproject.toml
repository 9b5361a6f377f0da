[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stew"
version = "0.6.0"
description = "An independent package manager for compiled binaries published as GitHub releases or plain URLs."
requires-python = ">=3.10"
keywords = ["package-manager", "binaries", "github", "releases", "cli"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
    "Topic :: Utilities",
]
dependencies = [
    "requests",
    "tqdm",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
stew = "stew.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["stew"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
