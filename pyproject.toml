[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "drakn"
version = "0.1.0"
description = "A local music library and console player: scan folders, index tracks in SQLite, search and play them."
requires-python = ">=3.11"
keywords = ["music", "audio", "player", "library", "sqlite", "mp3", "flac", "wav", "blake3"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
drakn = "drakn.app:main"

[tool.hatch.build.targets.wheel]
packages = ["drakn"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
