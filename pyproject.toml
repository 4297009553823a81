[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sysprojects"
version = "0.1.0"
description = "A round-robin process scheduler with memory-allocation simulation, and a small IMAP mail fetcher"
requires-python = ">=3.10"
dependencies = []
keywords = ["scheduler", "round-robin", "paging", "virtual-memory", "first-fit", "imap", "email"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System",
    "Topic :: Communications :: Email :: Post-Office :: IMAP",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
allocate = "sysprojects.allocate:main"
fetchmail = "sysprojects.fetchmail:main"

[tool.hatch.build.targets.wheel]
packages = ["sysprojects"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
