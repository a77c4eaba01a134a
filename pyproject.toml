[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sfs_client"
version = "0.1.0"
description = "Service entities and HTTP connections for a client of a simple file service that delivers versioned content"
requires-python = ">=3.10"
dependencies = []
keywords = ["software distribution", "content delivery", "http client", "updates", "retry"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Software Distribution",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["sfs_client"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
