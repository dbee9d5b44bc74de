[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "muv"
version = "0.1.6"
description = "Global environment management tool using uv"
requires-python = ">=3.11"
dependencies = [
    "platformdirs",
]
keywords = ["python", "environment", "uv", "virtualenv"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Utilities",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
muv = "muv.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["muv"]

[tool.pytest.ini_options]
addopts = "-ra"
