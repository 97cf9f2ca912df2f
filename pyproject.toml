[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "printfarm"
version = "0.1.0"
description = "HTTP service for tracking 3D printers, filament spools and print jobs through a command-driven state machine"
requires-python = ">=3.10"
keywords = ["3d-printing", "print-farm", "filament", "state-machine", "rest-api"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Web Environment",
    "Framework :: Flask",
    "Intended Audience :: Manufacturing",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Printing",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
printfarm-node = "printfarm.node:main"

[tool.hatch.build.targets.wheel]
packages = ["printfarm"]

[tool.pytest.ini_options]
addopts = "-ra"
