[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ctoai"
version = "2.0.0"
description = "SDK for Ops commands that talk to the local Ops Platform daemon: prompts, UX output, config, secrets and tracking."
requires-python = ">=3.10"
dependencies = []
keywords = ["ops", "sdk", "prompt", "daemon", "workflow", "slack", "terminal"]
classifiers = [
    "Development Status :: 5 - Production/Stable",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ctoai"]

[tool.pytest.ini_options]
addopts = "-ra"
