[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "clams"
version = "0.1.0"
description = "A small Minecraft server core handling the handshake, status, login and configuration protocol states"
requires-python = ">=3.10"
keywords = ["minecraft", "server", "protocol", "networking", "game"]
classifiers = [
    "Development Status :: 2 - Pre-Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Internet",
]
dependencies = [
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
clams = "clams.server:main"

[tool.hatch.build.targets.wheel]
packages = ["clams"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
