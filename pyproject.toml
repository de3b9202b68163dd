[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "licenselens"
version = "0.1.0"
description = "Client library for activating and verifying signed software license keys over a web API"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["license", "licensing", "activation", "rsa", "signature"]
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
    "Topic :: Software Development :: Libraries",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["licenselens"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
