[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cvmattest"
version = "0.1.0"
description = "Helpers for confidential VM attestation: base64 codecs, report JSON, JWK handling, OS info and HTTP requests with retry"
requires-python = ">=3.10"
keywords = ["attestation", "tpm", "jwt", "jwk", "rsa", "confidential-computing"]
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
]
dependencies = [
    "requests",
    "cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "responses",
]

[tool.hatch.build.targets.wheel]
packages = ["cvmattest"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
