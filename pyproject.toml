[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pkcs11cert"
version = "0.6.13"
description = "X.509 certificate inspection and verification helpers for smart-card login"
requires-python = ">=3.10"
dependencies = [
    "cryptography",
]
keywords = ["x509", "certificate", "crl", "pkcs11", "smart card", "base64", "openssh"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
    "cryptography",
]

[tool.hatch.build.targets.wheel]
packages = ["pkcs11cert"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
