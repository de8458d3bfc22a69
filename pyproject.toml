[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ethproofkit"
version = "0.1.0"
description = "Ethereum Merkle-Patricia proof verification, message signing and TLS Notary presentation checks"
requires-python = ">=3.10"
keywords = [
    "ethereum",
    "merkle-patricia",
    "eip-1186",
    "rlp",
    "secp256k1",
    "keccak",
    "signatures",
    "tlsnotary",
]
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
    "Topic :: Security :: Cryptography",
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "pycryptodome>=3.15",
    "requests>=2.28",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
    "responses>=0.23",
]

[project.scripts]
ethproofkit-verify-tlsn = "ethproofkit.tlsn:main"
ethproofkit-account-proof = "ethproofkit.rpc:main"

[tool.hatch.build.targets.wheel]
packages = ["ethproofkit"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
