[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "amneziawg"
version = "0.1.0"
description = "Building blocks for a userspace AmneziaWG daemon: replay filter, rate limiter, TAI64N timestamps, checksums, UAPI sockets and DNS and dial-address helpers"
requires-python = ">=3.10"
dependencies = []
keywords = ["wireguard", "amneziawg", "vpn", "tunnel", "uapi", "replay", "ratelimit", "tai64n", "checksum"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["amneziawg"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
