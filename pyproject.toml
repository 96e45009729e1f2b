[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "smm_error_logger"
version = "0.1.0"
description = "Read BIOS error logs from a BIOS-BMC shared-memory circular buffer"
requires-python = ">=3.10"
dependencies = []
keywords = ["bmc", "bios", "smm", "error-log", "circular-buffer", "rde", "mmio"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Logging",
    "Topic :: System :: Hardware",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["smm_error_logger"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
