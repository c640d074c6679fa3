[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "steamos-manager"
version = "25.5.2"
description = "Building blocks for SteamOS device management: HDMI-CEC states, device detection, controller mouse inhibition, process jobs and daemon state and configuration files."
requires-python = ">=3.11"
keywords = ["steamos", "steam-deck", "hdmi-cec", "hidraw", "dmi", "daemon", "toml"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: POSIX :: Linux",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Systems Administration",
]
dependencies = [
    "tomli-w",
    "watchdog",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[tool.hatch.build.targets.wheel]
packages = ["steamos_manager"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.ruff.lint]
select = ["E", "F", "I", "B", "UP"]

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
