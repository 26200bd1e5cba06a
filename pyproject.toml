[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hygrostat"
version = "0.1.0"
description = "Simulated battery-powered hygrometer and clock with RTC alarm scheduling, LCD formatting and serial time commands"
requires-python = ">=3.10"
dependencies = []
keywords = ["hygrometer", "clock", "rtc", "lcd", "simulation", "scheduler"]
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
    "Topic :: Home Automation",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hygrostat"]

[tool.pytest.ini_options]
addopts = "-ra"
