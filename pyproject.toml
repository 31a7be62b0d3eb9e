[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "acareca"
version = "0.1.0"
description = "Clinic accounting core: users and sessions, subscription plans, form versions and form entries, held in memory"
requires-python = ">=3.10"
dependencies = []
keywords = ["accounting", "clinic", "forms", "subscriptions", "gst"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Office/Business :: Financial :: Accounting",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["acareca"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
