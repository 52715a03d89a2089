[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ridge"
version = "0.1.0"
description = "Architecture graph analysis: boundaries, metrics, validation, recommendations and drift detection"
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["architecture", "dependency-graph", "drift", "static-analysis", "metrics"]
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
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ridge"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
