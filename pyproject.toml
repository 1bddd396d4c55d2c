[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "floodnet"
version = "0.1.0"
description = "Small multi-layer perceptrons with momentum backpropagation and k-fold cross-validation for flood level regression and two-class pattern data"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "neural-network",
    "mlp",
    "backpropagation",
    "cross-validation",
    "flood",
    "hyperparameter-search",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
floodnet-flood = "floodnet.flood:main"
floodnet-crosspat = "floodnet.crosspat:main"
floodnet-dts = "floodnet.dts:main"

[tool.hatch.build.targets.wheel]
packages = ["floodnet"]

[tool.hatch.build.targets.sdist]
include = ["floodnet", "tests", "pyproject.toml"]

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
