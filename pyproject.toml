[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arrsac"
version = "0.10.0"
description = "Adaptive Real-Time Random Sample Consensus (ARRSAC) for robust model estimation"
requires-python = ">=3.10"
dependencies = []
keywords = ["ransac", "arrsac", "sample", "consensus", "robust-estimation"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["arrsac"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
