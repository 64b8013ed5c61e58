[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pixiu"
version = "0.4.0"
description = "Gateway building blocks: request parameter mapping for Dubbo generic calls, response normalisation, filter and adapter registries, and API configuration handling."
requires-python = ">=3.10"
dependencies = [
    "pyyaml",
]
keywords = ["gateway", "proxy", "dubbo", "api", "parameter-mapping", "yaml"]
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
    "Topic :: Internet :: Proxy Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["pixiu"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
