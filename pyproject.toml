[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "cwscrape"
version = "0.1.0"
description = "Scrape configuration, service catalogue and options for a CloudWatch metrics exporter"
requires-python = ">=3.10"
keywords = ["cloudwatch", "prometheus", "exporter", "monitoring", "aws", "metrics"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: System Administrators",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]
dependencies = [
    "pyyaml>=6.0",
]

[project.optional-dependencies]
test = [
    "pytest>=7.0",
]

[tool.hatch.build.targets.wheel]
packages = ["cwscrape"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
