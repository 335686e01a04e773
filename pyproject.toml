[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "certscan"
version = "0.1.0"
description = "Filter SSL certificate scan CSV dumps and bulk-load the kept records into MySQL"
requires-python = ">=3.10"
keywords = ["ssl", "tls", "certificates", "x509", "csv", "mysql", "public-suffix"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
    "Topic :: Internet :: Log Analysis",
]
dependencies = [
    "pymysql",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
certscan = "certscan.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["certscan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
