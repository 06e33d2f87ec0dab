[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "hw3web"
version = "0.1.0"
description = "A small multi-threaded HTTP/1.0 server with a bounded request queue, per-thread statistics and a shared request log"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "cgi", "thread-pool", "readers-writer-lock"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
hw3web-server = "hw3web.server:main"
hw3web-spin = "hw3web.spin:main"

[tool.setuptools.packages.find]
include = ["hw3web*"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
