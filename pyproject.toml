[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ndnnode"
version = "0.1.0"
description = "Building blocks for a small overlay-network node: UDP registry exchanges and TCP neighbour topology."
requires-python = ">=3.10"
dependencies = []
keywords = ["ndn", "networking", "topology", "overlay", "udp", "tcp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ndnnode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
