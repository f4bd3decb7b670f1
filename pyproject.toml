[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "nanokernel"
version = "0.1.0"
description = "Core pieces of a small teaching kernel: module packer and loader, heap allocators, text console, clock, shell and a light-cycle game"
requires-python = ">=3.10"
dependencies = []
keywords = ["kernel", "buddy allocator", "shell", "module packer", "education"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Developers",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: System :: Operating System",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
nanokernel-modpacker = "nanokernel.modpacker:main"
nanoshell = "nanokernel.shell:main"

[tool.hatch.build.targets.wheel]
packages = ["nanokernel"]

[tool.pytest.ini_options]
addopts = "-ra"
