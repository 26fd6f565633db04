[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "unitools"
version = "0.1.0"
description = "Image converters, resource header generators and a small build driver for retro-platform C projects"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bitmap",
    "cga",
    "icns",
    "resources",
    "build",
    "retro",
    "palm",
    "win16",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: Multimedia :: Graphics :: Graphics Conversion",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
unitools-convert = "unitools.convert:main"
unitools-headpack = "unitools.headpack:main"
unitools-mkresh = "unitools.mkresh:main"
unitools-unimake = "unitools.unimake:main"

[tool.hatch.build.targets.wheel]
packages = ["unitools"]

[tool.pytest.ini_options]
addopts = "-ra"
