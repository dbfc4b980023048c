[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "seqtoolkit"
version = "0.1.0"
description = "BED region tools, FASTQ read order checks and reordering, FASTQ k-mer and index counts, read pair sampling and sequencing error counting"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "bioinformatics",
    "genomics",
    "fastq",
    "bed",
    "sequencing",
    "illumina",
    "dnbseq",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Bio-Informatics",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
seqtoolkit-bed = "seqtoolkit.bedcli:main"
seqtoolkit-fastqorder = "seqtoolkit.cli_fastqorder:main"
seqtoolkit-fastqutils = "seqtoolkit.cli_fastqutils:main"

[tool.hatch.build.targets.wheel]
packages = ["seqtoolkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
