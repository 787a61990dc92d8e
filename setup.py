"""
Setup configuration for kernkeep.

Installs kernkeep as a command-line tool.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read version from __init__.py
init_file = Path(__file__).parent / "kernkeep" / "__init__.py"
version = {}
with open(init_file) as f:
    for line in f:
        if line.startswith("__version__"):
            exec(line, version)
            break

# Read long description from README
readme_file = Path(__file__).parent / "README.md"
long_description = ""
if readme_file.exists():
    with open(readme_file, encoding="utf-8") as f:
        long_description = f.read()

setup(
    name="kernkeep",
    version=version.get("__version__", "0.1.0"),
    author="KernKeep Contributors",
    description="Purge old Debian kernel packages while keeping the running and newest kernels",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Topic :: System :: Systems Administration",
    ],
    python_requires=">=3.7",
    entry_points={
        "console_scripts": [
            "kernkeep=kernkeep.cli:main",
        ],
    },
    keywords="kernel linux debian apt dpkg purge cleanup administration",
)
