"""
KernKeep - Debian Kernel Retention Tool

A small command-line utility that purges old kernel images and headers,
keeping the running kernel, an always-keep list and the newest distinct
kernel versions.
"""

__version__ = "0.1.0"
__author__ = "KernKeep Contributors"
__license__ = "MIT"

from .cli import main

__all__ = ["main"]
