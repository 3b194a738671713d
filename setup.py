#!/usr/bin/env python3
"""
kvpool Setup Script
===================
Allows installation of the kvpool package.

Usage:
    pip install -e .           # Development install
    pip install -e .[test]     # Development install with test tools
    pip install .              # Regular install
"""

from setuptools import setup, find_packages

setup(
    name="kvpool",
    version="1.0.0",
    packages=find_packages(include=["kvpool", "kvpool.*"]),
    python_requires=">=3.10",
    install_requires=[
        "psutil>=5.9",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    entry_points={
        "console_scripts": [
            "kvpool=kvpool.server:main",
        ],
    },
)
