"""
filerecord setup.py — Package configuration and CLI entry point.
"""

from setuptools import find_packages, setup

setup(
    name="filerecord",
    version="0.3.0",
    description="filerecord — directory trees as structured record stores",
    packages=find_packages(include=["filerecord", "filerecord.*"]),
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "filerecord=filerecord.cli:main",
        ],
    },
    install_requires=[
        "pydantic>=2.5",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
)
