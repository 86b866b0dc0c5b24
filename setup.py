#!/usr/bin/env python3
"""
Setup script for the inbound message admission gate
"""

from setuptools import setup, find_namespace_packages

setup(
    name="msg-admission",
    version="0.0.1",
    description="Clock-drift and structural validation for inbound peer-to-peer chat messages",
    packages=find_namespace_packages(include=["admission", "admission.*", "shared", "shared.*"]),
    install_requires=[
        "typer>=0.12.3",
        "rich>=13.9.2",
        "PyYAML>=6.0.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.4.2",
        ],
    },
    python_requires=">=3.8",
    entry_points={
        'console_scripts': [
            'admission-check=admission.cli:main',
        ],
    },
)
