#!/usr/bin/env python3
"""
Setup configuration for the Streaming Codec Client.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

# Read requirements from requirements.txt
requirements = []
if (this_directory / "requirements.txt").exists():
    requirements = (this_directory / "requirements.txt").read_text().strip().split('\n')
    requirements = [req.strip() for req in requirements if req.strip() and not req.startswith('#')]

setup(
    name="streaming-codec-client",
    version="1.0.0",
    author="Project Think",
    author_email="",
    description="Streaming, cancellable compression client with pluggable codecs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/your-username/streaming-codec-client",
    packages=find_packages(include=['stream_codec*']),
    py_modules=[
        'run_tests'
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: System :: Archiving :: Compression",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov",
            "pytest-mock",
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
        "test": [
            "pytest>=7.0",
            "pytest-cov",
            "pytest-mock",
        ],
    },
    entry_points={
        "console_scripts": [
            "stream-codec=stream_codec.cli:main",
            "run-codec-tests=run_tests:main",
        ],
    },
    include_package_data=True,
    package_data={
        "": [
            "*.md",
            "*.txt",
        ],
    },
    keywords=[
        "compression",
        "streaming",
        "gzip",
        "lz4",
        "zstandard",
        "cancellation",
    ],
    project_urls={
        "Bug Reports": "https://github.com/your-username/streaming-codec-client/issues",
        "Source": "https://github.com/your-username/streaming-codec-client",
    },
)
