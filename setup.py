#!/usr/bin/env python
from setuptools import setup, find_packages

setup(
    name="lazybox",
    version="0.1.0",
    description="Filesystem and text metadata extraction into a labeled property graph",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        # Configuration
        "pydantic>=2.7.0",
        "pydantic-settings>=2.3.0",
        "python-dotenv>=1.0.1",

        # Logging and tracing
        "structlog>=24.1.0",
        "opentelemetry-api>=1.25.0",
        "opentelemetry-sdk>=1.25.0",

        # Filesystem and VCS
        "pathspec>=0.12.1",
        "dulwich>=0.22.0",

        # Code descriptors
        "tree-sitter>=0.23.0",
        "tree-sitter-language-pack>=0.7.0,<1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.1.0",
            "pytest-cov>=4.2.0",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
