"""
Digital Tools - declare once, invoke from anywhere
A tool registry and invocation engine for humans and AI agents
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="digital-tools",
    version="1.0.0",
    description="Tool registry and invocation engine for human workers and AI agents",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9.0",  # web tool pack
        "click>=8.0.0",
        "rich>=13.0.0",
        "pydantic>=2.0.0",
        "PyYAML>=6.0",  # config file
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "digital-tools=digital_tools.cli:main",
        ],
    },
)
