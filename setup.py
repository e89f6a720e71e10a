"""
DAG Store Setup
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read() if f else ""

setup(
    name="dagstore",
    version="2.0.0",
    author="DAG Store Team",
    description="Persistence and query layer for per-channel message DAGs",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["dagstore", "dagstore.*"]),
    python_requires=">=3.10",
    install_requires=[
        "aiosqlite>=0.19.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-timeout>=2.2.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dagstore=dagstore.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Database",
        "Topic :: System :: Distributed Computing",
    ],
    keywords="dag crdt p2p messaging sqlite storage",
)
