"""
Setup configuration for sifbuild
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="sifbuild",
    version="0.1.0",
    author="sifbuild Team",
    description="Build Apptainer/Singularity containers from def files, Dockerfiles and Docker images",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["sifbuild_core", "sifbuild_core.*", "sifbuild_cli", "sifbuild_cli.*"]),
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "sifbuild=sifbuild_cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: System Administrators",
        "Intended Audience :: Science/Research",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
    ],
)
