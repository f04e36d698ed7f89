"""Setup script for pytncore."""
from setuptools import setup, find_packages

setup(
    name="pytncore",
    version="0.1.0",
    packages=find_packages(include=["tncore", "tncore.*"]),
    install_requires=["torch>=2.0.0"],
    extras_require={"test": ["pytest>=7.0", "hypothesis>=6.0"]},
    python_requires=">=3.9",
)
