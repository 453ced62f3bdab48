#!/usr/bin/env python

from setuptools import setup, find_packages


def load_requirements(file_name):
    with open(file_name, "r") as file:
        return [line.strip() for line in file if line.strip() and not line.startswith("#")]


setup(
    name="lhcube",
    version="0.1.0",
    description="Latin Hypercube sampling with JAX",
    packages=find_packages(include=["lhcube", "lhcube.*"]),
    python_requires=">=3.9",
    install_requires=load_requirements("requirements.txt"),
    extras_require={
        "tests": load_requirements("requirements-tests.txt"),
    },
    entry_points={
        "console_scripts": ["lhcube=lhcube.cli:main"],
    }
)
