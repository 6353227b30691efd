"""
Setup script for timedist.
"""

from setuptools import setup, find_packages

setup(
    name="timedist",
    version="0.1.0",
    packages=find_packages(include=["timedist", "timedist.*"]),
    package_data={"timedist": ["py.typed"]},
    python_requires=">=3.8",
    extras_require={"test": ["pytest"]},
)
