"""
Setup script for tiny-hll.
"""

from setuptools import setup, find_packages

setup(
    name="tiny-hll",
    version="0.1.0",
    description="HyperLogLog cardinality estimation with a pure Python MurmurHash3",
    packages=find_packages(include=["tiny_hll", "tiny_hll.*"]),
    package_data={"tiny_hll": ["py.typed"]},
    python_requires=">=3.8",
)
