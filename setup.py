# setup.py
from setuptools import setup, find_packages

setup(
    name="strand",
    version="0.1.0",
    description="Suspendable tree-walking interpreter with persistable continuations",
    packages=find_packages(include=["strand", "strand.*"]),
    python_requires=">=3.10",
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)
