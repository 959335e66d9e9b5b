r"""
Shim setup.py
"""

import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

from setuptools import setup, find_packages

setup(
    name = 'vizworkshop',
    version = '0.3.0',
    description = 'vizworkshop: data-visualization workshop material for ecology surveys, single-cell and spatial data',
    license = 'GNU License',
    install_requires = ['numpy','pandas','scipy','matplotlib','seaborn>=0.13','statsmodels',
                        'scanpy>=1.10','anndata','igraph','leidenalg','adjustText','cycler',
                        'requests','tqdm',],
    extras_require = {
        'test': ['pytest'],
    },
    packages = find_packages(exclude=["tests","tests.*","figures"]),
    author = 'vizworkshop contributors',
    long_description=long_description,
    long_description_content_type="text/markdown",
    python_requires='>=3.9',
)
