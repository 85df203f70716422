#!/usr/bin/env python
"""PyMAFE setup script."""
from setuptools import setup

if __name__ == "__main__":
    setup(zip_safe=False)
