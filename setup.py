#!/usr/bin/env python3
"""
Setup script for newapi_monitor module.
Balance and usage monitor for new-api gateways.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="newapi-monitor",
    version="0.1.0",
    author="newapi-monitor contributors",
    description="Balance and usage monitor for new-api gateways",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["newapi_monitor", "newapi_monitor.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Internet :: WWW/HTTP",
        "Topic :: System :: Monitoring",
    ],
    python_requires=">=3.11",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "aiohttp>=3.9.0",
            "hypercorn>=0.16.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "newapi-monitor=newapi_monitor.cli:main",
        ],
    },
    include_package_data=True,
    zip_safe=False,
)
