"""
Setup script for the webpage PDF generator.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="webpage-pdf-generator",
    version="0.1.0",
    packages=find_packages(include=["pdf_generator", "pdf_generator.*"]),
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.29",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "playwright>=1.40",
        "boto3>=1.34",
        "pypdf>=4.0",
        "cryptography>=42.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.25",
        ],
    },
    entry_points={
        "console_scripts": [
            "pdf-generator-dev=pdf_generator.server:main",
        ],
    },
)
