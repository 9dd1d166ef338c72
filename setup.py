"""Setup script for the ventus package."""

from setuptools import find_packages, setup

setup(
    name="ventus",
    version="0.1.0",
    description="Ventus W830 weather station sensor integration",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "pymysql",
        "pyyaml",
        "python-dotenv",
    ],
    extras_require={
        "dev": [
            "pytest",
            "black",
            "isort",
            "mypy",
        ],
    },
    entry_points={
        "console_scripts": [
            "ventus-station=ventus.station:main",
        ],
    },
)
