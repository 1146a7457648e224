"""Setup script for the contract payments service."""

from setuptools import setup

setup(
    name="contract-payments",
    version="1.0.0",
    description="Payments between clients and contractors organized through contracts and jobs",
    author="ML Roadmap Bootcamp",
    python_requires=">=3.11",
    packages=["api", "config", "core", "database", "monitoring"],
    install_requires=[
        line.strip()
        for line in open("requirements.txt")
        if line.strip() and not line.startswith("#")
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.23.0",
            "httpx>=0.26.0",
        ],
        "dev": [
            "black>=23.0.0",
            "isort>=5.12.0",
            "flake8>=6.0.0",
            "mypy>=1.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "contract-payments-seed=database.seed:main",
        ]
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
