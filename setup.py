# setup.py
from setuptools import setup, find_packages

setup(
    name="resource_scout",
    version="0.1.0",
    description="Асинхронный анализатор веса веб-страницы ResourceScout",
    packages=find_packages(exclude=("tests", "tests.*")),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "resource-scout=resource_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
