# setup.py
from setuptools import setup, find_packages

setup(
    name="site_graph",
    version="0.1.0",
    description="Асинхронный краулер сайта и построитель графа внутренних ссылок SiteGraph",
    packages=find_packages(include=["site_graph", "site_graph.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "lxml>=4.9",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "site_graph=site_graph.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
