from setuptools import setup, find_packages
from pathlib import Path

# Read the README file for the long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="torrentshare",
    version="0.1.0",
    description="Browse torrent search results as a read-only virtual file tree",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["torrentshare", "torrentshare.*"]),
    entry_points={
        "console_scripts": [
            "torrentshare=torrentshare.cli:app"
        ],
    },
    install_requires=[
        # Core dependencies only
        "typer>=0.9.0",
        "rich>=13.0.0",
        "lxml>=4.9.0",
        "httpx>=0.24.0",  # Scraper and qBittorrent Web API
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "isort>=5.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Development Status :: 3 - Alpha",
        "Intended Audience :: End Users/Desktop",
        "Topic :: Communications :: File Sharing",
        "Topic :: System :: Filesystems",
    ],
    python_requires='>=3.8',
)
