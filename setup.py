"""
Setup script for resident-core.

Resident core is the quiz content pipeline behind the residency learning
game. It serves three roles:

1. Content Library - Question collections and banks per knowledge domain
2. Quiz Engine - Adaptive selection, mentor voicing, evaluation, challenges
3. Content Tooling - CLI validation and preview of question content

The 'resident' command is the developer entry point.
"""

from setuptools import find_packages, setup

setup(
    name="resident-core",
    version="0.3.0",
    description="Adaptive quiz content pipeline for a medical physics residency game",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="Resident Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "resident": ["data/questions/*/*.json"],
    },
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "resident=resident.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: Education",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Computer Aided Instruction (CAI)",
    ],
    keywords="quiz adaptive-learning medical-physics education",
)
