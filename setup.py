"""
Setup script for quizbank.

quizbank is a terminal quiz platform with two roles:

1. Exam Conductor - Validate and bulk-upload question banks from CSV
2. Student - Pick a subject and difficulty and take a shuffled exam

The 'quizbank' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="quizbank",
    version="1.0.0",
    description="Terminal quiz platform: CSV question-bank upload and shuffled exams",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    author="quizbank contributors",
    packages=find_packages(include=["quizbank", "quizbank.*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.3.0",
        # Database
        "sqlalchemy>=2.0.0",
        "psycopg2-binary>=2.9.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # HTTP
        "requests>=2.28.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "quizbank=quizbank.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Education :: Testing",
    ],
    keywords="quiz exam csv question-bank cli education",
)
