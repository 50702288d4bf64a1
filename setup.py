"""
Setup configuration for rate-regulator package.
"""

from setuptools import setup, find_packages
import os

def read_requirements():
    """Read requirements from requirements.txt file."""
    requirements_path = os.path.join(os.path.dirname(__file__), 'requirements.txt')
    with open(requirements_path, 'r') as f:
        requirements = [line.strip() for line in f if line.strip() and not line.startswith('#')]
    return requirements

def read_readme():
    """Read the README file for long description."""
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    try:
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    except FileNotFoundError:
        return "Rate regulation helper reporting over/under status and wait times"

setup(
    name="rate-regulator",
    version="1.0.0",
    author="Rate Regulator Team",
    author_email="rate-regulator@example.com",
    description="Rate regulation helper reporting over/under status and wait times",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["rate_regulator", "rate_regulator.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries",
    ],
    python_requires=">=3.9",
    install_requires=read_requirements(),
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "rate-regulator=rate_regulator.main:main",
        ],
    },
    include_package_data=True,
    keywords="rate regulation throttle wait time period",
)
