"""Setup configuration for slam_event_simulator package."""

from setuptools import setup, find_packages
from pathlib import Path

# Read the contents of README file
ROOT = Path(__file__).parent
README = (ROOT / "README.md").read_text(encoding='utf-8')

setup(
    name="slam_event_simulator",
    version="0.1.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Ground vehicle simulator emitting odometry, GPS and laser events for SLAM evaluation",
    long_description=README,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/slam_event_simulator",
    packages=find_packages(exclude=["tests", "tests.*", "examples"]),
    package_data={
        "slamsim": ["scenarios/*/*.txt"],
    },
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.23.0",
        "scipy>=1.9.0",
        "matplotlib>=3.5.0",
        "pyyaml>=6.0",
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.0.0",
        ],
    },
)
