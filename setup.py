"""
Setup script for the multi-protocol byte-stream dissector.
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

setup(
    name="protocol-dissector",
    version="0.1.0",
    description="Multi-protocol byte-stream dissection engine and TCP test service",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="Protocol Dissector Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pandas>=1.3.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=22.0.0",
            "flake8>=5.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "protocol-dissector=protocol_dissector.cli:main",
        ],
    },
)
