"""
Setup configuration for floorvib package
"""

from setuptools import setup, find_packages
import pathlib

# The directory containing this file
HERE = pathlib.Path(__file__).parent

# The text of the README file
README = (HERE / "README.md").read_text(encoding='utf-8')

# Read requirements
def read_requirements(filename):
    """Read requirements from file"""
    requirements = []
    with open(HERE / filename, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            # Skip comments and empty lines
            if line and not line.startswith('#'):
                # Remove inline comments
                if '#' in line:
                    line = line.split('#')[0].strip()
                requirements.append(line)
    return requirements

setup(
    name="floorvib",
    version="1.0.0",
    description="Floor vibration serviceability checks according to AISC Design Guide 11",
    long_description=README,
    long_description_content_type="text/markdown",
    author="floorvib Contributors",
    author_email="",
    license="MIT",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "Intended Audience :: Education",
        "Topic :: Scientific/Engineering",
        "Topic :: Scientific/Engineering :: Physics",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
    keywords="structural-engineering floor-vibration aisc-dg11 serviceability walking",
    packages=find_packages(exclude=["tests", "tests.*", "examples", "docs"]),
    package_data={
        "floorvib.reports": ["templates/*.md"],
    },
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=read_requirements('requirements.txt'),
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "floorvib=floorvib.cli:main",
        ],
    },
)
