"""
Setup script for ncmdecrypt.
"""

from setuptools import setup, find_namespace_packages

# Read the README file
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open("requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [line.strip() for line in fh if line.strip() and not line.startswith("#")]

setup(
    name="ncmdecrypt",
    version="1.0.0",
    author="",
    author_email="",
    description="Convert NetEase Cloud Music .ncm files into tagged mp3/flac files",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["ncmdecrypt", "ncmdecrypt.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Multimedia :: Sound/Audio :: Conversion",
    ],
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "ncmdecrypt=ncmdecrypt.main:main",
        ],
    },
    scripts=["run.py"],
    keywords="ncm netease audio decryption id3 flac",
)
