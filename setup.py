from pathlib import Path
from setuptools import setup, find_packages


def read_readme() -> str:
    readme_path = Path(__file__).resolve().parent / "README.md"
    return readme_path.read_text(encoding="utf-8") if readme_path.exists() else ""


setup(
    name="ncmunbox",
    version="0.3.0",
    packages=find_packages(include=["ncmunbox", "ncmunbox.*"]),
    install_requires=[
        "cryptography>=41.0.0",
        "mutagen>=1.45.0",
        "numpy>=1.24.0",
    ],
    entry_points={
        "console_scripts": ["ncmunbox=ncmunbox.main:main"],
    },
    python_requires=">=3.10",
    description="Unbox NCM containers into tagged audio files",
    long_description=read_readme(),
    long_description_content_type="text/markdown",
)
