"""
starmap - AI model catalog synchronization

This setup.py file is the package configuration; pip install -e . works for
development.
"""

from setuptools import find_packages, setup

if __name__ == "__main__":
    setup(
        name="starmap",
        version="0.1.0",
        description="Keep an AI model catalog in sync with provider APIs and models.dev.",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        package_dir={"": "src"},
        packages=find_packages("src"),
        package_data={"starmap.catalogs": ["data/*.yaml", "data/providers/**/*.yaml"]},
        python_requires=">=3.11",
        install_requires=[
            "PyYAML>=6.0",
            "httpx>=0.27",
            "openai>=1.40",
            "anthropic>=0.34",
            "pydantic>=2.7",
            "prettytable>=3.9",
        ],
        extras_require={
            "test": [
                "pytest>=8.0",
            ],
        },
        entry_points={
            "console_scripts": [
                "starmap=starmap.cli.main:main",
            ],
        },
        classifiers=[
            "Development Status :: 4 - Beta",
            "Intended Audience :: Developers",
            "Programming Language :: Python :: 3",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Scientific/Engineering :: Artificial Intelligence",
        ],
    )
