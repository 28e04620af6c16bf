# -*- coding: utf-8 -*-

# system imports
from setuptools import setup, find_packages  # type: ignore


# proceed with actual install
install_requires = [
    "click>=8.0.0",
    "packaging",
    "PyMySQL>=1.0",
    "rich>=9.6.1",
]

pgsql_requires = ["psycopg2-binary>=2.8"]

dev_requires = [
    "black",
    "flake8",
    "mypy",
    "pre-commit",
    "pytest",
    "pytest-cov",
]

setup(
    name="tbdb",
    author="tbdb contributors",
    version="1.0.0",
    description="Singleton database facade with typed results and batch inserts.",
    license="MIT",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    setup_requires=["wheel"],
    install_requires=install_requires,
    extras_require={
        "pgsql": pgsql_requires,
        "dev": dev_requires,
    },
    zip_safe=False,
    entry_points={
        "console_scripts": ["tbdb=tbdb.cli:main"],
    },
    python_requires=">=3.8",
    classifiers=[
        "License :: OSI Approved :: MIT License",
        "Operating System :: Unix",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Topic :: Database",
    ],
)
