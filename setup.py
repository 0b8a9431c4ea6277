from setuptools import find_packages, setup

from src.openlib_apitest.constants import VERSION

DESCRIPTION = """OpenLibrary Author API Test Harness (openlib-apitest)
Behavior-driven and standalone integration tests for the OpenLibrary author
endpoint, checking status, content type, author details and JSON Schema
conformance.

Gherkin scenarios and pytest tests share expected values and responses
through a per-thread scenario context registry.
"""

setup(
    name="openlib-apitest",
    version=VERSION,
    packages=find_packages(where="src", exclude=[
                           "__pycache__", "*.__pycache__*"]),
    package_dir={"": "src"},
    package_data={"openlib_apitest": ["schemas/*.json"]},
    include_package_data=True,
    scripts=["src/bin/openlib-apitest"],
    install_requires=[
        "behave<2.0,>=1.3.3",
        "dotenv<1.0,>=0.9.9",
        "requests<3.0,>=2.31",
        "jsonschema<5.0,>=4.18",
    ],
    extras_require={
        "test": [
            "pytest>=8.3,<9.0",
            "pytest-mock>=3.14,<4.0",
        ],
    },
    description=DESCRIPTION,
    long_description=DESCRIPTION,
    license="MIT License",
    classifiers=["Programming Language :: Python :: 3.8"],
)
