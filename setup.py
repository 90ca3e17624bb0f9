from setuptools import setup, find_packages

setup(
    name="emr-batch-ingest",
    version="0.3.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "boto3>=1.26",
        "botocore>=1.29",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "typer>=0.9",
        "rich>=13.0",
        "cli-core-yo>=1.0,<1.2",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "emr-ingest=emr_ingest.cli:main",
        ],
    },
)
