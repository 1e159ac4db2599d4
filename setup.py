#!/usr/bin/env python

from setuptools import setup

setup(
    name="projectcache",
    version="0.3.0",
    description="Local disk cache for project artifacts stored in S3-compatible object storage",
    packages=["projectcache", "projectcache.objectstorage"],
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.11",
    keywords=["cache", "s3", "signed url"],
    classifiers=[
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Topic :: System :: Archiving",
    ],
    install_requires=[
        "httpx",
        "aiobotocore",
        "types-aiobotocore-s3",
        "async-lru",
        "pydantic>=2",
        "pydantic-settings",
        "python-dotenv",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-asyncio",
            "pytest-httpx>=0.32",
            "mypy",
            "flake8",
        ]
    },
    entry_points={"console_scripts": ["projectcache = projectcache.__main__:main"]},
)
