from __future__ import annotations

from setuptools import find_packages, setup

from config.version import PROJECT_VERSION, PYTHON_REQUIRES_SPECIFIER

if __name__ == "__main__":
    setup(
        name="refeed-dedup",
        version=PROJECT_VERSION,
        description="Near-duplicate detection and merge engine for republished news records",
        python_requires=PYTHON_REQUIRES_SPECIFIER,
        packages=find_packages(include=["config", "refeed", "refeed.*"]),
        install_requires=[
            "pydantic>=2.5",
            "loguru>=0.7",
            "python-dateutil>=2.8",
            "python-dotenv>=1.0",
            'tomli>=2.0; python_version < "3.11"',
        ],
        extras_require={
            "test": [
                "pytest>=7.4",
                "hypothesis>=6.90",
            ],
        },
        entry_points={
            "console_scripts": [
                "refeed-dedup=refeed.cli:main",
                "refeed-config=refeed.config_manager:main",
            ],
        },
    )
