from setuptools import find_packages, setup

setup(
    name="git-build-harness",
    version="0.1.0",
    packages=find_packages(
        include=[
            "harness_common",
            "harness_common.*",
            "harness_git",
            "harness_git.*",
            "harness_host",
            "harness_host.*",
            "harness_testkit",
            "harness_testkit.*",
        ]
    ),
    install_requires=[
        "click>=8.1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-xdist>=3.3.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "git-harness=harness_testkit.cli:main",
        ],
    },
    python_requires=">=3.10",
)
