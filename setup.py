from setuptools import find_packages, setup

setup(
    name="sftp-treeops",
    version="0.1.0",
    description="Order-safe recursive delete, chmod and listing for remote SFTP trees",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "paramiko>=3.0.0",
    ],
    entry_points={
        "console_scripts": [
            "sftp-treeops=sftp_treeops.__main__:main",
        ],
    },
    python_requires=">=3.10",
    extras_require={
        "dev": [
            "pytest",
            "build",
            "twine",
        ],
    },
)
