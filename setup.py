"""Setup script for aws-otp-auth."""

from setuptools import setup, find_packages

# Read long description from README
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="aws-otp-auth",
    version="0.1.0",
    author="aws-otp-auth contributors",
    description="Refresh short-lived AWS session credentials using an MFA one-time password",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=[
        "boto3>=1.34.0",
        "click>=8.1.0",
        "configupdater>=3.1",
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "aws-otp-auth=aws_otp_auth.cli:main",
        ],
    },
)
