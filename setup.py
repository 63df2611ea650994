from setuptools import setup, find_packages
from pathlib import Path


def read_readme():
    this_directory = Path(__file__).parent
    readme_file = this_directory / 'README.md'
    if readme_file.exists():
        return readme_file.read_text(encoding='utf-8')
    return ""

def get_version():
    import re
    init_file = Path(__file__).parent / 'cloudctx' / '__init__.py'
    if init_file.exists():
        content = init_file.read_text()
        match = re.search(r'__version__\s*=\s*["\']([^"\']+)["\']', content)
        if match:
            return match.group(1)
    return "0.1.0"


setup(
    name="cloudctx",
    version=get_version(),
    description="Cloud credential resolution and token-authenticated database connection pools.",
    long_description=read_readme(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=['cloudctx', 'cloudctx.*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2.0",
        "psycopg[binary]>=3.1",
        "psycopg-pool>=3.2",
    ],
    extras_require={
        "aws": ["boto3>=1.28"],
        "azure": ["azure-identity>=1.15"],
        "dev": ["pytest>=7.0", "pytest-cov"],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: Database",
    ],
    keywords="credentials aws azure rds iam entra-id connection-pool psycopg",
)
