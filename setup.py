#!/usr/bin/env python3

# standards
from pathlib import Path
import re

# 3rd parties
import setuptools


def get_version() -> str:
    version_file = Path(__file__).parent / 'boxwire' / 'version.py'
    version_match = re.search(
        r"BOXWIRE_VERSION = \'(.+)\'",
        version_file.read_text('UTF-8'),
    )
    if not version_match:
        raise Exception("Couldn't parse version.py")
    return version_match.group(1)


setuptools.setup(
    name='boxwire',
    version=get_version(),
    description='Executes Box API request descriptors over Requests, with rate-limit retries and classified responses',
    author='Hervé Saint-Amand',
    packages=['boxwire', 'boxwire.engines'],
    package_data={'boxwire': ['py.typed']},
    python_requires='>=3.8',
    install_requires=[
        'chardet>=4,<6',
        'requests>=2.30,<3',
        'urllib3>=2,<3',
    ],
    extras_require={
        'test': [
            'flask>=2',
            'pytest>=7',
            'pytest-mock>=3',
        ],
    },
    classifiers=[
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
        'Programming Language :: Python :: 3',
    ],
    zip_safe=False, # https://mypy.readthedocs.io/en/latest/installed_packages.html#creating-pep-561-compatible-packages
)
