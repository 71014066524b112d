#!/usr/bin/env python

"""The setup script."""

import io
from os import path
from setuptools import setup, find_packages

here = path.abspath(path.dirname(__file__))

with io.open(path.join(here, 'README.md'), encoding="utf-8") as readme_file:
    readme = readme_file.read()

with io.open(path.join(here, 'deptree', '__init__.py'), encoding="utf-8") as init_file:
    version = init_file.read().split('__version__')[-1].split('\n')[0].split('=')[-1].strip().strip('"\'')

# get the dependencies and installs
with io.open(path.join(here, "requirements.txt"), encoding="utf-8") as f:
    all_reqs = f.read().split("\n")

install_requires = [x.strip() for x in all_reqs if x.strip() and not x.startswith("#")]

test_requirements = [
    "pytest>=8.0",
    "pytest-asyncio>=0.23",
]

setup(
    author="deptree contributors",
    python_requires='>=3.10',
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Natural Language :: English',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
    ],
    description="HTTP service that resolves the transitive dependency tree of npm packages.",
    entry_points={
        'console_scripts': [
            'deptree=deptree.__main__:main',
        ],
    },
    install_requires=install_requires,
    extras_require={
        'test': test_requirements,
    },
    license="Apache Software License 2.0",
    long_description=readme,
    long_description_content_type='text/markdown',
    include_package_data=True,
    keywords='deptree npm dependencies semver',
    name='deptree',
    packages=find_packages(include=['deptree', 'deptree.*']),
    test_suite='tests',
    tests_require=test_requirements,
    version=version,
    zip_safe=False,
)
