#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import os
from setuptools import setup, find_packages

def read(*paths):
    """Build a file path from *paths* and return the contents."""
    with open(os.path.join(*paths), 'r') as f:
        return f.read()

here = os.path.abspath(os.path.dirname(__file__))

# put package requirements here
requirements = [
    "requests",
    "jinja2",
    "multipledispatch",
    "arrow",
    "PyYaml",
    "colorlog",
    "werkzeug",
]

# put package test requirements here
test_requirements = [
    "pytest",
]

setup(
    name='ripline',
    version='0.1.0',
    description="XML-RPC and SOAP client and server with namespaces and batched calls",
    long_description=read(here, 'README.md'),
    long_description_content_type='text/markdown',
    license='Apache',
    author="StackHut",
    author_email='stackhut@stackhut.com',
    packages=find_packages(exclude=["*.tests", "*.tests.*", "tests.*", "tests"]),
    package_data={'ripline': ['res/templates/*.html']},
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'ripline = ripline.__main__:main',
        ],
    },
    install_requires=requirements,
    extras_require={'test': test_requirements},
    zip_safe=False,
    test_suite='tests',
    tests_require=test_requirements,
    keywords='xmlrpc soap rpc multicall',
    platforms=['POSIX'],
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Intended Audience :: Developers',
        'Natural Language :: English',
        'License :: OSI Approved :: Apache Software License',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Topic :: Software Development',
    ],
)
