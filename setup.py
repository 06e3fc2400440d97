#!/usr/bin/env python3
# -*- coding: utf-8 -*-

from setuptools import setup, find_packages

scripts = {
  'console_scripts' : [
    'swdlinkdbg = swdlink.swdlinkdbg:main',
    'dumpsyms = swdlink.dumpsyms:main',
  ]
}

setup(
    name = 'swdlink',
    description='Memory access to microcontrollers through an OpenOCD server',
    version = '0.1',
    classifiers = [
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Topic :: Software Development :: Embedded Systems",
    ],
    license = "License :: OSI Approved :: BSD License",
    packages = find_packages(exclude=['tests']),
    python_requires = '>=3.8',
    install_requires = ['prompt_toolkit>=3.0'],
    extras_require = {'test': ['pytest']},
    zip_safe = False,
    entry_points = scripts,
    include_package_data=True
)
