#!/usr/bin/env python3
from setuptools import setup, find_packages

setup(
    name='pyimgtools-core',
    version='0.1',
    description='image processing engine for raw pixel buffers and encoded images',
    packages=find_packages(include=['pyimgtools', 'pyimgtools.*']),
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'scipy',
        'Pillow',
        'PyYAML',
        'single_source',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-asyncio<0.23',
            'pytest-mock',
        ]
    }
)
