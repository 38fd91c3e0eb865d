#!/usr/bin/env python

from setuptools import setup, find_packages

setup(
    name='airgw',
    version='1.0.0',
    packages=find_packages(exclude=['airgw.test']),
    package_data={'airgw.config': ['*.conf']},
    python_requires='>=3.9',
    install_requires=['aiohttp', 'flask', 'gunicorn', 'jsonschema'],
    extras_require={
        'test': ['pytest'],
    },
    description='UCIP (XML-RPC) gateway to AIR charging-system nodes',
    license='MIT',
    keywords='air ucip xmlrpc xml-rpc gateway charging',
    entry_points={
        'console_scripts': [
            'airgw-request = airgw.airgw_request:main',
            'airgw-simulator = airgw.simulator:main',
        ],
    }
)
