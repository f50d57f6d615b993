#!/usr/bin/env python
from setuptools import setup
setup(
    name='restobjects',
    version='0.1.0',
    description='client-side REST resources with change tracking',
    author='Six Apart Ltd.',
    author_email='python@sixapart.com',

    packages=['restobjects'],
    provides=['restobjects'],
    python_requires='>=3.6',
    install_requires=['simplejson>=3.3.0', 'httplib2>=0.9'],
    extras_require={
        'test': ['mock'],
    },
)
