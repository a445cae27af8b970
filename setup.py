#!/usr/bin/env python

from setuptools import setup

import csdl2openapi.info


with open('README.rst') as f:
    long_description = f.read()

setup(name=csdl2openapi.info.name,
      version=csdl2openapi.info.version,
      description=csdl2openapi.info.title,
      long_description=long_description,
      packages=['csdl2openapi'],
      python_requires='>=3.6',
      extras_require={'test': ['pytest']},
      classifiers=['Development Status :: 3 - Alpha',
                   'Intended Audience :: Developers',
                   'Natural Language :: English',
                   'License :: OSI Approved :: BSD License',
                   'Operating System :: OS Independent',
                   'Programming Language :: Python',
                   'Programming Language :: Python :: 3',
                   'Topic :: Internet :: WWW/HTTP',
                   'Topic :: Software Development :: '
                   'Libraries :: Python Modules']
      )
