#!/usr/bin/env python
__license__ = """
Copyright 2015 Parse.ly, Inc.

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""
import re
import os

from setuptools import setup, find_packages


# Get version without importing, which avoids dependency issues
def get_version():
    with open('clustermeta/__init__.py') as version_file:
        return re.search(r"""__version__\s+=\s+(['"])(?P<version>.+?)\1""",
                         version_file.read()).group('version')

install_requires = [
    'kazoo>=2.8',
    'tabulate'
]

extra_gevent_requires = [
    'gevent'
]

lint_requires = [
    'pycodestyle',
    'pyflakes'
]


def read_lines(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as f:
        return f.readlines()

tests_require = [
    x.strip() for x in read_lines('test-requirements.txt') if not x.startswith('-')
]

with open('README.rst') as f:
    readme = f.read()

setup(
    name='clustermeta',
    version=get_version(),
    description='Kafka cluster metadata and consumer group membership from ZooKeeper',
    long_description=readme,
    keywords='apache kafka zookeeper metadata consumer group',
    license='Apache License 2.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    entry_points={
        'console_scripts': [
            'clustermeta-tools = clustermeta.cli.meta_tools:main',
        ]
    },
    python_requires='>=3.7',
    install_requires=install_requires,
    extras_require={
        'test': tests_require,
        'all': install_requires + tests_require + extra_gevent_requires,
        'lint': lint_requires,
        'gevent': extra_gevent_requires
    },
    zip_safe=False,
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ]
)
