# flake8: noqa

from os.path import abspath, dirname, join
from setuptools import setup, find_packages
import re

__version__ = '0.1.0'
requirement_constraints = {}

here = abspath(dirname(__file__))


def parse_requirements(requirements_path: str) -> list[str]:
    requirements = []
    with open(requirements_path, 'r', encoding='utf-8') as f:
        for line in f:
            if 'git+' in line:
                continue
            # match package name, keeping extras but ignoring version
            # constraints
            match = re.match(r'^\s*([^\s<=>]+)', line)
            if not match:
                continue
            package_name = match.group(1)
            if package_name in requirement_constraints:
                constraint = requirement_constraints[package_name]
                package_name = f'{package_name}{constraint}'
            requirements.append(package_name)
    return requirements


setup(
    name='bufferfs',
    version=__version__,
    description='A file system abstraction with OS and in-memory backends',
    long_description=open(join(here, 'README.md'), encoding='utf-8').read(),
    long_description_content_type='text/markdown',
    license='Apache License 2.0',
    classifiers=[
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
    ],
    keywords='filesystem vfs in-memory testing',
    packages=find_packages(include=['bufferfs', 'bufferfs.*']),
    python_requires='>=3.9',
    install_requires=parse_requirements(join(here, 'requirements.txt')),
    zip_safe=False)
