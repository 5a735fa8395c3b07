# setup.py
from setuptools import setup, find_packages

# Version is defined here to avoid import issues during build
__version__ = "1.0.0"

setup(
    name='issync',
    version=__version__,
    description='Incremental mirror of remote issue collections into local category directories.',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    install_requires=[
        'click>=8.1.0',
        'rich>=13.0.0',
        'PyYAML>=6.0',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'issync = issync.cli:cli',
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Operating System :: OS Independent",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Bug Tracking",
        "Topic :: Utilities",
    ],
    python_requires='>=3.10',
    keywords='issues, sync, markdown, mirror, cache',
)
