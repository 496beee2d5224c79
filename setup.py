"""Install the TouchCalc accounts package."""

from setuptools import setup, find_packages

setup(
    name='touchcalc-accounts',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    install_requires=[
        "sqlalchemy>=1.4",
        "redis",
        "flask",
        "click",
        "python-json-logger",
    ],
    extras_require={
        'fake': ["fakeredis"],
        'test': ["pytest", "hypothesis", "fakeredis"],
    },
    entry_points={
        'console_scripts': [
            'touchcalc-accounts=touchcalc.cli:cli',
        ],
    },
    zip_safe=False
)
