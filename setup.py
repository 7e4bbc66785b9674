"""Install arXiv sessions package."""

from setuptools import setup, find_packages

setup(
    name='arxiv-sessions',
    version='0.1.0',
    packages=[f'arxiv.{package}' for package
              in find_packages('./arxiv', exclude=['*test*'])],
    python_requires='>=3.8',
    install_requires=[
        "flask>=2.3",
        "werkzeug>=2.3",
        "redis>=4.1",
        "python-json-logger",
    ],
    extras_require={
        'test': ["pytest"],
    },
    zip_safe=False
)
