from setuptools import setup, find_namespace_packages

setup(
    name="bookshelf_cache",
    version="0.1.0",
    packages=find_namespace_packages(include=['cli*', 'bookshelf*', 'api*']),
    include_package_data=True,
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
        "beautifulsoup4",
        "requests",
        "pydantic>=2",
        "fastapi",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "bookshelf=cli.main:main",
        ],
    },
)
