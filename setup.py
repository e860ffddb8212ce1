from setuptools import setup, find_namespace_packages

setup(
    name="lotto645",
    version="1.0.0",
    description="Lotto 6/45 candidate board - windowed scoring, diversity rules and backtested weight tuning",
    packages=find_namespace_packages(include=["lotto645", "lotto645.*"]),
    py_modules=["main"],
    install_requires=[
        'numpy>=1.24.0',
        'pandas>=2.0.0',
        'scipy>=1.11.0',
        'sqlalchemy>=2.0.0',
        'fastapi>=0.100.0',
        'uvicorn>=0.23.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.4.0',
            'httpx>=0.24.0',
        ],
    },
)
