from setuptools import setup, find_packages

setup(
    name="insert-batcher",
    version="0.1.0",
    description="Bulk INSERTs split by the server's maximum statement size, with RETURNING support",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    include_package_data=True,
    python_requires=">=3.8",
    install_requires=[
        'click>=8.1.8',
        'psycopg2-binary>=2.9.10',
        'rich>=13.9.4',
        'trino>=0.333.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'insert-batcher=insert_batcher.cli:main',
        ],
    },
)
