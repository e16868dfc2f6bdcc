# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="thriftbuild",
    version="0.3.0",
    description="Compila esquemas Thrift con el compilador externo y aplana las fuentes generadas",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["thriftbuild*"]),  # Paquetes sin __init__.py
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'thriftbuild=thriftbuild.main:main',  # CLI principal
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
