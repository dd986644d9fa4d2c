# setup.py
from setuptools import setup, find_packages

setup(
    name="app-logger",
    version="0.1.0",
    description="Structured application logging with console, rotating file and remote sinks plus log upload",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_packages(where="src"),  # Encuentra automáticamente la carpeta 'app_logger'
    python_requires=">=3.8",
    install_requires=[
        "requests",  # Sink remoto y subida de ficheros de log
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'app-logger=app_logger.interface.cli.app:main',  # Mantenimiento de logs vía CLI
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
