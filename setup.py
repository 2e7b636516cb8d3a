from setuptools import setup, find_packages

setup(
    name='privatelab',
    description="Container entrypoint provisioning private JupyterLab sessions",
    version='0.1.0',
    python_requires='>=3.10',
    packages=find_packages('src'),
    package_dir={'': 'src'},
    install_requires=[
        'typer>=0.9',
        'typing_extensions',
        'pydantic>=2',
        'omegaconf>=2.3',
        'requests',
        'validators',
    ],
    extras_require={
        'tests': [
            'pytest',
        ]
    },
    entry_points={
        'console_scripts': [
            'privatelab=privatelab.cli:app'
        ]
    }
)
