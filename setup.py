from setuptools import setup, find_packages

setup(
    name='tracelang',
    version='0.1.0',
    description='tracelang: a typed teaching language interpreter with variable tracing',
    package_dir={'': 'src'},
    packages=find_packages('src', include=['tracelang', 'tracelang.*']),
    include_package_data=True,
    python_requires='>=3.8',
    install_requires=[
        'click>=7.0',
        'rich>=10.0'
    ],
    extras_require={
        'test': ['pytest>=7.0']
    },
    entry_points={
        'console_scripts': [
            'tracelang = tracelang.cli.main:cli'
        ]
    },
    classifiers=[
        'Programming Language :: Python :: 3',
    ],
)
