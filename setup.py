from setuptools import setup, find_packages

setup(
    name='cjs-bundle',
    version='0.1.0',
    py_modules=['cjsbundle', 'builder'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'cjs.handlers': ['*.js'],
    },
    install_requires=[
        'lark',
        'pydantic>=2',
        'rjsmin',
        'watchdog',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'cjsbundle = cjsbundle:main',
        ],
    },
)
