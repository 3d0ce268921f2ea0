from setuptools import setup, find_packages

setup(
    name='resonance-catalog',
    version='0.1.0',
    description='Music catalog cache and discovery core backed by the iTunes Search API',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    author='Resonance',
    author_email='',
    license='MIT',
    platforms='ALL',
    packages=find_packages(include=['resonance', 'resonance.*']),
    python_requires='>=3.10',
    install_requires=[
        'requests',
        'pydantic>=2.0.0',
        'pydantic-settings>=2.0.0',
        'pyyaml',
        'typer',
        'rich',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'resonance=resonance.cli:main',
        ],
    },
)
