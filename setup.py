from setuptools import setup, find_namespace_packages


def _get_version():
    with open('sparsegp/__init__.py') as f:
        for line in f:
            if line.startswith('__version__'):
                g = {}
                exec(line, g)
                return g['__version__']


with open('README.md', 'r') as f:
    long_description = f.read()

with open('requirements.txt', 'r') as f:
    required = f.read().splitlines()

setup(
    name='sparsegp',
    version=_get_version(),
    description='Sparse Gaussian process regression with the variational DTC bound',
    long_description=long_description,
    long_description_content_type='text/markdown',
    author='songl',
    author_email='songl@lamda.nju.edu.cn',
    packages=find_namespace_packages(include=['sparsegp*']),
    include_package_data=True,
    install_requires=required,
    extras_require={'test': ['pytest']},
    python_requires='>=3.10',
    license='Apache License 2.0',
)
