from setuptools import setup, find_packages


with open('abcscore/_version.py') as f:
    for line in f.readlines():
        if '__version__ =' in line:
            exec(line)


with open('README.md') as f:
    readme = f.readlines()
readme = ''.join(readme[1:])  # Skip the first line


setup(
    name="abcscore",
    version=__version__,
    author="Satoshi Nishimura",
    author_email='nisim@u-aizu.ac.jp',
    description="A parser and score interpreter for ABC music notation",
    long_description=readme,
    long_description_content_type='text/markdown',
    keywords="ABC notation, music notation, parser, score",
    license="BSD-3-Clause",
    python_requires=">=3.6",
    install_requires=["Arpeggio>=1.9"],
    extras_require={
        "test": ["pytest"],
    },
    packages=find_packages(),
    entry_points={
        "console_scripts": [
            "abcscore = abcscore.abccmd:main",
        ],
    },
    classifiers=[
        'Development Status :: 4 - Beta',
        'License :: OSI Approved :: BSD License',
        'Operating System :: OS Independent',
        'Topic :: Multimedia :: Sound/Audio',
        'Topic :: Text Processing :: Markup',
    ],
)
