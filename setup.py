from setuptools import setup, find_packages
from codecs import open

setup(
    name='openauth',
    version='0.1.0',
    description='OpenID 2.0 relying party login flow for web applications.',
    long_description=open('README.md', encoding='utf-8').read(),
    author='openauth contributors',
    license='Apache',
    keywords='openid login relying-party eaut',

    classifiers=[
        'Development Status :: 3 - Alpha',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python :: 3',
        'Topic :: Internet :: WWW/HTTP',
    ],

    install_requires=['html5lib'],
    extras_require={
        'consumer': ['python3-openid'],
    },
    packages=find_packages(exclude=['openauth.test']),
    test_suite='openauth.test.test_suite',
)
