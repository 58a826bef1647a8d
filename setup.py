from setuptools import find_packages
from setuptools import setup

version = '1.0.0'

install_requires = [
    # aes_key_wrap, ConcatKDFHash, Ed448/X448 and the RSA "numbers"
    # APIs used here are all present from 43 on.
    'cryptography>=43.0.0',
]

test_extras = [
    'pytest',
    'pytest-xdist',
]

setup(
    name='josecore',
    version=version,
    description='JOSE (JWK, JWS, JWE, JWA, JWT) implementation in Python',
    license='Apache License 2.0',
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Security',
        'Topic :: Security :: Cryptography',
    ],

    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    include_package_data=True,
    package_data={'josecore': ['py.typed']},
    install_requires=install_requires,
    extras_require={
        'test': test_extras,
    },
)
