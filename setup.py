import re

from setuptools import find_packages, setup


def _version():
    with open("txec2/_version.py") as f:
        match = re.search(
            r'Version\("txec2", (\d+), (\d+), (\d+)\)', f.read())
    return ".".join(match.groups())


long_description = """
Twisted-based asynchronous client for EC2-style query APIs.  Responses are
decoded while they stream through an XML parser, and describe calls can
skip decoding altogether when the service returns an unchanged document.
"""


setup(
    name="txEC2",
    version=_version(),
    description="Async streaming EC2 client",
    author="txEC2 Developers",
    license="MIT",
    packages=find_packages(),
    long_description=long_description,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Programming Language :: Python :: 3",
        "Topic :: Internet :: WWW/HTTP",
        "License :: OSI Approved :: MIT License",
       ],
    include_package_data=True,
    zip_safe=False,
    python_requires=">=3.6",
    install_requires=[
        "attrs", "twisted[tls]>=15.5.0,!=17.1.0", "lxml", "incremental",
        "constantly", "zope.interface",
    ],
    extras_require={
        "dev": ["pytest"],
    },
    )
