"""Packaging information for rctravel."""

import sys

import setuptools

from rctravel.constants import VERSION

if sys.version_info[:3] < (3, 9, 0):
    print("rctravel requires Python 3.9 to run.")
    sys.exit(1)

install_requires = [
    "lz4>=3.0.2",
    "jinja2>=3.0.0",
]

extras_require = {
    "dev": [
        "rope>=0.14.0",
        "flake8>=3.7.9",
        "flake8-docstrings>=1.5.0",
        "flake8-import-order>=0.18.1",
        "black>=19.10b0",
        "pylint>=2.4.4",
        "mypy>=0.770",
        "pytest>=5.4.1",
        "pytest-cov>=2.8.1",
    ]
}


def _long_description():
    with open("README.md") as f:
        return f.read()


setuptools.setup(
    name="rctravel",
    version=VERSION,
    description="Bring your shell rc-files along into ssh, su and container sessions.",
    long_description=_long_description(),
    long_description_content_type="text/markdown",
    license="Apache",
    packages=setuptools.find_packages(),
    package_data={"rctravel.templates": ["*.j2"]},
    entry_points={
        "console_scripts": [
            "rcssh = rctravel.__main__:ssh_main",
            "rcdocker = rctravel.__main__:container_main",
            "rcsu = rctravel.__main__:switch_main",
            "rctravel-init = rctravel.__main__:init_main",
        ]
    },
    install_requires=install_requires,
    extras_require=extras_require,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: POSIX",
        "Topic :: System :: Shells",
    ],
    python_requires=">=3.9",
)
