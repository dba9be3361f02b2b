# -*- coding: utf-8 -*-
# Copyright (c) 2019 The HERA Collaboration
# Licensed under the 2-clause BSD License

from setuptools import find_packages, setup

package_name = "nc_wire"

packages = find_packages(include=["nc_wire", "nc_wire.*"])

test_reqs = [
    "pytest",
]

setup(
    name=package_name,
    version="1.0.0",
    license="BSD",
    description="Copy a file to a remote host with netcat, orchestrated over ssh",
    long_description="""\
nc_wire copies a single file to a machine on the same network as fast as
the wire allows: ssh authenticates and starts a netcat listener on the
destination, the bytes travel over a plain TCP connection, and an optional
checksum comparison confirms the copy.
""",
    python_requires=">=3.10",
    install_requires=[
        "loguru",
        "pydantic>=2.0",
        "pydantic-settings",
        "xxhash",
    ],
    packages=packages,
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Intended Audience :: System Administrators",
        "License :: OSI Approved :: BSD License",
        "Topic :: System :: Networking",
    ],
    extras_require={
        "test": test_reqs,
    },
    entry_points={"console_scripts": ["nc_wire=nc_wire.cli:main"]},
    include_package_data=True,
    zip_safe=False,
)
