import os

import setuptools

PACKAGE_NAME = "near2far"
PIP_NAME = "near2far"
REPO_NAME = "near2far"

version = {}
version_path = os.path.join(PACKAGE_NAME, "version.py")
with open(version_path, encoding="utf-8") as version_file:
    exec(version_file.read(), version)

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()


def read_requirements(req_file: str):
    """Read requirements from a file excluding lines that have ``-r``."""
    with open(req_file, encoding="utf-8") as f:
        required = f.read().splitlines()
    return [req for req in required if req and "-r" not in req]


basic_required = read_requirements("requirements/basic.txt")
dev_required = read_requirements("requirements/dev.txt")

setuptools.setup(
    name=PIP_NAME,
    version=version["__version__"],
    description="Near-to-far-field transformation of time-domain electromagnetic fields",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url=f"https://github.com/near2far/{REPO_NAME}",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=setuptools.find_packages(include=[PACKAGE_NAME, f"{PACKAGE_NAME}.*"]),
    python_requires=">=3.8",
    install_requires=basic_required,
    extras_require={"dev": dev_required},
)
