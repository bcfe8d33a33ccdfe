from setuptools import setup, find_packages


with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="routeform",
    version="0.1.0",
    description=(
        "Route-based routing optimization over k loopless shortest paths "
        "for capacitated networks."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires=">=3.10",
    install_requires=[
        "networkx",
        "numpy",
        "pulp>=2.7,<4",
        "pyyaml",
        "scipy>=1.9",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["routeform=routeform.cli:main"]},
)
