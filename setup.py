from setuptools import setup, find_packages

setup(
    name="iso2ova",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[l.strip() for l in open("requirements.txt", encoding="utf-8") if l.strip() and not l.startswith("#")],
    entry_points={"console_scripts": ["iso2ova=iso2ova.__main__:run"]},
)
