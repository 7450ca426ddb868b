from setuptools import setup, find_packages

with open("requirements.txt") as f:
    required = f.read().splitlines()

setup(
    name="snipper",
    version="0.1.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=required,
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["snipper = snipper.cli:main"]},
    python_requires=">=3.10",
    description="Collects tagged code snippets into separate files for LaTeX listings",
)
