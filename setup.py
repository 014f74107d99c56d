from setuptools import setup, find_packages

setup(
    name="bkkms-cli",
    version="0.1.0",
    description="Command line client for the bookmark KMS service",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=["InquirerPy", "tqdm"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "bkkms=bkkms_cli.__main__:main",
        ]
    },
)
