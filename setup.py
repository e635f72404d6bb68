import re

from setuptools import find_packages, setup

version = re.search(r'^__version__\s*=\s*"(.*)"', open("kron/__init__.py").read(), re.M).group(1)

setup(
    name="kron-scheduler",
    version=version,
    description="Embeddable scheduler running tasks on cron-style patterns",
    packages=find_packages(include=["kron", "kron.*"]),
    install_requires=[
        "arrow",
        "pyhumps",
        "pydantic>=2",
        "prometheus-client",
        "pyyaml",
    ],
    extras_require={"tests": ["pytest"]},
    python_requires=">=3.10",
)
