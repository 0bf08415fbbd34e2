# Package installation script

from setuptools import setup, find_namespace_packages

setup(
    name="rfx_gateway",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["rfx_gateway", "rfx_gateway.*"]),
    package_dir={"": "src"},
    python_requires=">=3.10",
    entry_points={
        "console_scripts": [
            "rfx_gateway=rfx_gateway.__main__:main",
        ],
    },
    install_requires=[
        "fastapi",
        "hypercorn",
        "pyyaml",
        "aiomqtt>=2.0",
        "pydantic>=2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
        ],
    },
)
