"""Package setup for somweb_bridge."""

from setuptools import setup, find_packages

setup(
    name="somweb-bridge",
    version="1.0.0",
    description="MQTT bridge for SOMweb garage-door gateways",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=5.0.0",
        "paho-mqtt>=2.0.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "somweb-bridge=somweb_bridge.cli:main",
        ],
    },
)
