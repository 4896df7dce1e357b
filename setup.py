"""Package setup for zendesk-connector."""

from setuptools import setup, find_packages

setup(
    name="zendesk-connector",
    version="1.0.0",
    description="Sync Zendesk users, groups, organizations and roles into an access graph",
    packages=find_packages(include=["zendesk_connector", "zendesk_connector.*"]),
    python_requires=">=3.9",
    install_requires=[
        "httpx>=0.25.0",
        "pydantic>=2.0.0",
        "typer>=0.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "zendesk-connector=zendesk_connector.cli:app",
        ],
    },
)
