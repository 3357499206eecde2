"""
Setup script for the contact upsert demo.

Allows development installation with `pip install -e .[test]`
"""

from setuptools import setup, find_packages

setup(
    name="contact-upsert-demo",
    version="1.0.0",
    packages=find_packages(include=["contact_store", "contact_store.*", "demo_service", "demo_service.*"]),
    python_requires=">=3.11",
    install_requires=[
        "pymongo>=4.6",
        "fastapi>=0.110",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "httpx>=0.27",
        ],
    },
    entry_points={
        "console_scripts": [
            "contact-upsert-demo=demo_service.__main__:main",
        ],
    },
)
