"""
Setup script for the outreach pipeline project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="outreach-pipeline",
    version="0.3.0",
    packages=find_packages(include=["outreach", "outreach.*", "outreach_api", "outreach_api.*"]),
    py_modules=["version"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "pymongo>=4.6",
        "langchain-core>=0.2",
        "langchain-openai>=0.1",
        "json-repair>=0.25",
        "httpx>=0.27",
    ],
    entry_points={
        "console_scripts": [
            "outreach-api=outreach_api.__main__:main",
        ],
    },
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "pytest-mock>=3.12",
        ],
    },
)
