from setuptools import setup, find_packages

setup(
    name="mcp-server-airflow",
    version="1.2.0",
    description="MCP tools for the Apache Airflow REST API",
    author="MCP Team",
    packages=find_packages(exclude=["*.tests", "*.tests.*", "tests", "tests.*"]),
    package_data={"config": ["templates/*.template"]},
    install_requires=[
        "mcp>=1.9.0,<2",
        "httpx>=0.27.0",
        "pydantic>=2.0.0",
        "starlette>=0.27.0",
        "uvicorn>=0.23.0",
        "click>=8.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
            "black>=22.0.0",
            "isort>=5.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.23.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "mcp-server-airflow=server.stdio:main",
            "mcp-server-airflow-http=server.main:main",
        ],
    },
    python_requires=">=3.10",
)
