"""Setup script for postman-mcp-server package."""
import re
from pathlib import Path
from setuptools import setup, find_packages

here = Path(__file__).parent

# Read long description from README
readme_file = here / "README.md"
long_description = readme_file.read_text(encoding="utf-8") if readme_file.exists() else ""

# Single-sourced from the package without importing it
version = re.search(
    r'^__version__ = "([^"]+)"',
    (here / "postman_mcp" / "__init__.py").read_text(encoding="utf-8"),
    re.MULTILINE,
).group(1)

setup(
    name="postman-mcp-server",
    version=version,
    description="MCP server for the Postman API with collection format conversion and sample data",
    packages=find_packages(exclude=["tests*"]),
    python_requires=">=3.10",
    install_requires=[
        "mcp>=1.2.0,<2",
        "httpx>=0.25",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
        "http": [
            "uvicorn>=0.27",
        ],
    },
    entry_points={
        "console_scripts": [
            "postman-mcp-server=postman_mcp.__main__:main",
        ],
    },
    long_description=long_description,
    long_description_content_type="text/markdown",
)
