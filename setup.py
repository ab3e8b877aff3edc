"""Package side-context-mcp: file-based entry store with an MCP server and CLI."""

from setuptools import find_packages, setup

setup(
    name="side-context-mcp",
    version="0.1.0",
    description="Todo-style entries with a single active entry, stored as JSON files and served over MCP.",
    python_requires=">=3.11",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "click>=8.1",
        "rich>=13.0",
    ],
    extras_require={
        "test": ["pytest>=8.0"],
    },
    entry_points={
        "console_scripts": [
            "side-context-mcp=side_context.cli:main",
        ],
    },
)
