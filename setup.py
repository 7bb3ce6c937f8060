from setuptools import setup, find_packages

setup(
    name="gemini-copilot-proxy",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "fastapi",
        "httpx",
        "pydantic>=2",
        "PyYAML",
        "structlog",
        "uvicorn",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "pytest-httpx",
        ],
    },
    entry_points={
        "console_scripts": [
            "gemini-copilot-proxy=gemini_copilot_proxy.core.cli:main",
        ],
    },
    description="Gemini generateContent API gateway backed by GitHub Copilot.",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
