from setuptools import setup, find_packages


setup(
    version="0.1.0",
    name="aiopotion",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.8",
    install_requires=[
        "aiohttp>=3.8",
        "httpx>=0.24",
        "yarl>=1.8",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "pytest-asyncio>=0.21",
        ],
    },
)
