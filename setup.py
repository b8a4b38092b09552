from setuptools import find_packages, setup

setup(
    name="nejiba-studio-backend",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["app", "bootloader"],
    python_requires=">=3.10",
    install_requires=[
        "aiohttp>=3.9",
        "fastapi>=0.110",
        "openai>=1.30",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "python-multipart>=0.0.9",
        "PyYAML>=6.0",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "httpx>=0.27",
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    include_package_data=True,
    data_files=[("config", ["config/generation.yaml"])],
    description="Backend package for Nejiba Studio (image, video and text generation)",
)
