import setuptools

try:
    with open("README.md", "r", encoding="utf-8") as fh:
        long_description = fh.read()
except FileNotFoundError:
    long_description = "Proxy annotated methods to Redis Lua scripts"

setuptools.setup(
    name="redis-lua",
    version="0.1.0",
    description="Proxy annotated methods to Redis Lua scripts",
    long_description=long_description,
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src", include=["redis_lua", "redis_lua.*"]),
    install_requires=[
        "redis>=5.0",
        "pydantic>=2.0",
        "python-dotenv",
        "rich",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
)
