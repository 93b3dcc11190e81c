from setuptools import setup, find_packages
import re

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

with open("llm_bench/__init__.py", "r", encoding="utf-8") as f:
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", f.read(), re.M)
    if version_match:
        version = version_match.group(1)
    else:
        raise RuntimeError("Unable to find version string in llm_bench/__init__.py")

setup(
    name="llm-bench",
    version=version,
    description="Backend for configuring, running and reviewing LLM load-test benchmarks",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["llm_bench", "llm_bench.*"]),
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Testing",
        "Framework :: FastAPI",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "rich>=13.0.0",  # CLI tables
        "python-dotenv>=0.19.0",  # For environment variables
        "openpyxl>=3.0.0",  # For Excel export
        "fastapi>=0.110.0",
        "uvicorn>=0.30.0",
        "sqlalchemy>=2.0.0",
        "httpx>=0.27.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
            "black>=22.0.0",
            "isort>=5.10.0",
            "mypy>=1.0.0",
        ],
        "postgres": ["psycopg2-binary>=2.9.0"],
    },
    entry_points={
        "console_scripts": [
            "llm-bench=llm_bench.cli:main",
        ],
    },
)
