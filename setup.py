from setuptools import setup, find_packages

setup(
    name="skillbridge",
    version="0.1",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "fastapi",
        "uvicorn",
        "sqlalchemy",
        "psycopg2-binary",
        "python-jose[cryptography]",
        "pydantic",
        "pydantic-settings",
        "python-dotenv",
        "alembic",
        "APScheduler>=3.10,<4",
    ],
    extras_require={
        "test": [
            "pytest",
            "httpx",
        ],
    },
)
