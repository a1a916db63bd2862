from setuptools import find_packages, setup

setup(
    name="secret_migrate",
    packages=find_packages(exclude=["secret_migrate_tests"]),
    package_data={"secret_migrate": ["data/*.csv"]},
    install_requires=[
        "dagster",
        "google-api-core",
        "google-cloud-secret-manager",
        "hvac",
        "pydantic>=2",
        "python-dotenv",
        "requests",
        "tenacity>=8,<9.2",
    ],
    extras_require={"dev": ["dagster-webserver", "pytest"]},
    entry_points={
        "console_scripts": [
            "secret-migrate=secret_migrate.migration.migrate:main",
        ],
    },
)
