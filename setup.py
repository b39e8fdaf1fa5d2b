from setuptools import find_packages, setup

setup(
    name="teamwork-hours",
    version="0.4.0",
    description="CLI to spread and submit bulk time entries to Teamwork",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["main"],
    python_requires=">=3.8",
    install_requires=[
        "requests",
        "python-dateutil",
        "python-dotenv",
        "dateparser",
        "keyring",
        "PyYAML",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'teamwork-hours=teamwork_hours.cli:main'
        ]
    }
)
