# setup.py
from setuptools import setup, find_packages

install_requires = [
    # --- MODELS & CONFIG ---
    "pydantic>=2.0.0",
    "python-dotenv>=1.0.0",
    "pyyaml>=6.0.0",

    # --- SERVICES ---
    "httpx>=0.27.0",            # Country lookup and rate conversion clients

    # --- DASHBOARD / STREAMLIT ---
    "streamlit>=1.35.0",        # Core UI framework for the dashboard

    # --- TESTS---
    "pytest-asyncio>=0.24.0",
    "pytest"
]

setup(
    name="atlas",
    version="1.0.0",
    description="Atlas|Countries and currency conversion dashboard",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"atlas.shared.config": ["settings/*.yaml"]},
    include_package_data=True,
    install_requires=install_requires,
    python_requires=">=3.10",
)
