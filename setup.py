"""Setup script for the Graph Benchmark Driver."""

from setuptools import setup, find_packages
from pathlib import Path

here = Path(__file__).parent

with open(here / "requirements.txt", "r", encoding="utf-8") as f:
    requirements = [line.strip() for line in f if line.strip() and not line.startswith("#")]

setup(
    name="graph_bench_driver",
    version="0.1.0",
    description="Configuration layer of a driver benchmarking graph libraries",
    long_description=(here / "README.md").read_text(encoding="utf-8"),
    long_description_content_type="text/markdown",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Topic :: System :: Benchmark",
    ],
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=requirements,
    extras_require={
        "dev": [
            "pytest>=7.4",
            "pytest-cov>=4.1",
            "black>=23.0",
            "isort>=5.12",
            "mypy>=1.5",
        ],
    },
    entry_points={
        "console_scripts": [
            "gfe-config=graph_bench_driver.main:main",
        ],
    },
    zip_safe=False,
)
