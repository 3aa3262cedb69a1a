from setuptools import setup


setup(
    name="sheet-ledger",
    version="0.1.0",
    description="Infer layouts and extract typed transactions from personal-finance spreadsheets",
    packages=["sheet_ledger"],
    python_requires=">=3.10",
    install_requires=[
        "pandas",
        "chardet",
        "openpyxl",
    ],
    extras_require={
        "excel-legacy": ["xlrd"],
        "ods": ["odfpy"],
        "all": ["xlrd", "odfpy"],
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "sheet-ledger=sheet_ledger.cli:main",
        ]
    },
)
