import setuptools

setuptools.setup(
    name="mccalc",
    version="0.0.0",
    classifiers=["Programming Language :: Python :: 3"],
    packages=setuptools.find_packages(exclude=["tests"]),
    package_data={"mccalc": ["calc.lark", "settings.default.yaml"]},
    entry_points={"console_scripts": ["mccalc=mccalc.__main__:main"]},
    install_requires=["lark", "click", "pyyaml", "plotly", "kaleido", "pandas"],
    extras_require={"test": ["pytest"]},
)
