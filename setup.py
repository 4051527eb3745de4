import setuptools

setuptools.setup(
    name="tputfmt",
    version="1",
    description="Format text with terminfo colors and attributes",
    packages=[
        "tputfmt",
        "tputfmt.testutil",
    ],
    license='Apache-2.0',
    install_requires=[
        "jsonschema",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "tputfmt = tputfmt.main_cli:tputfmt_cli"
        ]
    },
)
