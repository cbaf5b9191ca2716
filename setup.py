from setuptools import find_namespace_packages, setup

setup(
    name="globalstream",
    version="0.1.0",
    description="Fetch IPTV playlists and verify which channels are reachable",
    packages=find_namespace_packages(include=("globalstream", "globalstream.*")),
    python_requires=">=3.11",
    install_requires=[
        "requests",
        "prompt-toolkit",
        "rich",
        "python-dotenv",
    ],
    extras_require={
        "dev": [
            "black",
            "pytest",
            "isort",
        ]
    },
    entry_points={
        "console_scripts": [
            "globalstream=globalstream.main:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3.12",
        "Operating System :: OS Independent",
    ],
)
