from setuptools import setup, find_packages

setup(
    name="travelrouter",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    install_requires=[
        "click",
        "toml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "configure-location=travelrouter.cli:configure_location",
            "router-status=travelrouter.cli:router_status",
            "travel-router=travelrouter.cli:cli",
        ],
    },
    python_requires=">=3.9",
    author="Travel Router Contributors",
    description="Raspberry Pi WiFi-to-VPN travel router management",
    long_description="Connects a Raspberry Pi to venue WiFi, routes its hotspot clients through NordVPN, and keeps the hotspot and forwarding healthy.",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: System :: Networking",
        "Topic :: System :: Systems Administration",
    ],
)
