from setuptools import setup, find_packages

setup(
    name="cartpole_ppo",
    version="0.1.0",
    description="Online PPO for cart-pole swing-up with hand-written networks and gradients",
    author="Your Name",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.24",
        "pandas>=2.0",
        "gymnasium>=0.28",
        "tqdm",
        "ruamel.yaml",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": [
            "cartpole-ppo=cartpole_ppo.cli:main",
        ],
    },
    include_package_data=True,
)
