from setuptools import setup

setup(
    name="creals",
    version="0.1.0",  # Match creals.version
    description="Constructive real numbers with guaranteed-precision approximations",
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
    package_data={"creals": ["py.typed"]},
    packages=["creals"],
    zip_safe=False,
    python_requires=">=3.8",
)
