from setuptools import setup

setup(
    name             = "nbtree",
    version          = "1.0.0",
    description      = "Named Binary Tag (NBT) reader and writer",
    packages         = [ "nbtree" ],
    python_requires  = ">=3.6",
    install_requires = [
        "mutf8"
    ],
    zip_safe         = True
)
