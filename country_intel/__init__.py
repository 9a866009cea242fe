"""Country & region intelligence gateway over the REST Countries dataset."""

__version__ = "1.0.0"
