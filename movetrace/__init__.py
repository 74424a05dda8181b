"""Movetrace: dependency tracer for on-chain Aptos Move packages."""

__version__ = "0.3.0"
