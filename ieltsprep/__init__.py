"""IELTS speaking & listening practice client."""

__version__ = "0.1.0"
