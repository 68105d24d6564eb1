"""The Test Specialist: a software-testing chat assistant with human-approved change proposals."""

__version__ = "0.1.0"
