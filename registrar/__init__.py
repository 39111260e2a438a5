"""Registrar: user registration with Argon2id password hashing."""

__version__ = "0.1.0"
