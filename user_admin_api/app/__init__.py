"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules: configuration and storage under ``core``, request and
response models under ``schemas``, business logic under ``services``
and the versioned HTTP routes under ``api/<version>/``.
"""

from .main import app  # noqa: F401
