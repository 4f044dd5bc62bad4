# errors.py
from __future__ import annotations


class IntrospectionError(RuntimeError):
    """A PipeWire/Pulse query could not run or returned unusable output."""


class LinkError(RuntimeError):
    """pw-link refused a connection for a reason other than an existing link."""


class FilesystemError(RuntimeError):
    """A fragment file could not be written, removed or listed."""
