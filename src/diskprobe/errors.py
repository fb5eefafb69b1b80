"""Exceptions raised by diskprobe."""


class DiskprobeError(Exception):
    """Base class for errors that abort a request."""


class PayloadError(DiskprobeError):
    """The request payload is malformed or missing a required field."""


class ScanRootError(DiskprobeError):
    """The scan root does not exist or is not a directory."""
