"""Exceptions raised by the remux pipeline."""


class RemuxError(Exception):
    """Base class for errors that abort processing of a single file."""


class ProbeError(RemuxError):
    """The probe tool produced no usable track inventory."""


class WorkspaceError(RemuxError):
    """The working directory for a file could not be created."""
