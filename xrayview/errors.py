"""Exception types raised by xrayview collaborators.

The view catches every one of these at its boundary and turns it into a
flash message; none of them is allowed to reach the render loop.
"""

from __future__ import annotations


class XrayError(Exception):
    """Base class for recoverable xrayview errors."""


class SnapshotError(XrayError):
    """A tree snapshot could not be decoded."""


class SelectorError(XrayError):
    """A label selector expression could not be parsed."""


class MetaNotFoundError(XrayError, LookupError):
    """No metadata is registered for a resource kind."""


class DeleteError(XrayError):
    """A resource could not be deleted."""


class EditError(XrayError):
    """An edited manifest could not be applied."""
