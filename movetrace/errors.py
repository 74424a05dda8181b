"""
Exception hierarchy for movetrace.

All tracer errors inherit from MovetraceError so the CLI can catch
them uniformly and report the offending package identifier.
"""

from typing import List, Optional


class MovetraceError(Exception):
    """Base exception for all movetrace errors."""

    def __init__(self, message: str, package_id: Optional[str] = None):
        self.package_id = package_id
        super().__init__(message)


class MalformedIdentifier(MovetraceError, ValueError):
    """Identifier does not parse into ``<address>::<name>``."""

    def __init__(self, package_id: str):
        super().__init__(
            f"Invalid package ID '{package_id}'. Expected <address>::<PackageName>.",
            package_id=package_id,
        )


class MetadataLookupError(MovetraceError, LookupError):
    """The metadata provider could not resolve a reachable identifier."""


class NotFoundInRegistry(MetadataLookupError):
    """The address has a package registry but not the requested package."""

    def __init__(self, package_id: str, available: List[str]):
        self.available = list(available)
        found = ", ".join(self.available) or "none"
        super().__init__(
            f"Package '{package_id}' not found in the registry for this address. Found: {found}",
            package_id=package_id,
        )
