from __future__ import annotations

from typing import Any


class HubfabricError(Exception):
    """Base error for hubfabric exceptions."""

    step: str | None = None


class ConfigurationError(HubfabricError):
    """Raised when a required CIDR, ASN or IP is missing or malformed."""

    step = "config"


class DuplicateAttachmentError(HubfabricError):
    """Raised when a segment or VPN link is attached to the hub twice."""


class DanglingReferenceError(HubfabricError):
    """Raised when a node references a key that was never declared."""


class AssociationConflictError(HubfabricError):
    """Raised when an attachment is associated with a second routing domain."""


class InvalidTransitionError(HubfabricError):
    """Raised when a VPN link transition is attempted out of order."""


class AsymmetricPropagationError(HubfabricError):
    """Raised when validation finds one-directional propagation or reachability."""

    step = "validate"

    def __init__(self, message: str, failures: list[Any] | None = None) -> None:
        super().__init__(message)
        self.failures = failures or []


class CompositionError(HubfabricError):
    """Raised when a composition step fails; names the failing step."""

    def __init__(self, step: str, cause: Exception) -> None:
        super().__init__(f"composition failed at step '{step}': {cause}")
        self.step = step
        self.cause = cause
