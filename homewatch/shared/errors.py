"""
Homewatch — Shared Error Definitions

Common exceptions used across all Homewatch components.
"""


class HomewatchError(Exception):
    """Base exception for all Homewatch errors."""
    pass


# =============================================================================
# Configuration Errors
# =============================================================================
class ConfigurationError(HomewatchError):
    """Raised when required configuration is missing or invalid."""
    pass


# =============================================================================
# Probe Errors
# =============================================================================
class ProbeError(HomewatchError):
    """Raised by a probe when the service answered but not as expected."""
    def __init__(self, service: str, message: str):
        self.service = service
        super().__init__(message)


class ProbeTimeoutError(ProbeError):
    """Raised when a probe exceeds the orchestrator-level timeout."""
    def __init__(self, service: str, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(service, f"probe timed out after {timeout_seconds:g}s")


# =============================================================================
# Dependency Errors
# =============================================================================
class DependencyUnavailableError(HomewatchError):
    """Raised when a shared dependency (e.g. the database) cannot be resolved."""
    def __init__(self, dependency: str, reason: str = ""):
        self.dependency = dependency
        self.reason = reason
        super().__init__(f"{dependency} unavailable: {reason}" if reason else f"{dependency} unavailable")


# =============================================================================
# Side-effect Errors
# =============================================================================
class NotificationError(HomewatchError):
    """Raised when an alert could not be delivered."""
    def __init__(self, title: str, reason: str):
        self.title = title
        self.reason = reason
        super().__init__(f"Failed to deliver '{title}': {reason}")


class PersistenceError(HomewatchError):
    """Raised when the snapshot could not be written."""
    def __init__(self, document_id: str, reason: str):
        self.document_id = document_id
        self.reason = reason
        super().__init__(f"Failed to persist {document_id}: {reason}")


# =============================================================================
# Control Surface Errors
# =============================================================================
class NoSnapshotError(HomewatchError):
    """Raised when the latest snapshot is requested before any cycle finished."""
    def __init__(self):
        super().__init__("no checks run yet")
