"""Error hierarchy for Taurus.

Lifecycle errors (ValidationError, NotFoundError) propagate to the caller of
the management surface. Probe and notification faults are recovered where
they happen and only ever reach the log.

Exception Hierarchy:
    TaurusError (base)
    ├── ConfigError        - Configuration loading and validation issues
    ├── ValidationError    - Malformed agent configuration
    ├── NotFoundError      - Operation targets an unknown agent
    ├── ProbeFault         - A single agent's health probe raised
    └── NotificationFault  - A notification sink failed
"""

from typing import Any

from taurus.core.security import is_sensitive_field, is_sensitive_value


class TaurusError(Exception):
    """Base exception for all Taurus errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dict with additional context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class ConfigError(TaurusError):
    """Error from configuration operations.

    Attributes:
        config_key: The configuration key that caused the error.
        config_file: Path to the config file if applicable.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        config_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.config_key = config_key
        self.config_file = config_file


class ValidationError(TaurusError):
    """Malformed agent configuration.

    Raised by ``LifecycleController.add_agent`` before the registry is touched.

    Attributes:
        field: The field that failed validation.
        value: The invalid value. Use ``safe_value`` when logging, since
            agent endpoints are frequently API tokens.
    """

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field
        self.value = value

    @property
    def safe_value(self) -> str:
        """Return a representation of the value that is safe to log."""
        if self.value is None:
            return "<None>"
        if self.field and is_sensitive_field(self.field):
            return "<REDACTED>"
        if isinstance(self.value, str):
            if is_sensitive_value(self.value):
                return "<REDACTED>"
            if len(self.value) > 50:
                return f"{self.value[:20]}...({len(self.value)} chars)"
            return repr(self.value)
        return f"<{type(self.value).__name__}>"

    def __str__(self) -> str:
        base = self.message
        if self.field:
            base = f"{base} (field: {self.field}, value: {self.safe_value})"
        if self.details:
            base = f"{base} (details: {self.details})"
        return base


class NotFoundError(TaurusError):
    """Operation targets an agent name that is not registered.

    Attributes:
        agent_name: The unknown agent name.
    """

    def __init__(
        self,
        message: str,
        *,
        agent_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.agent_name = agent_name


class ProbeFault(TaurusError):
    """A single agent's health probe raised an unexpected exception.

    Never raised out of a probing pass; the prober marks the agent
    ``health_status=error`` and continues with the remaining agents.

    Attributes:
        agent_name: Agent whose probe failed.
    """

    def __init__(
        self,
        message: str,
        *,
        agent_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.agent_name = agent_name

    @classmethod
    def from_exception(cls, exc: BaseException, *, agent_name: str) -> "ProbeFault":
        """Wrap a probe exception, keeping the original as ``__cause__``."""
        fault = cls(
            f"Health probe failed for {agent_name}: {exc}",
            agent_name=agent_name,
            details={"original_exception": type(exc).__name__},
        )
        fault.__cause__ = exc
        return fault


class NotificationFault(TaurusError):
    """A notification sink failed to deliver a status snapshot.

    Never rolls back or blocks the mutation that triggered the notification.

    Attributes:
        sink: Description of the sink that failed.
    """

    def __init__(
        self,
        message: str,
        *,
        sink: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.sink = sink

    @classmethod
    def from_exception(cls, exc: BaseException, *, sink: str) -> "NotificationFault":
        """Wrap a sink exception, keeping the original as ``__cause__``."""
        fault = cls(
            f"Notification sink {sink} failed: {exc}",
            sink=sink,
            details={"original_exception": type(exc).__name__},
        )
        fault.__cause__ = exc
        return fault
