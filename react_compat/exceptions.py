"""
Exceptions raised by react-compat-check.

Every error derives from :class:`ReactCompatError`. Besides the message,
each carries a ``details`` mapping (file path, URL, status code, package
name and so on) that the CLI logs at debug level, so callers never have to
parse message text.

The CLI maps any uncaught ``ReactCompatError`` to exit code 2.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, MutableMapping, Optional

_MAX_BODY_LENGTH = 200


def _details(**values: Any) -> Dict[str, Any]:
    """Keep only the metadata values that are set."""
    return {key: value for key, value in values.items() if value is not None}


def _truncate(text: str, max_length: int = _MAX_BODY_LENGTH) -> str:
    return text if len(text) <= max_length else text[:max_length] + "..."


class ReactCompatError(Exception):
    """Base class for all react-compat-check errors.

    Args:
        message: Human-readable description, shown to the user as-is.
        details: Structured metadata for diagnostics.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message: str = message
        self.details: MutableMapping[str, Any] = dict(details or {})

    def __str__(self) -> str:
        if not self.details:
            return self.message
        extra = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({extra})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(message={self.message!r}, details={dict(self.details)!r})"


class ConfigError(ReactCompatError):
    """``react-compat.toml`` is missing, unreadable or invalid."""

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        super().__init__(message, _details(path=config_path, option=option))
        self.config_path = config_path
        self.option = option


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class NetworkError(ReactCompatError):
    """The registry could not be reached or refused the request.

    Args:
        message: Error description.
        url: Requested URL.
        status_code: HTTP status, when a response arrived.
        response_body: Response text; only a prefix is kept in ``details``.
    """

    __slots__ = ("url", "status_code", "response_body")

    def __init__(
        self,
        message: str,
        *,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ) -> None:
        super().__init__(
            message,
            _details(
                url=url,
                status_code=status_code,
                response=_truncate(response_body) if response_body is not None else None,
            ),
        )
        self.url = url
        self.status_code = status_code
        self.response_body = response_body


class RegistryError(NetworkError):
    """The registry answered, but not with a usable package document."""

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)
        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class PackageNotFoundError(RegistryError):
    """The registry answered 404."""

    __slots__ = ()


# ---------------------------------------------------------------------------
# Project files and tools
# ---------------------------------------------------------------------------


class ManifestError(ReactCompatError):
    """``package.json`` cannot be used."""

    __slots__ = ("file_path",)

    def __init__(self, message: str, *, file_path: Optional[str] = None) -> None:
        super().__init__(message, _details(path=file_path))
        self.file_path = file_path


class ManifestNotFoundError(ManifestError):
    """No ``package.json`` in the project directory."""

    __slots__ = ()


class ManifestParseError(ManifestError):
    """``package.json`` is unreadable or not a JSON object."""

    __slots__ = ()


class FileOperationError(ReactCompatError):
    """A read or write on disk failed.

    Args:
        message: Error description.
        file_path: File involved.
        operation: ``"read"`` or ``"write"``.
        original_error: The underlying ``OSError``, if any.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            message,
            _details(
                path=file_path,
                operation=operation,
                original_error=str(original_error) if original_error else None,
            ),
        )
        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class InstallerError(ReactCompatError):
    """The package manager could not be started."""

    __slots__ = ("command", "exit_code")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
    ) -> None:
        super().__init__(message, _details(command=command, exit_code=exit_code))
        self.command = command
        self.exit_code = exit_code


class InvalidVersionInputError(ReactCompatError):
    """A requested React version matches no published release."""

    __slots__ = ("requested",)

    def __init__(self, message: str, *, requested: Optional[str] = None) -> None:
        super().__init__(message)
        self.requested = requested
