"""Custom exception classes for deptree."""


class DeptreeException(Exception):
    """Base exception for all deptree errors.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code for API responses.
        kind: Short error kind recorded on failed dependency nodes.
    """

    kind: str = "Unknown"

    def __init__(self, message: str, status_code: int = 500) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code for API responses.
        """
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class InvalidRequestError(DeptreeException):
    """Raised when a tree request lacks a package name or a version."""

    kind = "InvalidRequest"

    def __init__(self, message: str) -> None:
        super().__init__(message=message, status_code=400)


class InvalidConstraintError(DeptreeException):
    """Raised when a version constraint cannot be parsed."""

    kind = "InvalidConstraint"

    def __init__(self, constraint: str, reason: str = "") -> None:
        """Initialize the exception.

        Args:
            constraint: The constraint that failed to parse.
            reason: Optional detail about the parse failure.
        """
        message = f"Invalid version constraint '{constraint}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, status_code=400)
        self.constraint = constraint


class NoCompatibleVersionError(DeptreeException):
    """Raised when no available version satisfies a constraint."""

    kind = "NoCompatibleVersion"

    def __init__(self, package_name: str, constraint: str) -> None:
        """Initialize the exception.

        Args:
            package_name: Name of the package.
            constraint: The constraint nothing satisfied.
        """
        super().__init__(
            message=f"No version of '{package_name}' satisfies '{constraint}'",
            status_code=404,
        )
        self.package_name = package_name
        self.constraint = constraint


class PackageNotFoundError(DeptreeException):
    """Raised when the registry does not know a package."""

    kind = "NotFound"

    def __init__(self, package_name: str) -> None:
        """Initialize the exception.

        Args:
            package_name: Name of the package that was not found.
        """
        super().__init__(
            message=f"Package '{package_name}' not found",
            status_code=404,
        )
        self.package_name = package_name


class RegistryUnavailableError(DeptreeException):
    """Raised when the registry cannot be reached or answers with an error."""

    kind = "RegistryUnavailable"

    def __init__(self, message: str, url: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message describing the failure.
            url: The registry URL that was requested, if known.
        """
        super().__init__(
            message=f"Registry unavailable: {message}",
            status_code=502,
        )
        self.url = url


class ManifestUnavailableError(DeptreeException):
    """Raised when the manifest of a concrete version cannot be fetched."""

    kind = "ManifestUnavailable"

    def __init__(self, package_name: str, version: str, reason: str = "") -> None:
        """Initialize the exception.

        Args:
            package_name: Name of the package.
            version: Concrete version whose manifest is missing.
            reason: Optional detail about the failure.
        """
        message = f"Manifest of '{package_name}@{version}' unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message=message, status_code=502)
        self.package_name = package_name
        self.version = version


class ResolutionTimeoutError(DeptreeException):
    """Raised when a whole resolution exceeds the configured time budget."""

    kind = "ResolutionTimeout"

    def __init__(self, package_name: str, constraint: str, timeout: float) -> None:
        super().__init__(
            message=(
                f"Resolution of '{package_name}@{constraint}' "
                f"did not finish within {timeout:g}s"
            ),
            status_code=504,
        )
        self.package_name = package_name
        self.constraint = constraint
        self.timeout = timeout


class SerializationError(DeptreeException):
    """Raised when a materialized tree cannot be serialized."""

    kind = "SerializationError"

    def __init__(self, message: str) -> None:
        super().__init__(
            message=f"Failed to serialize dependency tree: {message}",
            status_code=500,
        )
