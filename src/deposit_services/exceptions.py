"""Exceptions raised by deposit services."""


class DepositServicesError(Exception):
    """Base exception for all deposit service errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class AssemblyError(DepositServicesError):
    """Raised when a submission cannot be assembled into a package.

    Attributes:
        submission_id: Identifier of the submission being assembled
        file_name: Name of the offending content file, if any
    """

    def __init__(
        self,
        message: str,
        submission_id: str | None = None,
        file_name: str | None = None,
    ):
        self.submission_id = submission_id
        self.file_name = file_name
        super().__init__(message)


class StatusParseError(DepositServicesError):
    """Raised when a deposit status document cannot be fetched or decoded.

    Attributes:
        document_id: Location or name of the status document
        cause: The underlying fault, when there is one
    """

    def __init__(self, document_id: str, cause: BaseException | None = None):
        self.document_id = document_id
        self.cause = cause
        if cause is not None:
            message = f"Unable to parse status document {document_id}: {cause}"
        else:
            message = f"Unable to parse status document {document_id}"
        super().__init__(message)


class ConfigurationError(DepositServicesError):
    """Raised when required configuration is missing or invalid.

    Attributes:
        repository: Name of the repository the configuration belongs to
    """

    def __init__(self, message: str, repository: str | None = None):
        self.repository = repository
        super().__init__(message)
