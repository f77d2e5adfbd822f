"""Domain-specific exceptions"""

from typing import Optional


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ConfigurationMissing(DomainException):
    """A webhook endpoint required by the attempted operation is not configured"""

    def __init__(self, setting_name: str):
        self.setting_name = setting_name
        super().__init__(f"{setting_name.upper()} is not configured")


class NetworkFailure(DomainException):
    """Transport-level failure talking to the remote store"""

    pass


class RemoteRejected(DomainException):
    """Remote store answered with a non-2xx status"""

    def __init__(self, status_code: int, detail: Optional[str] = None):
        self.status_code = status_code
        self.detail = detail or ""
        message = f"Remote store returned {status_code}"
        if self.detail:
            message = f"{message}: {self.detail}"
        super().__init__(message)


class ValidationRejected(DomainException):
    """Local gate refused the operation before any network call"""

    pass


class RowBusy(ValidationRejected):
    """Another action is already in progress on the same record"""

    pass


class ParseFailure(DomainException):
    """Fetched payload did not match any tolerated response shape"""

    pass


class RecordNotFound(DomainException):
    """Record id is not present in the repository"""

    pass
