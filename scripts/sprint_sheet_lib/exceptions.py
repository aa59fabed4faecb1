"""
Exception types for Jira Sprint Sheet

Every error raised by the library derives from SprintSheetError so the CLI
can report it and exit non-zero.
"""

from typing import Optional


class SprintSheetError(Exception):
    """Base exception for all sprint sheet errors"""

    def __init__(
        self,
        message: str,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        """
        Args:
            message: Human-readable error message
            remediation: Suggested fix for the user
            details: Technical details for debugging
        """
        super().__init__(message)
        self.message = message
        self.remediation = remediation
        self.details = details

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"Details: {self.details}")
        if self.remediation:
            parts.append(f"To fix: {self.remediation}")
        return "\n".join(parts)


class ConfigurationError(SprintSheetError):
    """Missing or invalid configuration value"""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.config_key = config_key
        if not remediation and config_key:
            remediation = f"Set {config_key} in the environment or in your .env file"
        super().__init__(message, remediation, details)


class UpstreamError(SprintSheetError):
    """Jira call failed (network, HTTP error, unreadable response)"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        remediation: Optional[str] = None,
        details: Optional[str] = None
    ):
        self.status_code = status_code
        super().__init__(message, remediation, details)


class AuthenticationError(UpstreamError):
    """Jira rejected the credentials"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[str] = None):
        super().__init__(
            message,
            status_code=status_code,
            remediation="Check JIRA_EMAIL and JIRA_API_KEY (or run with --config)",
            details=details
        )


class RateLimitError(UpstreamError):
    """Jira answered 429 Too Many Requests"""
    pass


class NotFoundError(SprintSheetError):
    """Requested Jira resource does not exist"""
    pass


class ReportWriteError(SprintSheetError):
    """Spreadsheet could not be written to disk"""
    pass
