from __future__ import annotations

from enum import IntEnum


class ExitCode(IntEnum):
    OK = 0
    CONFIG_ERROR = 2
    AUTH_ERROR = 3
    AWS_ERROR = 4
    RUNTIME_ERROR = 5


class InventoryError(Exception):
    """Base error for the network inventory pipeline."""


class ConfigError(InventoryError):
    """Raised for configuration or argument issues."""


class AuthResolutionError(InventoryError):
    """Raised when AWS credentials or a session cannot be resolved."""


class AwsClientError(InventoryError):
    """Raised when an AWS API call fails."""


class DatasetError(InventoryError):
    """Raised when the dataset file cannot be read or written."""


class DatasetNotFoundError(DatasetError):
    """Raised when a report is requested for a dataset file that does not exist."""


class ExportError(InventoryError):
    """Raised when rendering a report fails."""


def as_exit_code(exc: BaseException) -> int:
    if isinstance(exc, (ConfigError, ValueError)):
        return int(ExitCode.CONFIG_ERROR)
    if isinstance(exc, AuthResolutionError):
        return int(ExitCode.AUTH_ERROR)
    if isinstance(exc, AwsClientError):
        return int(ExitCode.AWS_ERROR)
    if isinstance(exc, (DatasetError, ExportError, InventoryError)):
        return int(ExitCode.RUNTIME_ERROR)
    return 1


def _aws_error_types() -> tuple[type[BaseException], ...]:
    from botocore.exceptions import BotoCoreError, ClientError

    return (ClientError, BotoCoreError)


def is_aws_error(exc: BaseException) -> bool:
    """
    Return True if the exception looks like a botocore/boto3 error.
    """
    if isinstance(exc, _aws_error_types()):
        return True
    module = exc.__class__.__module__
    return module.startswith("botocore.") or module.startswith("boto3.")


def map_aws_error(exc: BaseException, context: str) -> AwsClientError | None:
    """
    Wrap AWS SDK errors with AwsClientError for consistent exit codes.
    """
    if not is_aws_error(exc):
        return None
    return AwsClientError(f"{context}: {exc}")
