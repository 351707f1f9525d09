"""Error types raised by the test listing, partitioning and filtering core."""


class ShardRunnerError(Exception):
    """Base class for all shard runner errors."""


class ConfigError(ShardRunnerError, ValueError):
    """Raised when user-supplied run configuration is invalid.

    Invalid partition specs land here. These are fatal: they invalidate every
    subsequent classification.
    """

    def __init__(self, message: str, expected_format: str | None = None) -> None:
        self.expected_format = expected_format
        if expected_format is not None:
            message = f"{message} (expected format: {expected_format})"
        super().__init__(message)


class DiscoveryError(ShardRunnerError):
    """Raised when a binary cannot be listed. Scoped to that binary."""

    def __init__(self, binary_id: str, message: str) -> None:
        self.binary_id = binary_id
        super().__init__(f"{binary_id}: {message}")


class NameCollisionError(ShardRunnerError):
    """Raised when one binary reports the same test name more than once."""

    def __init__(self, binary_id: str, test_name: str) -> None:
        self.binary_id = binary_id
        self.test_name = test_name
        super().__init__(f"{binary_id}: test '{test_name}' reported more than once")
