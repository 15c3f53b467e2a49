"""Error taxonomy for the screening pipeline."""


class ScreeningError(Exception):
    """Base class for all screening errors."""


class MissingCredentialError(ScreeningError):
    """No API key is configured, or the provider rejected the configured one.

    Batch-fatal: the orchestrator stops processing when it sees this.
    """


class ProviderError(ScreeningError):
    """The model provider call failed or returned no usable payload."""


class SchemaViolationError(ProviderError):
    """The provider payload could not be parsed into the expected structure."""


class StorageQuotaExceededError(ScreeningError):
    """A storage write was rejected for lack of capacity."""
