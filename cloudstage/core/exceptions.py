class CloudStageError(Exception):
    """Base exception for CloudStage application."""

    pass


class InvalidInput(CloudStageError):
    """Raised when a checkout request is malformed."""

    pass


class ConfigurationError(CloudStageError):
    """Raised when provider credentials or the public URL are missing or unsafe."""

    pass


class AuthenticationError(CloudStageError):
    """Raised when a webhook signature does not match."""

    pass


class ProviderError(CloudStageError):
    """Raised when a payment provider rejects an order."""

    def __init__(self, provider: str, message: str, status_code: int | None = None):
        self.provider = provider
        self.status_code = status_code
        super().__init__(message)


class StoreWriteError(CloudStageError):
    """Raised when a ticket or artist write fails after a confirmed payment."""

    pass


class WebhookPayloadError(CloudStageError):
    """Raised when a verified webhook body does not match the provider's envelope."""

    pass


class NotFoundError(CloudStageError):
    """Raised when an event or artist referenced by an admin operation is missing."""

    pass


class PushDeliveryError(CloudStageError):
    """Raised when the multicast request never reaches the push provider."""

    pass
