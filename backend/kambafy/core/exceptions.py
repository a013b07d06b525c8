"""Domain exceptions raised by the webhook services."""


class KambafyWebhookError(Exception):
    """Base error for the webhook service layer."""


class RegistryUnavailableError(KambafyWebhookError):
    """Raised when webhook registrations cannot be read."""


class NotFoundError(KambafyWebhookError):
    """Raised when a requested entity is missing."""


class PaymentNotFoundError(NotFoundError):
    """Raised when an external payment (or its partner) does not exist."""


class ProductNotFoundError(NotFoundError):
    """Raised when a product does not exist."""


class WebhookNotConfiguredError(KambafyWebhookError):
    """Raised when no active webhook is configured for a target."""
