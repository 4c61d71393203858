"""Errors raised by the notification domain and application layers."""


class NotificationValidationError(ValueError):
    """A notification request is missing data or carries invalid values."""


class ChannelDeliveryError(RuntimeError):
    """A delivery channel could not hand the notification over."""

    def __init__(self, channel: str, reason: str) -> None:
        super().__init__(reason)
        self.channel = channel
        self.reason = reason


__all__ = ["NotificationValidationError", "ChannelDeliveryError"]
