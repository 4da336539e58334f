from __future__ import annotations

from typing import Any


class GatewayClientError(ValueError):
    """Caller-input or configuration error; never raised for remote failures."""

    code = "gateway_client_error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.code)


class MissingPhoneNumber(GatewayClientError):
    code = "phone_number_required"


class MissingRequestId(GatewayClientError):
    code = "request_id_required"


class MissingEndpoint(GatewayClientError):
    code = "endpoint_required"


class InvalidParameter(GatewayClientError):
    code = "invalid_parameter"

    def __init__(self, name: str, value: Any, minimum: int, maximum: int):
        self.name = name
        self.value = value
        self.minimum = minimum
        self.maximum = maximum
        super().__init__(f"{name} must be between {minimum} and {maximum}, got {value!r}")
