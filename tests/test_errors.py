import pytest

from messaging.errors import GatewayClientError, InvalidParameter, MissingEndpoint, MissingPhoneNumber, MissingRequestId


@pytest.mark.parametrize("cls", [MissingPhoneNumber, MissingRequestId, MissingEndpoint])
def test_missing_errors_are_value_errors(cls):
    err = cls()
    assert isinstance(err, GatewayClientError)
    assert isinstance(err, ValueError)
    assert str(err) == cls.code


def test_invalid_parameter_carries_bounds():
    err = InvalidParameter("ttl", 10, 60, 86400)
    assert (err.name, err.value, err.minimum, err.maximum) == ("ttl", 10, 60, 86400)
    assert "ttl must be between 60 and 86400" in str(err)
