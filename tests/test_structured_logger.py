import json
import logging

from ops.structured_logger import JsonFormatter, scrub_secrets, setup_logging


def test_json_formatter_merges_extra():
    record = logging.LogRecord("teleotp.gateway", logging.INFO, __file__, 1, "gateway_request_result", None, None)
    record.extra = {"event": "gateway_request_result", "status_code": 200}
    out = json.loads(JsonFormatter().format(record))
    assert out["message"] == "gateway_request_result"
    assert out["severity"] == "INFO"
    assert out["status_code"] == 200


def test_setup_logging_quiets_httpx():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JsonFormatter)
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_json_formatter_scrubs_gateway_credentials():
    record = logging.LogRecord(
        "teleotp.gateway", logging.ERROR, __file__, 1,
        "gateway_request_exception", None, None,
    )
    record.extra = {
        "message": "POST https://gatewayapi.telegram.org/sendVerificationMessage?access_token=abc123 failed",
        "headers": "Authorization: Bearer s3cr3t.tok",
    }
    out = JsonFormatter().format(record)
    assert "abc123" not in out
    assert "s3cr3t" not in out
    parsed = json.loads(out)
    assert parsed["service"] == "teleotp"
    assert parsed["headers"] == "Authorization: Bearer ***"
    assert parsed["message"].endswith("access_token=*** failed")


def test_scrub_secrets_keeps_empty_access_token():
    assert scrub_secrets("https://x/checkSendAbility?access_token=") == "https://x/checkSendAbility?access_token="
