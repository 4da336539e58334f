from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx

from config.settings import settings
from messaging.errors import InvalidParameter, MissingEndpoint, MissingPhoneNumber, MissingRequestId
from ops.metrics import Timer
from storage.session_store import SessionStore, default_session_store
from utils.redact import dest_hint

log = logging.getLogger("teleotp.gateway")

EP_CHECK_SEND_ABILITY = "checkSendAbility"
EP_SEND_VERIFICATION = "sendVerificationMessage"
EP_CHECK_VERIFICATION_STATUS = "checkVerificationStatus"
EP_REVOKE_VERIFICATION = "revokeVerificationMessage"

SESSION_KEY_REQUEST_ID = "request_id"

CODE_LENGTH_MIN, CODE_LENGTH_MAX = 4, 8
TTL_MIN_SEC, TTL_MAX_SEC = 60, 86400

DEFAULT_PAYLOAD = "custom_payload"

# Literal match: the gateway reports "Revoked" capitalized.
_DELIVERY_STATUS_MESSAGES = {
    "sent": "OTP Sent",
    "read": "OTP Read",
    "Revoked": "OTP Revoked",
}
DELIVERY_STATUS_NOT_FOUND = "Delivery status not found or invalid response."


class VerificationOutcome(str, Enum):
    VALID = "valid"
    INVALID = "invalid"
    EXPIRED = "expired"
    ATTEMPTS_EXCEEDED = "attempts_exceeded"
    UNKNOWN = "unknown"


_VERIFICATION_STATUSES = {
    "code_valid": VerificationOutcome.VALID,
    "code_invalid": VerificationOutcome.INVALID,
    "expired": VerificationOutcome.EXPIRED,
    "code_max_attempts_exceeded": VerificationOutcome.ATTEMPTS_EXCEEDED,
}


@dataclass(frozen=True)
class VerificationResult:
    outcome: VerificationOutcome
    status: str

    @property
    def is_valid(self) -> bool:
        return self.outcome is VerificationOutcome.VALID

    @property
    def message(self) -> str:
        if self.outcome is VerificationOutcome.EXPIRED:
            return "Expired"
        if self.outcome is VerificationOutcome.ATTEMPTS_EXCEEDED:
            return "Number of attempts exceeded"
        if self.outcome is VerificationOutcome.UNKNOWN:
            return f"Unknown status: {self.status}"
        return self.outcome.value


def _decode(raw: Optional[str]) -> Optional[Dict[str, Any]]:
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        log.debug("gateway_response_undecodable", extra={"extra": {"event": "gateway_response_undecodable", "size": len(raw)}})
        return None
    return data if isinstance(data, dict) else None


def _dig(data: Any, *path: str) -> Any:
    for key in path:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


def _check_range(name: str, value: Any, minimum: int, maximum: int) -> None:
    # bool is an int subclass but never a valid length or ttl
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum or value > maximum:
        raise InvalidParameter(name, value, minimum, maximum)


class TelegramGatewayClient:
    """
    Client for the Telegram Gateway verification API.

    Holds the token, a phone number and the verification parameters that are
    forwarded verbatim to sendVerificationMessage. The request id of the last
    successful send is kept in a session store shared across client instances,
    so a later request (or a fresh client) can check or revoke the code.

    Only local misuse raises (see messaging.errors). Network failures and
    malformed gateway responses degrade to False / None / the raw body.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        session_store: Optional[SessionStore] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.base_url = base_url or settings.TELEGRAM_GATEWAY_BASE_URL
        self.token = settings.TELEGRAM_GATEWAY_TOKEN if token is None else token
        self.timeout = settings.TELEGRAM_GATEWAY_TIMEOUT_SEC if timeout is None else timeout
        self.session_store: SessionStore = session_store if session_store is not None else default_session_store
        self.phone_number: Optional[str] = None
        self.end_point: Optional[str] = None
        self.last_response: Optional[str] = None
        self._params: Dict[str, Any] = {}
        self.code_length = settings.TELEGRAM_GATEWAY_CODE_LENGTH

    # -------- Verification parameters --------
    @property
    def verification_params(self) -> Dict[str, Any]:
        return dict(self._params)

    @property
    def request_id(self) -> Optional[str]:
        cached = self.session_store.get(SESSION_KEY_REQUEST_ID)
        if cached is not None:
            return cached
        return self._params.get("request_id")

    @request_id.setter
    def request_id(self, value: Optional[str]) -> None:
        self._params["request_id"] = value

    @property
    def code_length(self) -> int:
        return self._params["code_length"]

    @code_length.setter
    def code_length(self, value: int) -> None:
        _check_range("code_length", value, CODE_LENGTH_MIN, CODE_LENGTH_MAX)
        self._params["code_length"] = value

    @property
    def code(self) -> Optional[str]:
        return self._params.get("code")

    @code.setter
    def code(self, value: Optional[str]) -> None:
        self._params["code"] = value

    @property
    def sender_username(self) -> Optional[str]:
        return self._params.get("sender_username")

    @sender_username.setter
    def sender_username(self, value: Optional[str]) -> None:
        self._params["sender_username"] = value

    @property
    def callback_url(self) -> Optional[str]:
        return self._params.get("callback_url")

    @callback_url.setter
    def callback_url(self, value: Optional[str]) -> None:
        self._params["callback_url"] = value

    @property
    def payload(self) -> Any:
        return self._params.get("payload")

    @payload.setter
    def payload(self, value: Any) -> None:
        self._params["payload"] = value

    def set_payload(self, payload: Any = DEFAULT_PAYLOAD) -> None:
        self.payload = payload

    @property
    def ttl(self) -> Optional[int]:
        return self._params.get("ttl")

    @ttl.setter
    def ttl(self, value: int) -> None:
        _check_range("ttl", value, TTL_MIN_SEC, TTL_MAX_SEC)
        self._params["ttl"] = value

    # -------- Gateway operations --------
    def _resolve_phone_number(self, phone_number: Optional[str]) -> str:
        if not phone_number and not self.phone_number:
            raise MissingPhoneNumber("Phone number is required")
        return phone_number or self.phone_number or ""

    def check_ability(self, phone_number: Optional[str] = None) -> bool:
        number = self._resolve_phone_number(phone_number)
        response = _decode(self._post_request({"phone_number": number}, EP_CHECK_SEND_ABILITY))
        return _dig(response, "result", "request_id") is not None

    def send_otp(self, phone_number: Optional[str] = None) -> Optional[str]:
        """
        Send a verification message and return the raw gateway response.

        On ok=true the returned request id goes to the session store and the
        normalized phone number back into the verification params.
        """
        number = self._resolve_phone_number(phone_number)
        data = dict(self._params)
        data["phone_number"] = number

        raw = self._post_request(data, EP_SEND_VERIFICATION)
        if raw is None:
            return None
        self.last_response = raw

        response = _decode(raw)
        if response is not None and response.get("ok") is True:
            result = response.get("result")
            if not isinstance(result, dict):
                result = {}
            self.session_store.set(SESSION_KEY_REQUEST_ID, result.get("request_id"))
            self._params["phone_number"] = result.get("phone_number")
            log.info(
                "gateway_otp_sent",
                extra={
                    "extra": {
                        "event": "gateway_otp_sent",
                        "dest": dest_hint(number),
                        "request_id": dest_hint(result.get("request_id")),
                    }
                },
            )
        return raw

    def validate_code(
        self, request_id: Optional[str] = None, code: Optional[str] = None
    ) -> Union[VerificationResult, str, None]:
        """
        Check a code against the gateway.

        Returns a VerificationResult when the gateway reports a verification
        status; otherwise the raw response body (None if the call never
        completed).
        """
        rid = request_id or self.request_id
        if not rid:
            raise MissingRequestId("Request ID is required")

        data: Dict[str, Any] = {"request_id": rid}
        if code is not None and code != "":
            data["code"] = code

        raw = self._post_request(data, EP_CHECK_VERIFICATION_STATUS)
        status = _dig(_decode(raw), "result", "verification_status", "status")
        if status is None:
            return raw

        status = str(status)
        outcome = _VERIFICATION_STATUSES.get(status, VerificationOutcome.UNKNOWN)
        log.info(
            "gateway_code_checked",
            extra={"extra": {"event": "gateway_code_checked", "request_id": dest_hint(rid), "outcome": outcome.value}},
        )
        return VerificationResult(outcome=outcome, status=status)

    def revoke_code(self) -> Any:
        rid = self.request_id
        if not rid:
            raise MissingRequestId("Request ID is required")

        response = _decode(self._post_request({"request_id": rid}, EP_REVOKE_VERIFICATION))
        return _dig(response, "result")

    # -------- Last response inspection --------
    def get_response(self) -> Optional[str]:
        return self.last_response

    def decoded_response(self) -> Optional[Dict[str, Any]]:
        return _decode(self.last_response)

    def request_cost(self) -> Optional[float]:
        return _dig(self.decoded_response(), "result", "request_cost")

    def remaining_balance(self) -> Optional[float]:
        return _dig(self.decoded_response(), "result", "remaining_balance")

    def otp_status(self) -> str:
        status = _dig(self.decoded_response(), "result", "delivery_status", "status")
        if status is None:
            return DELIVERY_STATUS_NOT_FOUND
        if isinstance(status, str) and status in _DELIVERY_STATUS_MESSAGES:
            return _DELIVERY_STATUS_MESSAGES[status]
        return f"Unknown Status: {status}"

    # -------- Transport --------
    def build_request(self, params: Dict[str, Any], end_point: Optional[str] = None) -> httpx.Request:
        target = end_point or self.end_point
        if not target:
            raise MissingEndpoint("No endpoint provided")

        url = self.base_url.rstrip("/") + "/" + target.lstrip("/")
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        else:
            url += ("&" if "?" in url else "?") + "access_token="

        body = {k: v for k, v in params.items() if v is not None}
        return httpx.Request("POST", url, headers=headers, data=body)

    def _post_request(self, params: Dict[str, Any], end_point: Optional[str] = None) -> Optional[str]:
        request = self.build_request(params, end_point)
        target = request.url.path.rsplit("/", 1)[-1]

        timer = Timer()
        log.info(
            "gateway_request_attempt",
            extra={"extra": {"event": "gateway_request_attempt", "endpoint": target, "authenticated": bool(self.token)}},
        )
        try:
            with httpx.Client(timeout=self.timeout) as http:
                r = http.send(request)
        except httpx.HTTPError as e:
            log.error(
                "gateway_request_exception",
                extra={
                    "extra": {
                        "event": "gateway_request_exception",
                        "endpoint": target,
                        "error_type": type(e).__name__,
                        "message": str(e),
                        "latency_ms": timer.ms(),
                    }
                },
                exc_info=True,
            )
            return None

        log.info(
            "gateway_request_result",
            extra={
                "extra": {
                    "event": "gateway_request_result",
                    "endpoint": target,
                    "status_code": r.status_code,
                    "latency_ms": timer.ms(),
                }
            },
        )
        return r.text
