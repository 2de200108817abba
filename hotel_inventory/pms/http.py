"""
Vendor-neutral JSON/HTTP PMS adapter.

Expected endpoints relative to ``base_url``:
    GET    inventory                    -> {"result": [InventoryItem, ...]}
    POST   bookings                     -> {"id": ..., "confirmationNumber": ...}
    DELETE bookings/{pms_booking_id}    -> 2xx, 404 when unknown/already cancelled
    GET    rooms/{room_number}/status   -> {"status": ...}
    GET    health                       -> 2xx
"""

from __future__ import annotations

import time
from typing import Any, Dict, Optional
from urllib.parse import quote, urljoin

import requests
import structlog

from hotel_inventory.errors import PMSBookingNotFound, PMSError, PMSTransportError
from hotel_inventory.metrics import pms_http_requests
from hotel_inventory.models.rooms import RoomStatus
from hotel_inventory.pms.base import PMSAdapter
from hotel_inventory.pms.types import InventoryItem, PMSBookingData, PMSBookingResponse

logger = structlog.get_logger(__name__)

MAX_RETRIES = 2
RETRY_DELAY = 0.5

# Status codes that mean the PMS refused the booking on business grounds
REJECTION_STATUS_CODES = {400, 409, 422}


def should_retry(res: Optional[requests.Response], err: Optional[Exception]) -> bool:
    """
    Determine whether an idempotent request should be retried.

    Args:
        res: Response object if available.
        err: Exception raised by the request, if any.

    Returns:
        True on 429, 5xx, or a timeout; False otherwise.
    """
    if res is not None and res.status_code == 429:
        return True
    if isinstance(err, requests.Timeout):
        return True
    if res is not None and 500 <= res.status_code < 600:
        return True
    return False


class HttpPMSAdapter(PMSAdapter):
    name = "http"

    def __init__(
        self,
        base_url: str,
        api_key: Optional[str] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        if not base_url:
            raise ValueError("PMS_BASE_URL must be set when PMS_TYPE=http")
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout
        self.session = session or requests.Session()
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"
        self.session.headers.setdefault("Accept", "application/json")

    def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        retry: bool = False,
    ) -> requests.Response:
        """
        Send one request, counting it by status and mapping transport failures.

        Only idempotent calls pass ``retry=True``; a POST is attempted once and
        the reconciliation engine owns its retry policy.
        """
        url = urljoin(self.base_url, path)
        attempts = 0

        while True:
            res: Optional[requests.Response] = None
            err: Optional[Exception] = None
            try:
                res = self.session.request(method, url, json=json, timeout=self.timeout)
            except requests.RequestException as exc:
                err = exc

            pms_http_requests.labels(
                operation=operation,
                status_code=str(res.status_code) if res is not None else "error",
            ).inc()

            if err is None and res is not None and res.status_code < 500 and res.status_code != 429:
                return res

            attempts += 1
            if retry and attempts <= MAX_RETRIES and should_retry(res, err):
                logger.warning(
                    "pms_request_retry",
                    operation=operation,
                    attempt=attempts,
                    status_code=res.status_code if res is not None else None,
                    error=str(err) if err else None,
                )
                time.sleep(RETRY_DELAY * attempts)
                continue

            if res is None:
                raise PMSTransportError(f"PMS {operation} failed: {err}") from err
            raise PMSTransportError(f"PMS {operation} returned HTTP {res.status_code}")

    def sync_inventory(self) -> list[InventoryItem]:
        res = self._request("sync_inventory", "GET", "inventory", retry=True)
        if not res.ok:
            raise PMSError(f"PMS inventory request returned HTTP {res.status_code}")

        body = _json_object(res, "sync_inventory")
        result = body.get("result", [])
        if not isinstance(result, list):
            raise PMSError("PMS sync_inventory response has no result list")
        try:
            return [InventoryItem.model_validate(item) for item in result]
        except ValueError as e:
            raise PMSError(f"PMS sync_inventory returned an invalid item: {e}") from e

    def push_booking(self, booking: PMSBookingData) -> PMSBookingResponse:
        payload = booking.model_dump(mode="json", by_alias=True)
        res = self._request("push_booking", "POST", "bookings", json=payload)

        if res.status_code in REJECTION_STATUS_CODES:
            body = _json_or_empty(res)
            errors = body.get("errors") or [body.get("message") or f"HTTP {res.status_code}"]
            return PMSBookingResponse(success=False, errors=[str(e) for e in errors])

        if not res.ok:
            raise PMSTransportError(f"PMS push_booking returned HTTP {res.status_code}")

        body = _json_or_empty(res)
        if not body.get("id"):
            raise PMSError("PMS push_booking response is missing the booking id")
        return PMSBookingResponse(
            success=True,
            pms_booking_id=str(body["id"]),
            confirmation_number=body.get("confirmationNumber"),
        )

    def cancel_booking(self, pms_booking_id: str) -> None:
        res = self._request(
            "cancel_booking", "DELETE", f"bookings/{quote(pms_booking_id, safe='')}", retry=True
        )
        if res.status_code == 404:
            raise PMSBookingNotFound(pms_booking_id)
        if not res.ok:
            raise PMSError(f"PMS cancel_booking returned HTTP {res.status_code}")

    def get_room_status(self, room_number: str) -> RoomStatus:
        res = self._request(
            "get_room_status", "GET", f"rooms/{quote(room_number, safe='')}/status", retry=True
        )
        if not res.ok:
            raise PMSError(f"PMS get_room_status returned HTTP {res.status_code}")
        raw_status = _json_object(res, "get_room_status").get("status")
        try:
            return RoomStatus(str(raw_status).lower())
        except ValueError:
            raise PMSError(f"PMS get_room_status returned unknown status: {raw_status!r}") from None

    def is_connected(self) -> bool:
        try:
            res = self.session.get(urljoin(self.base_url, "health"), timeout=self.timeout)
            return res.ok
        except requests.RequestException as err:
            logger.warning("pms_health_check_failed", error=str(err))
            return False


def _json_or_empty(res: requests.Response) -> Dict[str, Any]:
    try:
        body = res.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


def _json_object(res: requests.Response, operation: str) -> Dict[str, Any]:
    """
    Decode a JSON object body.

    Raises:
        PMSError: The body is not JSON or not an object
    """
    try:
        body = res.json()
    except ValueError as e:
        raise PMSError(f"PMS {operation} returned invalid JSON") from e
    if not isinstance(body, dict):
        raise PMSError(f"PMS {operation} returned {type(body).__name__}, expected an object")
    return body
