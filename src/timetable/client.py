"""REST client for the school backend - catalog lookups and timetable persistence.

Wraps a requests.Session carrying the bearer token. Transport failures are
classified into the error hierarchy so tenacity retries only what may succeed
on a second attempt (timeouts, 5xx, 429); authentication and other 4xx
failures surface immediately.
"""

from typing import Any

import requests
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from src.timetable.catalog import Catalog
from src.timetable.config import ComposerConfig
from src.timetable.errors import (
    AuthenticationError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.timetable.logging import get_logger
from src.timetable.models import (
    AcademicYear,
    CatalogItem,
    ClassRef,
    SavedTimetable,
    SaveResult,
    Term,
    TimetablePayload,
)

log = get_logger(__name__)

CATALOG_LIMIT = 100
SUCCESS_RETURN_CODE = "00"


def is_success(body: dict[str, Any]) -> bool:
    """Backend success flag: ``success`` when present, else ``status.returnCode == "00"``."""
    if "success" in body:
        return bool(body["success"])
    status = body.get("status") or {}
    return status.get("returnCode") == SUCCESS_RETURN_CODE


def failure_message(body: dict[str, Any], default: str) -> str:
    status = body.get("status") or {}
    return status.get("returnMessage") or body.get("message") or default


class TimetableApiClient:
    """Synchronous client for the /api/v1 endpoints used by the composer."""

    def __init__(
        self,
        api_base: str,
        access_token: str = "",
        *,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_wait_seconds: float = 2.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_base: Versioned API root, e.g. http://localhost:5000/api/v1.
            access_token: Bearer token; omitted from headers when empty.
            timeout: Per-request timeout in seconds.
            max_retries: Total attempts for transient failures.
            retry_wait_seconds: Fixed wait between attempts.
            session: Pre-built session (tests inject a mock).
        """
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if access_token:
            self.session.headers.update({"Authorization": f"Bearer {access_token}"})

        self._retrying = Retrying(
            stop=stop_after_attempt(max_retries),
            wait=wait_fixed(retry_wait_seconds),
            retry=retry_if_exception_type(TransientError),
            reraise=True,
        )

    @classmethod
    def from_config(cls, config: ComposerConfig) -> "TimetableApiClient":
        return cls(
            config.api_base,
            config.access_token,
            timeout=config.request_timeout_seconds,
            max_retries=config.max_retries,
            retry_wait_seconds=config.retry_wait_seconds,
        )

    # -- transport -------------------------------------------------------

    def request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request with retries and return the decoded JSON body.

        Raises:
            TransientError: Timeouts, connection errors and 5xx after all retries.
            RateLimitError: 429 after all retries.
            AuthenticationError: 401/403.
            PermanentError: Other 4xx or a non-JSON body.
        """
        return self._retrying(self._send, method, path, **kwargs)

    def _send(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.api_base}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout as e:
            log.warning("api_request_timeout", method=method, url=url)
            raise TransientError(f"{method} {path} timed out") from e
        except requests.ConnectionError as e:
            log.warning("api_connection_error", method=method, url=url, error=str(e))
            raise TransientError(f"{method} {path} connection failed: {e}") from e

        status = resp.status_code
        if status == 429:
            log.warning("api_rate_limited", method=method, url=url)
            raise RateLimitError(f"{method} {path} rate limited")
        if status >= 500:
            log.warning("api_request_failed", method=method, url=url, status=status)
            raise TransientError(f"{method} {path} failed with {status}")
        if status in (401, 403):
            log.error("api_auth_failed", method=method, url=url, status=status)
            raise AuthenticationError(f"{method} {path} rejected credentials ({status})")

        try:
            body = resp.json()
        except ValueError as e:
            raise PermanentError(f"{method} {path} returned a non-JSON body") from e

        if status >= 400:
            message = failure_message(body, f"{method} {path} failed with {status}")
            log.error("api_request_failed", method=method, url=url, status=status, message=message)
            raise PermanentError(message)

        log.debug("api_request_ok", method=method, url=url, status=status)
        return body

    # -- catalog ---------------------------------------------------------

    def fetch_classes(self) -> list[ClassRef]:
        body = self.request("GET", "/classes/filter", params={"limit": CATALOG_LIMIT})
        return [ClassRef.model_validate(c) for c in body.get("classes", [])]

    def fetch_subjects(self) -> list[CatalogItem]:
        body = self.request("GET", "/subjects/filter", params={"limit": CATALOG_LIMIT})
        return [CatalogItem.model_validate(s) for s in body.get("subjects", [])]

    def fetch_activities(self) -> list[CatalogItem]:
        body = self.request("GET", "/activities/filter", params={"limit": CATALOG_LIMIT})
        return [CatalogItem.model_validate(a) for a in body.get("activities", [])]

    def fetch_catalog(self) -> Catalog:
        catalog = Catalog(
            classes=self.fetch_classes(),
            subjects=self.fetch_subjects(),
            activities=self.fetch_activities(),
        )
        log.info(
            "catalog_fetched",
            classes=len(catalog.classes),
            subjects=len(catalog.subjects),
            activities=len(catalog.activities),
        )
        return catalog

    def fetch_active_academic_year(self) -> AcademicYear | None:
        body = self.request("GET", "/academic-years/filter")
        if not is_success(body):
            return None
        years = [AcademicYear.model_validate(y) for y in body.get("years", [])]
        return next((y for y in years if y.is_active), None)

    def fetch_active_term(self) -> Term | None:
        body = self.request("GET", "/term/active")
        if not is_success(body) or not body.get("term"):
            return None
        return Term.model_validate(body["term"])

    # -- timetables ------------------------------------------------------

    def create_timetable(self, payload: TimetablePayload) -> SaveResult:
        """POST a new timetable. A backend-level rejection is a failed SaveResult."""
        body = self.request("POST", "/timetable/create", json=payload.to_wire())
        return self._save_result(body, payload, "Failed to save timetable.")

    def update_timetable(self, timetable_id: str, payload: TimetablePayload) -> SaveResult:
        """PUT a timetable, replacing all of its entries."""
        wire = payload.to_wire()
        wire["replaceAllEntries"] = True
        body = self.request("PUT", f"/timetable/{timetable_id}", json=wire)
        return self._save_result(body, payload, "Failed to update timetable.", timetable_id)

    def fetch_timetable(self, timetable_id: str) -> SavedTimetable | None:
        body = self.request("GET", f"/timetable/filter/{timetable_id}")
        data = body.get("timetable") or (body.get("data") or {}).get("timetable")
        if not is_success(body) or not data:
            return None
        return SavedTimetable.model_validate(data)

    def _save_result(
        self,
        body: dict[str, Any],
        payload: TimetablePayload,
        default_message: str,
        timetable_id: str | None = None,
    ) -> SaveResult:
        if is_success(body):
            saved = body.get("timetable") or (body.get("data") or {}).get("timetable") or {}
            result = SaveResult(
                success=True,
                message=f"Timetable saved successfully! Saved {len(payload.entries)} entries.",
                entry_count=len(payload.entries),
                timetable_id=saved.get("id", timetable_id),
            )
            log.info("timetable_saved", entries=result.entry_count, timetable_id=result.timetable_id)
            return result

        message = failure_message(body, default_message)
        log.warning("timetable_save_rejected", message=message)
        return SaveResult(success=False, message=message)
