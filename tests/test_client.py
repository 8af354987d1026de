"""
Tests for timetable.client

Test Coverage:
- Catalog parsing (classes, subjects, activities, academic year, term)
- Save success/failure interpretation
- Retry policy: transient failures retried, auth and 4xx failures not
- Request shape: headers, replaceAllEntries on update
"""
from unittest.mock import MagicMock

import pytest
import requests

from src.timetable.client import TimetableApiClient, failure_message, is_success
from src.timetable.config import ComposerConfig
from src.timetable.errors import (
    AuthenticationError,
    PermanentError,
    RateLimitError,
    TransientError,
)
from src.timetable.models import PersistEntry, TimetablePayload


API = "http://backend.test/api/v1"


def _response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    if body is None:
        resp.json.side_effect = ValueError("No JSON object could be decoded")
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture
def session():
    s = MagicMock()
    s.headers = {}
    return s


@pytest.fixture
def client(session):
    return TimetableApiClient(API, "tok-123", retry_wait_seconds=0, session=session)


@pytest.fixture
def payload():
    return TimetablePayload(
        name="Test School | Section: Primary",
        entries=[
            PersistEntry(
                day="MON",
                time_slot="8:00am-9:00am",
                subject_activity_id="math",
                class_id="p1",
                section="Primary",
            ),
            PersistEntry(
                day="MON",
                time_slot="9:00am-10:30am",
                subject_activity_id="math",
                class_id="p1",
                section="Primary",
            ),
        ],
    )


# =============================================================================
# Success flag
# =============================================================================


@pytest.mark.parametrize(
    "body,expected",
    [
        ({"success": True}, True),
        ({"success": False, "status": {"returnCode": "00"}}, False),
        ({"status": {"returnCode": "00"}}, True),
        ({"status": {"returnCode": "99"}}, False),
        ({}, False),
    ],
)
def test_is_success(body, expected):
    assert is_success(body) is expected


def test_failure_message_prefers_return_message():
    body = {"message": "generic", "status": {"returnMessage": "Duplicate timetable"}}
    assert failure_message(body, "default") == "Duplicate timetable"
    assert failure_message({"message": "generic"}, "default") == "generic"
    assert failure_message({}, "default") == "default"


# =============================================================================
# Session setup
# =============================================================================


def test_bearer_token_is_sent(session, client):
    assert session.headers["Authorization"] == "Bearer tok-123"
    assert session.headers["Content-Type"] == "application/json"


def test_no_authorization_header_without_token(session):
    TimetableApiClient(API, session=session)
    assert "Authorization" not in session.headers


def test_from_config_uses_versioned_base():
    config = ComposerConfig(backend_api_url="http://backend.test/", max_retries=5)
    client = TimetableApiClient.from_config(config)
    assert client.api_base == API


# =============================================================================
# Catalog
# =============================================================================


def test_fetch_classes_parses_camel_case(session, client):
    session.request.return_value = _response(
        body={
            "success": True,
            "classes": [
                {"id": "p1", "name": "P.1", "section": "Primary", "isActive": True},
                {"id": "s1", "name": "S.1", "section": "Secondary", "isActive": False},
            ],
        }
    )

    classes = client.fetch_classes()

    assert [c.id for c in classes] == ["p1", "s1"]
    assert classes[1].is_active is False
    session.request.assert_called_once_with(
        "GET", f"{API}/classes/filter", timeout=30.0, params={"limit": 100}
    )


def test_fetch_catalog_combines_lookups(session, client):
    session.request.side_effect = [
        _response(body={"classes": [{"id": "p1", "name": "P.1", "section": "Primary"}]}),
        _response(body={"subjects": [{"id": "math", "name": "Mathematics"}]}),
        _response(body={"activities": [{"id": "swim", "name": "Swimming"}]}),
    ]

    catalog = client.fetch_catalog()

    assert catalog.resolve("math").kind.value == "subject"
    assert catalog.resolve("swim").kind.value == "activity"
    assert catalog.sections() == ["Primary"]


def test_fetch_active_academic_year(session, client):
    session.request.return_value = _response(
        body={
            "success": True,
            "years": [
                {"id": "y1", "year": "2025", "isActive": False},
                {"id": "y2", "year": "2026", "isActive": True},
            ],
        }
    )

    assert client.fetch_active_academic_year().id == "y2"


def test_fetch_active_term_missing(session, client):
    session.request.return_value = _response(body={"success": True, "term": None})

    assert client.fetch_active_term() is None


def test_fetch_timetable_reads_nested_data(session, client):
    session.request.return_value = _response(
        body={
            "status": {"returnCode": "00"},
            "data": {
                "timetable": {
                    "id": "tt-1",
                    "name": "Primary",
                    "entries": [
                        {
                            "day": "MON",
                            "timeSlot": "8:00am-9:00am",
                            "subjectActivityId": "math",
                            "classId": "p1",
                        }
                    ],
                }
            },
        }
    )

    saved = client.fetch_timetable("tt-1")

    assert saved.id == "tt-1"
    assert saved.entries[0].subject_activity_id == "math"
    assert session.request.call_args.args[1] == f"{API}/timetable/filter/tt-1"


# =============================================================================
# Saving
# =============================================================================


def test_create_timetable_success(session, client, payload):
    session.request.return_value = _response(
        status=201, body={"success": True, "timetable": {"id": "tt-9"}}
    )

    result = client.create_timetable(payload)

    assert result.success
    assert result.entry_count == 2
    assert result.timetable_id == "tt-9"
    assert result.message == "Timetable saved successfully! Saved 2 entries."
    args, kwargs = session.request.call_args
    assert args == ("POST", f"{API}/timetable/create")
    assert kwargs["json"]["entries"][0]["subjectActivityId"] == "math"


def test_create_timetable_rejected_by_backend(session, client, payload):
    session.request.return_value = _response(
        body={"status": {"returnCode": "01", "returnMessage": "Timetable already exists"}}
    )

    result = client.create_timetable(payload)

    assert not result.success
    assert result.message == "Timetable already exists"


def test_update_timetable_replaces_all_entries(session, client, payload):
    session.request.return_value = _response(body={"success": True})

    result = client.update_timetable("tt-1", payload)

    assert result.success
    assert result.timetable_id == "tt-1"
    args, kwargs = session.request.call_args
    assert args == ("PUT", f"{API}/timetable/tt-1")
    assert kwargs["json"]["replaceAllEntries"] is True


# =============================================================================
# Error classification and retries
# =============================================================================


def test_server_error_is_retried(session, client):
    session.request.side_effect = [
        _response(status=502, body={}),
        _response(body={"success": True, "term": {"id": "t1", "name": "Term 1"}}),
    ]

    assert client.fetch_active_term().name == "Term 1"
    assert session.request.call_count == 2


def test_server_error_gives_up_after_max_retries(session, client):
    session.request.return_value = _response(status=500, body={})

    with pytest.raises(TransientError):
        client.fetch_active_term()

    assert session.request.call_count == 3


def test_timeout_is_retried(session, client):
    session.request.side_effect = [
        requests.Timeout("read timed out"),
        _response(body={"success": True, "term": {"id": "t1", "name": "Term 1"}}),
    ]

    assert client.fetch_active_term().id == "t1"


def test_connection_error_is_transient(session, client):
    session.request.side_effect = requests.ConnectionError("refused")

    with pytest.raises(TransientError):
        client.fetch_subjects()

    assert session.request.call_count == 3


def test_rate_limit_is_retried(session, client):
    session.request.return_value = _response(status=429, body={})

    with pytest.raises(RateLimitError):
        client.fetch_subjects()

    assert session.request.call_count == 3


@pytest.mark.parametrize("status", [401, 403])
def test_auth_failure_is_not_retried(session, client, status):
    session.request.return_value = _response(status=status, body={})

    with pytest.raises(AuthenticationError):
        client.fetch_classes()

    assert session.request.call_count == 1


def test_client_error_carries_backend_message(session, client, payload):
    session.request.return_value = _response(
        status=400, body={"status": {"returnMessage": "Invalid term id"}}
    )

    with pytest.raises(PermanentError, match="Invalid term id"):
        client.create_timetable(payload)

    assert session.request.call_count == 1


def test_non_json_body_is_permanent(session, client):
    session.request.return_value = _response(status=200, body=None)

    with pytest.raises(PermanentError):
        client.fetch_classes()
