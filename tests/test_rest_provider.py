"""Tests for the REST data provider client."""

from unittest.mock import Mock

import pytest
import requests

from eventsync.adapters.rest_provider import RestDataProvider, parse_metric_snapshot
from eventsync.domain.exceptions import DataProviderError


def _response(payload: object, status_code: int = 200) -> Mock:
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload
    return response


def _provider(session: Mock) -> RestDataProvider:
    return RestDataProvider("http://api.test/", timeout_seconds=3, session=session)


def test_fetch_notifications_parses_records_and_skips_invalid() -> None:
    session = Mock()
    session.get.return_value = _response(
        [
            {
                "_id": "n2",
                "title": "Join request",
                "message": "alice@example.com wants to join",
                "createdAt": "2024-01-01T10:00:00Z",
                "read": False,
                "project": "p1",
            },
            {"title": "missing id"},
            {"_id": "n1", "title": "Activity join"},
        ]
    )

    records = _provider(session).fetch_notifications(leaderEmail="lead@example.com", leaderId="")

    assert [r.notification_id for r in records] == ["n2", "n1"]
    assert records[0].project_id == "p1"
    session.get.assert_called_once_with(
        "http://api.test/api/notifications",
        params={"leaderEmail": "lead@example.com"},
        timeout=3,
    )


def test_fetch_projects_filters_non_objects() -> None:
    session = Mock()
    session.get.return_value = _response([{"_id": "p1"}, "junk"])

    assert _provider(session).fetch_projects() == [{"_id": "p1"}]


def test_fetch_metrics_builds_snapshot() -> None:
    session = Mock()
    session.get.return_value = _response(
        {
            "series": {
                "dates": ["2024-01-01", "2024-01-02"],
                "projectsDaily": [1, 2],
                "joinsDaily": [0, 5],
            },
            "projectCount": 4,
        }
    )

    snapshot = _provider(session).fetch_metrics("leader", days=14, leaderId="L1")

    assert snapshot.dates == ["2024-01-01", "2024-01-02"]
    assert snapshot.get_series("joinsDaily") == [0.0, 5.0]
    assert snapshot.totals == {"projectCount": 4.0}
    session.get.assert_called_once_with(
        "http://api.test/api/metrics/leader-stats",
        params={"leaderId": "L1", "days": "14"},
        timeout=3,
    )


def test_unknown_metrics_scope_rejected() -> None:
    with pytest.raises(ValueError):
        _provider(Mock()).fetch_metrics("participant", days=14)


def test_http_error_status_raises_provider_error() -> None:
    session = Mock()
    session.get.return_value = _response({"error": "boom"}, status_code=500)

    with pytest.raises(DataProviderError) as exc_info:
        _provider(session).fetch_projects()

    assert exc_info.value.status_code == 500


def test_network_error_raises_provider_error() -> None:
    session = Mock()
    session.get.side_effect = requests.ConnectionError("refused")

    with pytest.raises(DataProviderError):
        _provider(session).fetch_notifications()


def test_invalid_json_raises_provider_error() -> None:
    session = Mock()
    response = _response(None)
    response.json.side_effect = ValueError("no json")
    session.get.return_value = response

    with pytest.raises(DataProviderError):
        _provider(session).fetch_projects()


def test_unexpected_shape_raises_provider_error() -> None:
    session = Mock()
    session.get.return_value = _response({"not": "a list"})

    with pytest.raises(DataProviderError):
        _provider(session).fetch_notifications()


@pytest.mark.parametrize(
    "payload",
    [
        {"series": {"joinsDaily": [None]}},
        {"series": {"joinsDaily": ["many"]}},
        {"series": {"dates": 5}},
        {"series": ["2024-01-01"]},
    ],
)
def test_malformed_metrics_raise_provider_error(payload: dict) -> None:
    session = Mock()
    session.get.return_value = _response(payload)

    with pytest.raises(DataProviderError):
        _provider(session).fetch_metrics("admin", days=7)


def test_parse_metric_snapshot_without_series() -> None:
    snapshot = parse_metric_snapshot({"projectCount": 0})

    assert snapshot.dates == []
    assert snapshot.series == {}


def test_default_session_created_and_closed(mocker) -> None:
    session_cls = mocker.patch("eventsync.adapters.rest_provider.requests.Session")

    provider = RestDataProvider("http://api.test")
    provider.close()

    session_cls.assert_called_once_with()
    session_cls.return_value.close.assert_called_once_with()
