"""REST data provider client.

Wraps the backend endpoints the surfaces re-query after relevant events:
- GET /api/projects
- GET /api/notifications
- GET /api/metrics/{leader,admin}-stats
"""

from __future__ import annotations

from typing import Any, Final

import requests
from pydantic import ValidationError as PydanticValidationError

from eventsync.config.logging_config import get_logger
from eventsync.domain.exceptions import DataProviderError
from eventsync.domain.models import MetricSnapshot, NotificationRecord

logger = get_logger(__name__)

_METRIC_SCOPES: Final[dict[str, str]] = {
    "leader": "/api/metrics/leader-stats",
    "admin": "/api/metrics/admin-stats",
}


class RestDataProvider:
    """HTTP client for the project-management backend."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout_seconds
        self._session = session or requests.Session()

    def fetch_projects(self, **filters: str) -> list[dict[str, Any]]:
        data = self._get_json("/api/projects", _clean(filters))
        if not isinstance(data, list):
            raise DataProviderError("Unexpected projects payload: expected a list")
        return [item for item in data if isinstance(item, dict)]

    def fetch_notifications(self, **filters: str) -> list[NotificationRecord]:
        data = self._get_json("/api/notifications", _clean(filters))
        if not isinstance(data, list):
            raise DataProviderError("Unexpected notifications payload: expected a list")

        records: list[NotificationRecord] = []
        for item in data:
            try:
                records.append(NotificationRecord.model_validate(item))
            except PydanticValidationError:
                logger.warning(
                    "notification_record_skipped",
                    notification_id=item.get("_id") if isinstance(item, dict) else None,
                )
        return records

    def fetch_metrics(self, scope: str, *, days: int, **filters: str) -> MetricSnapshot:
        try:
            path = _METRIC_SCOPES[scope]
        except KeyError:
            raise ValueError(f"Unknown metrics scope: {scope}") from None

        params = _clean(filters)
        params["days"] = str(days)
        data = self._get_json(path, params)
        if not isinstance(data, dict):
            raise DataProviderError("Unexpected metrics payload: expected an object")
        try:
            return parse_metric_snapshot(data)
        except (TypeError, ValueError, AttributeError) as exc:
            logger.warning("data_provider_bad_metrics", scope=scope, error=str(exc))
            raise DataProviderError(f"Malformed metrics payload: {exc}") from exc

    def close(self) -> None:
        self._session.close()

    def _get_json(self, path: str, params: dict[str, str]) -> Any:
        url = f"{self._base_url}{path}"
        try:
            response = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as exc:
            logger.warning("data_provider_request_failed", url=url, error=str(exc))
            raise DataProviderError(f"Request to {path} failed: {exc}") from exc

        if not response.ok:
            logger.warning(
                "data_provider_bad_status", url=url, status_code=response.status_code
            )
            raise DataProviderError(
                f"{path} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise DataProviderError(f"{path} returned invalid JSON") from exc


def parse_metric_snapshot(data: dict[str, Any]) -> MetricSnapshot:
    """Parse a metrics response into a MetricSnapshot.

    Example:
        >>> parse_metric_snapshot(
        ...     {"series": {"dates": ["2024-01-01"], "joinsDaily": [3]}, "projectCount": 2}
        ... ).series
        {'joinsDaily': [3.0]}
    """
    raw_series = data.get("series") or {}
    dates = [str(d) for d in raw_series.get("dates", [])]
    series = {
        name: [float(v) for v in values]
        for name, values in raw_series.items()
        if name != "dates" and isinstance(values, list)
    }
    totals = {
        name: float(value)
        for name, value in data.items()
        if name != "series" and isinstance(value, int | float) and not isinstance(value, bool)
    }
    return MetricSnapshot(dates=dates, series=series, totals=totals)


def _clean(filters: dict[str, str]) -> dict[str, str]:
    return {key: value for key, value in filters.items() if value}
