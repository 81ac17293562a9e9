# SPDX-License-Identifier: MIT

import logging
from typing import Any, Optional, Union, cast

import httpx
import pendulum

from insights.model.entity_id import EntityId
from insights.model.entry import Entry
from insights.model.errors import RemoteError
from insights.model.metric_type import (
    GOAL_CADENCES,
    Goal,
    GoalCadence,
    MetricKind,
    MetricType,
)
from insights.model.result import Failure, Result, Success
from insights.model.weekday_mask import ALL_DAYS
from insights.remote.protocol import MetricTypeDefinition
from insights.time import date_from_str, date_to_iso_str

logger = logging.getLogger(__name__)

# server enum order when kinds/cadences arrive as numbers
_KIND_BY_NUMBER: tuple[MetricKind, ...] = ("Duration", "Number", "Boolean")

AUTH_COOKIE_NAME = "Insights.Auth"


def metric_type_from_json(data: dict[str, Any]) -> MetricType:
    kind = data["kind"]
    if isinstance(kind, int):
        kind = _KIND_BY_NUMBER[kind]
    cadence = data.get("goalCadence", 1)
    if isinstance(cadence, int):
        cadence = GOAL_CADENCES[cadence]
    goal_value = int(data.get("goalValue") or 0)
    goal: Optional[Goal] = None
    if goal_value > 0:
        goal = {
            "cadence": cast(GoalCadence, cadence),
            "target": goal_value,
            "days": int(data.get("goalDays", ALL_DAYS)),
        }
    return {
        "id": str(data["metricTypeId"]),
        "name": data["name"],
        "kind": cast(MetricKind, kind),
        "unit": data.get("unit"),
        "goal": goal,
    }


def metric_type_definition_to_json(definition: MetricTypeDefinition) -> dict[str, Any]:
    goal = definition["goal"]
    return {
        "name": definition["name"],
        "kind": definition["kind"],
        "unit": definition["unit"],
        "goalCadence": GOAL_CADENCES.index(goal["cadence"]) if goal else 1,
        "goalValue": goal["target"] if goal else 0,
        "goalDays": goal["days"] if goal else ALL_DAYS,
    }


def entry_from_json(data: dict[str, Any]) -> Entry:
    return {
        "id": str(data["metricId"]),
        "metric_type_id": str(data["metricTypeId"]),
        "metric_type_name": data.get("metricTypeName", ""),
        "date": date_from_str(data["date"]),
        "value": int(data["value"]),
    }


class HttpRemoteService:
    """Remote store reached over the Insights REST API."""

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 30.0,
        auth_cookie: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        cookies = {AUTH_COOKIE_NAME: auth_cookie} if auth_cookie else None
        self._client = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            cookies=cookies,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpRemoteService":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def __call(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Union[Any, None]:
        try:
            response = await self._client.request(method, path, json=body, params=params)
        except httpx.HTTPError as e:
            raise RemoteError(str(e) or type(e).__name__) from e

        if response.is_error:
            message = f"Error: {response.status_code}"
            try:
                error_data = response.json()
            except ValueError:
                error_data = None
            if isinstance(error_data, dict):
                message = error_data.get("message") or error_data.get("error") or message
            raise RemoteError(message)

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Invalid response from {path}") from e

    async def __request(
        self,
        method: str,
        path: str,
        body: Optional[dict[str, Any]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Result[Any]:
        try:
            return Success(await self.__call(method, path, body, params))
        except RemoteError as e:
            logger.warning("%s %s failed: %s", method, path, e.message)
            return Failure(e.message)

    async def create_entry(
        self, metric_type_id: EntityId, date: pendulum.Date, value: int
    ) -> Result[Entry]:
        result = await self.__request(
            "POST",
            "/api/metrics",
            {
                "metricTypeId": metric_type_id,
                "date": date_to_iso_str(date),
                "value": value,
            },
        )
        if isinstance(result, Failure):
            return result
        return Success(entry_from_json(result.value))

    async def update_entry(self, entry_id: EntityId, value: int) -> Result[Entry]:
        result = await self.__request("PUT", f"/api/metrics/{entry_id}", {"value": value})
        if isinstance(result, Failure):
            return result
        return Success(entry_from_json(result.value))

    async def delete_entry(self, entry_id: EntityId) -> Result[None]:
        result = await self.__request("DELETE", f"/api/metrics/{entry_id}")
        if isinstance(result, Failure):
            return result
        return Success(None)

    async def list_entries(
        self,
        from_date: Optional[pendulum.Date],
        to_date: Optional[pendulum.Date],
        metric_type_id: Optional[EntityId] = None,
    ) -> Result[list[Entry]]:
        params: dict[str, str] = {}
        if from_date is not None:
            params["from"] = date_to_iso_str(from_date)
        if to_date is not None:
            params["to"] = date_to_iso_str(to_date)
        if metric_type_id is not None:
            params["metricTypeId"] = metric_type_id
        result = await self.__request("GET", "/api/metrics", params=params)
        if isinstance(result, Failure):
            return result
        return Success([entry_from_json(item) for item in result.value or []])

    async def list_metric_types(self) -> Result[list[MetricType]]:
        result = await self.__request("GET", "/api/metric-types")
        if isinstance(result, Failure):
            return result
        return Success([metric_type_from_json(item) for item in result.value or []])

    async def create_metric_type(
        self, definition: MetricTypeDefinition
    ) -> Result[MetricType]:
        result = await self.__request(
            "POST", "/api/metric-types", metric_type_definition_to_json(definition)
        )
        if isinstance(result, Failure):
            return result
        return Success(metric_type_from_json(result.value))

    async def update_metric_type(
        self, id: EntityId, definition: MetricTypeDefinition
    ) -> Result[MetricType]:
        result = await self.__request(
            "PUT",
            f"/api/metric-types/{id}",
            metric_type_definition_to_json(definition),
        )
        if isinstance(result, Failure):
            return result
        return Success(metric_type_from_json(result.value))

    async def delete_metric_type(self, id: EntityId) -> Result[None]:
        result = await self.__request("DELETE", f"/api/metric-types/{id}")
        if isinstance(result, Failure):
            return result
        return Success(None)
