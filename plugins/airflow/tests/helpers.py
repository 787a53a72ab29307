"""
Test helpers for Airflow plugin tests.
"""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from config.types import AirflowConnectionConfig
from plugins.airflow.client import AirflowClient

API_ROOT = "/api/v1"

Responder = Callable[[httpx.Request], httpx.Response]


class FakeAirflow:
    """In-memory stand-in for the Airflow REST API.

    Routes are keyed by HTTP method and the path below ``/api/v1``; every
    request is recorded so tests can inspect headers, query strings and bodies.
    Unknown routes answer 404 like Airflow does.

    Usage:
        fake = FakeAirflow()
        fake.add("GET", "/dags", json={"dags": [], "total_entries": 0})
        client = fake.client(config)
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Responder] = {}
        self.requests: List[httpx.Request] = []

    def add(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        text: Optional[str] = None,
    ) -> "FakeAirflow":
        payload = json if json is not None else {}

        def respond(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status_code, text=text)
            return httpx.Response(status_code, json=payload)

        return self.add_handler(method, path, respond)

    def add_handler(
        self, method: str, path: str, handler: Callable[[httpx.Request], httpx.Response]
    ) -> "FakeAirflow":
        self.routes[(method.upper(), API_ROOT + path)] = handler
        return self

    def add_log(self, dag_id: str, run_id: str, task_id: str, try_number: int, content: str):
        path = f"/dags/{dag_id}/dagRuns/{run_id}/taskInstances/{task_id}/logs/{try_number}"
        return self.add("GET", path, json={"content": content, "continuation_token": None})

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(404, json={"detail": "Not found", "status": 404})
        return responder(request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def client(self, config: AirflowConnectionConfig) -> AirflowClient:
        return AirflowClient(config, transport=self.transport)

    @property
    def last_request(self) -> httpx.Request:
        assert self.requests, "no request was sent"
        return self.requests[-1]

    def paths(self) -> List[str]:
        return [request.url.path[len(API_ROOT):] for request in self.requests]


def request_json(request: httpx.Request) -> Any:
    return json.loads(request.content) if request.content else None


def task_instance(
    task_id: str,
    state: Optional[str] = "success",
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    try_number: int = 1,
    **extra: Any,
) -> Dict[str, Any]:
    return {
        "task_id": task_id,
        "state": state,
        "start_date": start_date,
        "end_date": end_date,
        "try_number": try_number,
        **extra,
    }
