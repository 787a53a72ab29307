"""Client for the Airflow stable REST API (``/api/v1``).

One coroutine per REST endpoint returns the decoded JSON payload. The two
aggregate operations, :meth:`AirflowClient.get_dag_run_logs` and
:meth:`AirflowClient.tail_dag_run`, fan out to several endpoints and return
display text; a failing log fetch inside them is rendered inline instead of
aborting the whole response.
"""

import base64
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx

from config.types import AirflowConnectionConfig
from mcp_tools.errors import UpstreamError
from plugins.airflow import formatters

logger = logging.getLogger(__name__)

TAIL_STATES = ("running", "failed", "success", "upstream_failed", "skipped")
TAIL_LOG_STATES = ("running", "failed")
TAIL_TASK_COUNT = 5


def _segment(value: str) -> str:
    """Quote a value for use as a single URL path segment."""
    return quote(str(value), safe="")


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class AirflowClient:
    """Thin async client for the Airflow REST API.

    Example:
        client = AirflowClient(AirflowConnectionConfig(token="..."))
        dags = await client.list_dags(limit=10)
    """

    def __init__(
        self,
        config: AirflowConnectionConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            config: Validated connection settings
            transport: Optional httpx transport, used by tests to fake the API
        """
        self.config = config
        self._transport = transport

    def get_auth_headers(self) -> Dict[str, str]:
        if self.config.token:
            return {"Authorization": f"Bearer {self.config.token}"}
        credentials = base64.b64encode(
            f"{self.config.username}:{self.config.password}".encode("utf-8")
        ).decode("ascii")
        return {"Authorization": f"Basic {credentials}"}

    def build_url(self, endpoint: str) -> str:
        return f"{self.config.api_root}{endpoint}"

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Optional[Dict[str, Any]] = None,
        query_params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Send an authenticated request and return the decoded JSON body.

        Query parameters whose value is None are left out of the URL.

        Raises:
            UpstreamError: On a non-2xx status, an unreachable server, or a
                response body that isn't a JSON object
        """
        url = self.build_url(endpoint)
        headers = {"Content-Type": "application/json", **self.get_auth_headers()}
        params = {
            key: _query_value(value)
            for key, value in (query_params or {}).items()
            if value is not None
        }

        request_kwargs: Dict[str, Any] = {"headers": headers}
        if params:
            request_kwargs["params"] = params
        if body is not None:
            request_kwargs["json"] = body

        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.config.request_timeout
            ) as client:
                response = await client.request(method.upper(), url, **request_kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method.upper()} {url} failed: {e!r}")
            raise UpstreamError(0, str(e) or type(e).__name__, "Request failed") from e

        logger.debug(f"{method.upper()} {url} -> {response.status_code}")

        if not response.is_success:
            raise UpstreamError(response.status_code, response.text, response.reason_phrase)

        if not response.content:
            return {}
        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamError(
                response.status_code,
                f"Failed to parse response: {e}",
                response.reason_phrase,
            ) from e

        if not isinstance(data, dict):
            raise UpstreamError(
                response.status_code, "Unexpected response payload", response.reason_phrase
            )
        return data

    async def list_dags(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        order_by: Optional[str] = None,
    ) -> Dict[str, Any]:
        return await self.request(
            "/dags",
            query_params={"limit": limit, "offset": offset, "order_by": order_by},
        )

    async def get_dag(self, dag_id: str) -> Dict[str, Any]:
        return await self.request(f"/dags/{_segment(dag_id)}")

    async def trigger_dag(
        self,
        dag_id: str,
        dag_run_id: Optional[str] = None,
        conf: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {}
        if dag_run_id:
            payload["dag_run_id"] = dag_run_id
        if conf is not None:
            payload["conf"] = conf
        return await self.request(
            f"/dags/{_segment(dag_id)}/dagRuns", method="POST", body=payload
        )

    async def list_dag_runs(
        self,
        dag_id: str,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self.request(
            f"/dags/{_segment(dag_id)}/dagRuns",
            query_params={"limit": limit, "offset": offset},
        )

    async def get_dag_run(self, dag_id: str, dag_run_id: str) -> Dict[str, Any]:
        return await self.request(f"/dags/{_segment(dag_id)}/dagRuns/{_segment(dag_run_id)}")

    async def list_task_instances(self, dag_id: str, dag_run_id: str) -> Dict[str, Any]:
        return await self.request(
            f"/dags/{_segment(dag_id)}/dagRuns/{_segment(dag_run_id)}/taskInstances"
        )

    async def get_task_instance(
        self, dag_id: str, dag_run_id: str, task_id: str
    ) -> Dict[str, Any]:
        return await self.request(
            f"/dags/{_segment(dag_id)}/dagRuns/{_segment(dag_run_id)}"
            f"/taskInstances/{_segment(task_id)}"
        )

    async def set_dag_paused(self, dag_id: str, is_paused: bool) -> Dict[str, Any]:
        # PATCH with an update mask; repeating it is harmless
        return await self.request(
            f"/dags/{_segment(dag_id)}",
            method="PATCH",
            body={"is_paused": is_paused},
            query_params={"update_mask": "is_paused"},
        )

    async def pause_dag(self, dag_id: str) -> Dict[str, Any]:
        return await self.set_dag_paused(dag_id, True)

    async def unpause_dag(self, dag_id: str) -> Dict[str, Any]:
        return await self.set_dag_paused(dag_id, False)

    async def get_task_log(
        self,
        dag_id: str,
        dag_run_id: str,
        task_id: str,
        try_number: int = 1,
        full_content: bool = True,
    ) -> str:
        """Fetch one attempt's log and return its unescaped content."""
        data = await self.request(
            f"/dags/{_segment(dag_id)}/dagRuns/{_segment(dag_run_id)}"
            f"/taskInstances/{_segment(task_id)}/logs/{try_number}",
            query_params={"full_content": full_content},
        )
        return formatters.unescape_log_content(data.get("content"))

    async def get_dag_run_logs(self, dag_id: str, dag_run_id: str, limit: int = 10) -> str:
        """Collect the logs of the first ``limit`` task instances of a run."""
        task_instances: List[Dict[str, Any]] = (
            await self.list_task_instances(dag_id, dag_run_id)
        ).get("task_instances") or []

        output = [f"**DAG Run Logs: {dag_id}/{dag_run_id}**\n"]

        for task in task_instances[:limit]:
            task_id = task.get("task_id")
            try_number = task.get("try_number") or 1
            try:
                content = await self.get_task_log(dag_id, dag_run_id, task_id, try_number)
            except UpstreamError as e:
                logger.warning(f"Could not fetch logs for {dag_id}/{dag_run_id}/{task_id}: {e}")
                output.append(f"\n### Task: {task_id} - Error fetching logs\n")
                output.append(f"Error: {e}\n")
                continue

            output.append(
                f"\n### Task: {task_id} ({formatters.show(task.get('state'))})"
                f" - Try {formatters.show(task.get('try_number'))}\n"
            )
            if content.strip():
                output.append(f"```\n{formatters.truncate_log(content)}\n```\n")
            else:
                output.append("*No logs available*\n")

        if len(task_instances) > limit:
            output.append(
                f"\n*Showing {limit} of {len(task_instances)} tasks. "
                "Use get_task_logs for specific task logs.*"
            )

        return "".join(output)

    async def tail_dag_run(self, dag_id: str, dag_run_id: str, max_lines: int = 50) -> str:
        """Summarize a run's recent task activity with the tail of active logs."""
        dag_run = await self.get_dag_run(dag_id, dag_run_id)
        task_instances: List[Dict[str, Any]] = (
            await self.list_task_instances(dag_id, dag_run_id)
        ).get("task_instances") or []

        output = [
            f"**Tailing DAG Run: {dag_id}/{dag_run_id}**\n",
            f"Status: {formatters.show(dag_run.get('state'))}\n",
            f"Start: {dag_run.get('start_date') or formatters.NOT_STARTED}\n",
            f"End: {dag_run.get('end_date') or formatters.RUNNING}\n\n",
            "**Recent Task Activity:**\n",
        ]

        for task in recent_tasks(task_instances):
            task_id = task.get("task_id")
            state = task.get("state")
            output.append(f"\n### {task_id} ({state})")
            if task.get("start_date"):
                output.append(f" - Started: {task['start_date']}")
            if task.get("end_date"):
                output.append(f" - Ended: {task['end_date']}")
            output.append("\n")

            if state not in TAIL_LOG_STATES:
                continue

            try:
                content = await self.get_task_log(
                    dag_id, dag_run_id, task_id, task.get("try_number") or 1
                )
            except UpstreamError as e:
                logger.warning(f"Could not fetch logs for {dag_id}/{dag_run_id}/{task_id}: {e}")
                output.append(f"*Error fetching logs: {e}*\n")
                continue

            if content.strip():
                lines = formatters.tail_lines(content, max_lines)
                output.append(f"**Recent logs (last {len(lines)} lines):**\n")
                output.append("```\n" + "\n".join(lines) + "\n```\n")
            else:
                output.append("*No logs available yet*\n")

        output.append("\n**Task Summary:**\n")
        for state, count in count_states(task_instances).items():
            output.append(f"- {state}: {count}\n")

        output.append("\n*Use get_task_logs for complete logs of specific tasks*")
        return "".join(output)


def recent_tasks(
    task_instances: List[Dict[str, Any]], count: int = TAIL_TASK_COUNT
) -> List[Dict[str, Any]]:
    """The ``count`` most recently started tasks in a tail-worthy state.

    Tasks without a readable start date sort after all started tasks.
    """
    candidates = [task for task in task_instances if task.get("state") in TAIL_STATES]

    def sort_key(task: Dict[str, Any]):
        started = formatters.parse_timestamp(task.get("start_date"))
        if started is None:
            return (1, 0.0)
        try:
            return (0, -started.timestamp())
        except (OverflowError, OSError, ValueError):
            return (1, 0.0)

    return sorted(candidates, key=sort_key)[:count]


def count_states(task_instances: List[Dict[str, Any]]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for task in task_instances:
        state = formatters.show(task.get("state"))
        counts[state] = counts.get(state, 0) + 1
    return counts
