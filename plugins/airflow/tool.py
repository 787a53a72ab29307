"""MCP tools backed by the Airflow REST API.

Each tool validates its arguments, calls one :class:`AirflowClient`
operation and returns display text.
"""

import logging
from abc import abstractmethod
from typing import Any, Dict, Union

from config.types import AirflowConnectionConfig
from mcp_tools.interfaces import ToolInterface
from mcp_tools.plugin import ToolRegistry, register_tool, registered_tool_classes
from plugins.airflow import formatters
from plugins.airflow.client import AirflowClient
from plugins.airflow.types import (
    DagInput,
    DagRunInput,
    DagRunLogsInput,
    ListDagRunsInput,
    ListDagsInput,
    PauseDagInput,
    TailDagRunInput,
    TaskInstanceInput,
    TaskLogsInput,
    TriggerDagInput,
    UnpauseDagInput,
)

logger = logging.getLogger(__name__)


class AirflowTool(ToolInterface):
    """Base class for tools that call the Airflow API."""

    tool_name: str = ""
    tool_description: str = ""

    def __init__(self, client: AirflowClient):
        self.client = client

    @property
    def name(self) -> str:
        return self.tool_name

    @property
    def description(self) -> str:
        return self.tool_description

    async def execute_tool(self, arguments: Dict[str, Any]) -> str:
        params = self.parse_arguments(arguments)
        return await self.run(params)

    @abstractmethod
    async def run(self, params: Any) -> str:
        """Call the Airflow client with validated parameters and format the result."""
        pass


@register_tool
class ListDagsTool(AirflowTool):
    tool_name = "airflow_list_dags"
    tool_description = "List all DAGs in Airflow"
    input_model = ListDagsInput

    async def run(self, params: ListDagsInput) -> str:
        data = await self.client.list_dags(
            limit=params.limit, offset=params.offset, order_by=params.order_by
        )
        return formatters.format_dag_list(data)


@register_tool
class GetDagTool(AirflowTool):
    tool_name = "airflow_get_dag"
    tool_description = "Get details of a specific DAG"
    input_model = DagInput

    async def run(self, params: DagInput) -> str:
        return formatters.format_dag(await self.client.get_dag(params.dag_id))


@register_tool
class TriggerDagTool(AirflowTool):
    tool_name = "airflow_trigger_dag"
    tool_description = "Trigger a DAG run"
    input_model = TriggerDagInput

    async def run(self, params: TriggerDagInput) -> str:
        data = await self.client.trigger_dag(params.dag_id, params.dag_run_id, params.conf)
        return formatters.format_triggered_run(data)


@register_tool
class ListDagRunsTool(AirflowTool):
    tool_name = "airflow_list_dag_runs"
    tool_description = "List DAG runs for a specific DAG"
    input_model = ListDagRunsInput

    async def run(self, params: ListDagRunsInput) -> str:
        data = await self.client.list_dag_runs(
            params.dag_id, limit=params.limit, offset=params.offset
        )
        return formatters.format_dag_runs(params.dag_id, data)


@register_tool
class GetDagRunTool(AirflowTool):
    tool_name = "airflow_get_dag_run"
    tool_description = "Get details of a specific DAG run"
    input_model = DagRunInput

    async def run(self, params: DagRunInput) -> str:
        data = await self.client.get_dag_run(params.dag_id, params.dag_run_id)
        return formatters.format_dag_run(data)


@register_tool
class ListTaskInstancesTool(AirflowTool):
    tool_name = "airflow_list_task_instances"
    tool_description = "List task instances for a DAG run"
    input_model = DagRunInput

    async def run(self, params: DagRunInput) -> str:
        data = await self.client.list_task_instances(params.dag_id, params.dag_run_id)
        return formatters.format_task_instances(params.dag_id, params.dag_run_id, data)


@register_tool
class GetTaskInstanceTool(AirflowTool):
    tool_name = "airflow_get_task_instance"
    tool_description = "Get details of a specific task instance"
    input_model = TaskInstanceInput

    async def run(self, params: TaskInstanceInput) -> str:
        data = await self.client.get_task_instance(
            params.dag_id, params.dag_run_id, params.task_id
        )
        return formatters.format_task_instance(data)


@register_tool
class PauseDagTool(AirflowTool):
    tool_name = "airflow_pause_dag"
    tool_description = "Pause a DAG"
    input_model = PauseDagInput

    async def run(self, params: PauseDagInput) -> str:
        await self.client.pause_dag(params.dag_id)
        return formatters.format_pause_state(params.dag_id, True)


@register_tool
class UnpauseDagTool(AirflowTool):
    tool_name = "airflow_unpause_dag"
    tool_description = "Unpause a DAG"
    input_model = UnpauseDagInput

    async def run(self, params: UnpauseDagInput) -> str:
        await self.client.unpause_dag(params.dag_id)
        return formatters.format_pause_state(params.dag_id, False)


@register_tool
class GetTaskLogsTool(AirflowTool):
    tool_name = "airflow_get_task_logs"
    tool_description = "Get logs for a specific task instance"
    input_model = TaskLogsInput

    async def run(self, params: TaskLogsInput) -> str:
        content = await self.client.get_task_log(
            params.dag_id,
            params.dag_run_id,
            params.task_id,
            try_number=params.task_try_number,
            full_content=params.full_content,
        )
        return formatters.format_task_log(
            params.dag_id, params.dag_run_id, params.task_id, params.task_try_number, content
        )


@register_tool
class GetDagRunLogsTool(AirflowTool):
    tool_name = "airflow_get_dag_run_logs"
    tool_description = "Get logs for all tasks in a DAG run"
    input_model = DagRunLogsInput

    async def run(self, params: DagRunLogsInput) -> str:
        return await self.client.get_dag_run_logs(
            params.dag_id, params.dag_run_id, limit=params.limit
        )


@register_tool
class TailDagRunTool(AirflowTool):
    tool_name = "airflow_tail_dag_run"
    tool_description = "Tail/monitor a DAG run showing recent activity and logs"
    input_model = TailDagRunInput

    async def run(self, params: TailDagRunInput) -> str:
        return await self.client.tail_dag_run(
            params.dag_id, params.dag_run_id, max_lines=params.max_lines
        )


def build_registry(client: Union[AirflowClient, AirflowConnectionConfig]) -> ToolRegistry:
    """Create the frozen tool registry shared by every transport.

    Args:
        client: The Airflow client, or a connection config to build one from
    """
    if isinstance(client, AirflowConnectionConfig):
        client = AirflowClient(client)

    registry = ToolRegistry()
    for tool_class in registered_tool_classes():
        if issubclass(tool_class, AirflowTool):
            registry.register(tool_class(client))

    logger.info(f"Registered {len(registry)} tools: {', '.join(registry.names())}")
    return registry.freeze()
