"""Input models for the Airflow tools.

The JSON schema each tool advertises is generated from these models, and
incoming arguments are validated against them in strict mode so that, for
example, ``"10"`` is rejected where an integer is expected.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class AirflowToolInput(BaseModel):
    model_config = ConfigDict(strict=True)


class DagInput(AirflowToolInput):
    dag_id: str = Field(description="The ID of the DAG")


class DagRunInput(DagInput):
    dag_run_id: str = Field(description="The ID of the DAG run")


class TaskInstanceInput(DagRunInput):
    task_id: str = Field(description="The ID of the task")


class ListDagsInput(AirflowToolInput):
    # Omitted pagination fields are not sent; Airflow then applies its own
    # defaults (limit 100, offset 0, order by dag_id).
    limit: Optional[int] = Field(
        default=None, description="Maximum number of DAGs to return (Airflow default: 100)"
    )
    offset: Optional[int] = Field(
        default=None, description="Number of DAGs to skip (Airflow default: 0)"
    )
    order_by: Optional[str] = Field(
        default=None, description="Field to order by (Airflow default: dag_id)"
    )


class TriggerDagInput(AirflowToolInput):
    dag_id: str = Field(description="The ID of the DAG to trigger")
    dag_run_id: Optional[str] = Field(default=None, description="Custom run ID (optional)")
    conf: Optional[Dict[str, Any]] = Field(
        default=None, description="Configuration parameters for the DAG run"
    )


class ListDagRunsInput(DagInput):
    limit: Optional[int] = Field(
        default=None, description="Maximum number of runs to return (Airflow default: 25)"
    )
    offset: Optional[int] = Field(
        default=None, description="Number of runs to skip (Airflow default: 0)"
    )


class PauseDagInput(AirflowToolInput):
    dag_id: str = Field(description="The ID of the DAG to pause")


class UnpauseDagInput(AirflowToolInput):
    dag_id: str = Field(description="The ID of the DAG to unpause")


class TaskLogsInput(TaskInstanceInput):
    task_try_number: int = Field(
        default=1, ge=1, description="The try number of the task (default: 1)"
    )
    full_content: bool = Field(
        default=True, description="Whether to get full log content (default: true)"
    )


class DagRunLogsInput(DagRunInput):
    limit: int = Field(
        default=10,
        ge=1,
        description="Maximum number of tasks to show logs for (default: 10)",
    )


class TailDagRunInput(DagRunInput):
    max_lines: int = Field(
        default=50,
        ge=1,
        description="Maximum number of log lines to show per task (default: 50)",
    )
