"""Text rendering of Airflow REST API payloads.

Every function here is pure: it takes the decoded JSON returned by the API and
produces the markdown-ish text handed back to the MCP client. Missing or null
fields render as fixed placeholders so the output shape never depends on which
keys Airflow happened to send.
"""

import json
import math
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

NOT_STARTED = "Not started"
RUNNING = "Running"
NOT_AVAILABLE = "N/A"
NO_DESCRIPTION = "No description"

LOG_TRUNCATE_CHARS = 2000
TRUNCATED_MARKER = "\n... (truncated, use get_task_logs for full content)"


def show(value: Any) -> str:
    """Render a scalar field, using ``None`` for missing values."""
    return "None" if value is None else str(value)


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Parse an Airflow ISO-8601 timestamp, returning None when it can't be read."""
    if not value or not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


def _round_half_up(seconds: float) -> int:
    # ties go up: 2.5s is 3s
    return math.floor(seconds + 0.5)


def format_duration(start_date: Optional[str], end_date: Optional[str]) -> str:
    """Whole seconds between two timestamps, or N/A if either is missing."""
    start = parse_timestamp(start_date)
    end = parse_timestamp(end_date)
    if start is None or end is None:
        return NOT_AVAILABLE
    try:
        seconds = (end - start).total_seconds()
    except TypeError:
        # naive vs aware
        return NOT_AVAILABLE
    return f"{_round_half_up(seconds)}s"


def format_task_duration(duration: Optional[float]) -> str:
    if not duration:
        return NOT_AVAILABLE
    return f"{_round_half_up(duration)}s"


def format_schedule(schedule: Any) -> str:
    # Airflow serializes cron/timedelta schedules as {"__type": ..., "value": ...}
    if isinstance(schedule, dict):
        schedule = schedule.get("value")
    return str(schedule) if schedule else "None"


def format_tags(tags: Optional[Iterable[Any]]) -> str:
    names = []
    for tag in tags or []:
        if isinstance(tag, dict):
            tag = tag.get("name")
        if tag:
            names.append(str(tag))
    return ", ".join(names) if names else "None"


def format_conf(conf: Any) -> str:
    if conf is None:
        return "None"
    return json.dumps(conf, indent=2)


def unescape_log_content(content: Optional[str]) -> str:
    """Turn literal ``\\n``, ``\\t`` and ``\\r`` sequences into real characters."""
    if not content:
        return ""
    return content.replace("\\n", "\n").replace("\\t", "\t").replace("\\r", "\r")


def truncate_log(content: str, limit: int = LOG_TRUNCATE_CHARS) -> str:
    if len(content) <= limit:
        return content
    return content[:limit] + TRUNCATED_MARKER


def tail_lines(content: str, max_lines: int) -> List[str]:
    return content.split("\n")[-max_lines:]


def format_dag_list(data: Dict[str, Any]) -> str:
    dags = data.get("dags") or []
    entries = [
        f"• **{dag.get('dag_id')}** - {dag.get('description') or NO_DESCRIPTION}\n"
        f"  Status: {'Paused' if dag.get('is_paused') else 'Active'}\n"
        f"  Schedule: {format_schedule(dag.get('schedule_interval'))}\n"
        for dag in dags
    ]
    total = data.get("total_entries", len(dags))
    return f"Found {total} DAGs:\n\n" + "\n".join(entries)


def format_dag(data: Dict[str, Any]) -> str:
    return (
        f"**DAG: {data.get('dag_id')}**\n\n"
        f"Description: {data.get('description') or NO_DESCRIPTION}\n"
        f"Status: {'Paused' if data.get('is_paused') else 'Active'}\n"
        f"Schedule: {format_schedule(data.get('schedule_interval'))}\n"
        f"Start Date: {show(data.get('start_date'))}\n"
        f"Catchup: {show(data.get('catchup'))}\n"
        f"Max Active Runs: {show(data.get('max_active_runs'))}\n"
        f"Tags: {format_tags(data.get('tags'))}"
    )


def format_triggered_run(data: Dict[str, Any]) -> str:
    return (
        "DAG run triggered successfully!\n\n"
        f"DAG ID: {show(data.get('dag_id'))}\n"
        f"Run ID: {show(data.get('dag_run_id'))}\n"
        f"State: {show(data.get('state'))}\n"
        f"Execution Date: {show(data.get('execution_date'))}\n"
        f"Start Date: {data.get('start_date') or NOT_STARTED}"
    )


def format_dag_runs(dag_id: str, data: Dict[str, Any]) -> str:
    runs = data.get("dag_runs") or []
    entries = [
        f"• **{run.get('dag_run_id')}**\n"
        f"  State: {show(run.get('state'))}\n"
        f"  Start: {run.get('start_date') or NOT_STARTED}\n"
        f"  End: {run.get('end_date') or RUNNING}\n"
        f"  Duration: {format_duration(run.get('start_date'), run.get('end_date'))}\n"
        for run in runs
    ]
    total = data.get("total_entries", len(runs))
    return f"DAG Runs for {dag_id} ({total} total):\n\n" + "\n".join(entries)


def format_dag_run(data: Dict[str, Any]) -> str:
    return (
        f"**DAG Run: {data.get('dag_run_id')}**\n\n"
        f"DAG ID: {show(data.get('dag_id'))}\n"
        f"State: {show(data.get('state'))}\n"
        f"Start Date: {data.get('start_date') or NOT_STARTED}\n"
        f"End Date: {data.get('end_date') or RUNNING}\n"
        f"Duration: {format_duration(data.get('start_date'), data.get('end_date'))}\n"
        f"External Trigger: {show(data.get('external_trigger'))}\n"
        f"Configuration: {format_conf(data.get('conf'))}"
    )


def format_task_instances(dag_id: str, dag_run_id: str, data: Dict[str, Any]) -> str:
    entries = [
        f"• **{task.get('task_id')}**\n"
        f"  State: {show(task.get('state'))}\n"
        f"  Start: {task.get('start_date') or NOT_STARTED}\n"
        f"  End: {task.get('end_date') or RUNNING}\n"
        f"  Duration: {format_task_duration(task.get('duration'))}\n"
        f"  Try: {show(task.get('try_number'))}\n"
        for task in data.get("task_instances") or []
    ]
    return f"Task Instances for {dag_id}/{dag_run_id}:\n\n" + "\n".join(entries)


def format_task_instance(data: Dict[str, Any]) -> str:
    return (
        f"**Task Instance: {data.get('task_id')}**\n\n"
        f"DAG ID: {show(data.get('dag_id'))}\n"
        f"Run ID: {show(data.get('dag_run_id'))}\n"
        f"State: {show(data.get('state'))}\n"
        f"Start Date: {data.get('start_date') or NOT_STARTED}\n"
        f"End Date: {data.get('end_date') or RUNNING}\n"
        f"Duration: {format_task_duration(data.get('duration'))}\n"
        f"Try Number: {show(data.get('try_number'))}\n"
        f"Max Tries: {show(data.get('max_tries'))}\n"
        f"Queue: {show(data.get('queue'))}\n"
        f"Pool: {show(data.get('pool'))}\n"
        f"Priority Weight: {show(data.get('priority_weight'))}"
    )


def format_pause_state(dag_id: str, is_paused: bool) -> str:
    action = "paused" if is_paused else "unpaused"
    return f'DAG "{dag_id}" has been {action} successfully.'


def format_task_log(
    dag_id: str, dag_run_id: str, task_id: str, try_number: int, content: str
) -> str:
    return (
        f"**Task Logs: {task_id}** (Try {try_number})\n\n"
        f"DAG: {dag_id}\n"
        f"Run: {dag_run_id}\n"
        f"Task: {task_id}\n"
        f"Try Number: {try_number}\n\n"
        f"**Logs:**\n```\n{content}\n```"
    )
