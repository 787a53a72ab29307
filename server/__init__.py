"""Transport entry points for the Airflow MCP server."""
