"""Tests for the MCP server wiring shared by the transports."""

import pytest
from click.testing import CliRunner
from mcp import types
from mcp.types import TextContent

from mcp_tools.errors import ConfigurationError, TransportError
from plugins.airflow import build_registry
from server import stdio
from server.app import SERVER_NAME, create_mcp_server, decode_json_body, tool_definitions
from server.tool_result_processor import content_to_dicts, process_tool_result


@pytest.fixture
def registry(airflow_client):
    return build_registry(airflow_client)


@pytest.fixture
def mcp_server(registry):
    return create_mcp_server(registry)


async def call_tool(server, name, arguments=None):
    handler = server.request_handlers[types.CallToolRequest]
    request = types.CallToolRequest(
        method="tools/call",
        params=types.CallToolRequestParams(name=name, arguments=arguments),
    )
    return (await handler(request)).root


class TestToolDefinitions:
    def test_definitions_mirror_registry(self, registry):
        tools = tool_definitions(registry)

        assert [tool.name for tool in tools] == registry.names()
        get_dag = tools[1]
        assert get_dag.name == "airflow_get_dag"
        assert get_dag.description == "Get details of a specific DAG"
        assert get_dag.inputSchema["required"] == ["dag_id"]

    @pytest.mark.asyncio
    async def test_list_tools_handler(self, mcp_server):
        handler = mcp_server.request_handlers[types.ListToolsRequest]

        result = await handler(types.ListToolsRequest(method="tools/list"))

        assert len(result.root.tools) == 12
        assert mcp_server.name == SERVER_NAME


class TestCallTool:
    @pytest.mark.asyncio
    async def test_success_returns_single_text_item(self, mcp_server, fake_airflow):
        fake_airflow.add("GET", "/dags/etl", json={"dag_id": "etl", "is_paused": True})

        result = await call_tool(mcp_server, "airflow_get_dag", {"dag_id": "etl"})

        assert not result.isError
        assert len(result.content) == 1
        assert result.content[0].type == "text"
        assert result.content[0].text.startswith("**DAG: etl**")
        assert "Status: Paused" in result.content[0].text

    @pytest.mark.asyncio
    async def test_upstream_failure_is_error_result(self, mcp_server):
        result = await call_tool(mcp_server, "airflow_get_dag", {"dag_id": "missing"})

        assert result.isError
        assert "Airflow API error: 404" in result.content[0].text

    @pytest.mark.asyncio
    async def test_unknown_tool_is_error_result(self, mcp_server):
        result = await call_tool(mcp_server, "airflow_drop_everything", {})

        assert result.isError
        assert "airflow_drop_everything" in result.content[0].text

    @pytest.mark.asyncio
    async def test_invalid_arguments_are_error_result(self, mcp_server, fake_airflow):
        result = await call_tool(mcp_server, "airflow_list_dags", {"limit": "10"})

        assert result.isError
        assert fake_airflow.requests == []


class TestDecodeJsonBody:
    def test_empty_body(self):
        assert decode_json_body(b"") is None
        assert decode_json_body(None) is None

    def test_valid_body(self):
        assert decode_json_body(b'{"jsonrpc": "2.0", "id": 1}') == {"jsonrpc": "2.0", "id": 1}

    def test_malformed_body(self):
        with pytest.raises(TransportError) as exc_info:
            decode_json_body(b"{not json")

        assert exc_info.value.message == "Invalid JSON"


class TestToolResultProcessor:
    def test_string_is_wrapped(self):
        assert process_tool_result("hello") == [TextContent(type="text", text="hello")]

    def test_content_is_passed_through(self):
        content = TextContent(type="text", text="hi")

        assert process_tool_result(content) == [content]
        assert process_tool_result([content]) == [content]

    def test_other_values_are_stringified(self):
        assert process_tool_result(42)[0].text == "42"

    def test_content_to_dicts(self):
        assert content_to_dicts([TextContent(type="text", text="hi")]) == [
            {"type": "text", "text": "hi"}
        ]


class TestStdioMain:
    def test_missing_credentials_exit_with_error(self, monkeypatch):
        class FakeEnv:
            def load(self):
                return self

        def fail(env):
            raise ConfigurationError("Either AIRFLOW_TOKEN or both ... must be provided")

        served = []
        monkeypatch.setattr(stdio, "env_manager", FakeEnv())
        monkeypatch.setattr(stdio, "setup_logging", lambda env, name: None)
        monkeypatch.setattr(stdio, "configure", fail)
        monkeypatch.setattr(stdio, "serve", lambda registry: served.append(registry))

        result = CliRunner().invoke(stdio.main, [])

        assert result.exit_code == 1
        assert served == []
