"""Unit tests for the MCP server catalogue (karetech_stack.mcp).

Tests cover:
- Catalogue completeness and database support metadata
- server_info / servers_in_category
- recommended_servers smart defaults
- required_env_vars de-duplication
"""

from __future__ import annotations

import pytest

from karetech_stack.mcp import (
    DATABASE_SERVERS,
    MCP_SERVERS,
    recommended_servers,
    required_env_vars,
    server_info,
    servers_in_category,
)
from karetech_stack.schema import DatabaseType, McpServer, TestingFramework

pytestmark = pytest.mark.unit


class TestCatalogue:
    def test_every_server_described(self):
        assert set(MCP_SERVERS) == set(McpServer)

    def test_database_servers(self):
        database_servers = {s for s, meta in MCP_SERVERS.items() if meta.is_database_server}
        assert database_servers == {McpServer.POSTGRES, McpServer.TURSO, McpServer.SQLITE}

    def test_turso_supports_sqlite(self):
        assert DatabaseType.SQLITE in server_info("turso").supported_databases

    def test_server_info_accepts_enum(self):
        assert server_info(McpServer.GITHUB).name == "GitHub"

    def test_server_info_unknown(self):
        with pytest.raises(ValueError):
            server_info("slack")

    def test_servers_in_category(self):
        assert servers_in_category("database") == [McpServer.POSTGRES, McpServer.TURSO, McpServer.SQLITE]
        assert servers_in_category("ai") == [McpServer.MEMORY, McpServer.FETCH]

    def test_database_server_map(self):
        for database, server in DATABASE_SERVERS.items():
            assert database in MCP_SERVERS[server].supported_databases


class TestRecommendedServers:
    def test_minimum(self):
        assert recommended_servers(DatabaseType.NONE) == (McpServer.FILESYSTEM,)

    def test_full(self):
        servers = recommended_servers(
            DatabaseType.POSTGRESQL,
            testing=(TestingFramework.PLAYWRIGHT,),
            github_available=True,
        )
        assert servers == (
            McpServer.FILESYSTEM,
            McpServer.POSTGRES,
            McpServer.GITHUB,
            McpServer.PLAYWRIGHT,
        )

    def test_turso(self):
        assert recommended_servers(DatabaseType.TURSO) == (McpServer.FILESYSTEM, McpServer.TURSO)


class TestRequiredEnvVars:
    def test_no_duplicates_and_order(self):
        names = required_env_vars([McpServer.GITHUB, McpServer.TURSO, McpServer.GITHUB])
        assert names == ["GITHUB_PERSONAL_ACCESS_TOKEN", "TURSO_DATABASE_URL", "TURSO_AUTH_TOKEN"]

    def test_fetch_has_none(self):
        assert required_env_vars([McpServer.FETCH]) == []
