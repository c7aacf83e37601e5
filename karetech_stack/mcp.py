"""Catalogue of the MCP servers a generated project can be wired for.

Only metadata lives here: which category a server belongs to, which
databases a database-specific server supports, and which environment
variables it expects. Validation uses it to check that database servers
match the selected database; the wizard uses it to suggest defaults.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping

from .schema import DatabaseType, McpServer, TestingFramework


@dataclass(frozen=True)
class McpServerInfo:
    server: McpServer
    name: str
    description: str
    category: str
    supported_databases: tuple[DatabaseType, ...] = ()
    env_vars: tuple[str, ...] = field(default=())

    @property
    def is_database_server(self) -> bool:
        return bool(self.supported_databases)


MCP_SERVERS: Mapping[McpServer, McpServerInfo] = MappingProxyType({
    info.server: info
    for info in (
        McpServerInfo(
            McpServer.GITHUB,
            "GitHub",
            "Repository operations including issues, PRs, and commits",
            "github",
            env_vars=("GITHUB_PERSONAL_ACCESS_TOKEN",),
        ),
        McpServerInfo(
            McpServer.POSTGRES,
            "PostgreSQL",
            "Database schema management and query execution",
            "database",
            supported_databases=(DatabaseType.POSTGRESQL,),
            env_vars=("POSTGRES_CONNECTION_STRING",),
        ),
        McpServerInfo(
            McpServer.TURSO,
            "Turso",
            "Turso and LibSQL database operations",
            "database",
            supported_databases=(DatabaseType.TURSO, DatabaseType.SQLITE),
            env_vars=("TURSO_DATABASE_URL", "TURSO_AUTH_TOKEN"),
        ),
        McpServerInfo(
            McpServer.SQLITE,
            "SQLite",
            "SQLite database operations with local file storage",
            "database",
            supported_databases=(DatabaseType.SQLITE,),
            env_vars=("SQLITE_DATABASE_PATH",),
        ),
        McpServerInfo(
            McpServer.FILESYSTEM,
            "Filesystem",
            "Safe local file system access and operations",
            "filesystem",
            env_vars=("MCP_FILESYSTEM_ROOT",),
        ),
        McpServerInfo(
            McpServer.PLAYWRIGHT,
            "Playwright",
            "Browser automation, E2E testing, and web scraping",
            "testing",
            env_vars=("PLAYWRIGHT_HEADLESS", "PLAYWRIGHT_BROWSER"),
        ),
        McpServerInfo(
            McpServer.MEMORY,
            "Memory",
            "Persistent memory and knowledge graph management",
            "ai",
            env_vars=("MCP_MEMORY_STORE_PATH",),
        ),
        McpServerInfo(
            McpServer.FETCH,
            "Fetch",
            "HTTP requests and web content fetching",
            "ai",
        ),
        McpServerInfo(
            McpServer.SENTRY,
            "Sentry",
            "Error tracking, issue management, and monitoring",
            "monitoring",
            env_vars=("SENTRY_AUTH_TOKEN", "SENTRY_ORG", "SENTRY_PROJECT"),
        ),
    )
})

# Preferred server for each database when suggesting defaults.
DATABASE_SERVERS: Mapping[DatabaseType, McpServer] = MappingProxyType({
    DatabaseType.POSTGRESQL: McpServer.POSTGRES,
    DatabaseType.TURSO: McpServer.TURSO,
    DatabaseType.SQLITE: McpServer.SQLITE,
})


def server_info(server: McpServer | str) -> McpServerInfo:
    return MCP_SERVERS[McpServer(server)]


def servers_in_category(category: str) -> list[McpServer]:
    return [info.server for info in MCP_SERVERS.values() if info.category == category]


def recommended_servers(
    database: DatabaseType | None,
    testing: Iterable[TestingFramework] = (),
    github_available: bool = False,
) -> tuple[McpServer, ...]:
    """Smart defaults: filesystem, the database's server, GitHub, Playwright."""
    servers = [McpServer.FILESYSTEM]
    if database is not None and database in DATABASE_SERVERS:
        servers.append(DATABASE_SERVERS[database])
    if github_available:
        servers.append(McpServer.GITHUB)
    if TestingFramework.PLAYWRIGHT in tuple(testing):
        servers.append(McpServer.PLAYWRIGHT)
    return tuple(servers)


def required_env_vars(servers: Iterable[McpServer]) -> list[str]:
    """Environment variables the selected servers expect, without duplicates."""
    seen: list[str] = []
    for server in servers:
        for var in MCP_SERVERS[McpServer(server)].env_vars:
            if var not in seen:
                seen.append(var)
    return seen
