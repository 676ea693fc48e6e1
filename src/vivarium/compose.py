"""Docker Compose file generation.

Host ports are not written into the compose file directly; they are
interpolated by docker compose from the generated ``.env``
(see ``vivarium.env.generate_compose_env``).
"""

from typing import Any

import yaml

from .project import ServicesConfig


def generate_compose(services: ServicesConfig, compose_name: str) -> str:
    """Generate a Docker Compose YAML document for the configured services.

    Args:
        services: Services section of the project config
        compose_name: Compose project name

    Returns:
        YAML string
    """
    compose_services: dict[str, Any] = {}
    volumes: list[str] = []

    if services.postgres:
        compose_services["postgres"] = _postgres_service()
        volumes.append("postgres-data")

    if services.redis:
        compose_services["valkey"] = _valkey_service()
        volumes.append("valkey-data")

    if services.s3:
        compose_services["rustfs"] = _rustfs_service()
        volumes.append("rustfs-data")

    if services.postgres:
        compose_services["postgres-mcp"] = _postgres_mcp_service()

    compose: dict[str, Any] = {"name": compose_name, "services": compose_services}
    if volumes:
        compose["volumes"] = {name: {} for name in volumes}

    return yaml.safe_dump(compose, sort_keys=False, default_flow_style=False)


def _healthcheck(test: list[str], start_period: str) -> dict[str, Any]:
    return {
        "test": test,
        "interval": "10s",
        "timeout": "5s",
        "retries": 5,
        "start_period": start_period,
    }


def _postgres_service() -> dict[str, Any]:
    return {
        "image": "public.ecr.aws/docker/library/postgres:18-alpine",
        "environment": {
            "POSTGRES_USER": "${POSTGRES_USER}",
            "POSTGRES_PASSWORD": "${POSTGRES_PASSWORD}",
            "POSTGRES_DB": "${POSTGRES_DB}",
        },
        "restart": "unless-stopped",
        "ports": ["${POSTGRES_PORT}:5432"],
        "volumes": ["postgres-data:/var/lib/postgresql"],
        "healthcheck": _healthcheck(
            ["CMD-SHELL", "pg_isready -U $$POSTGRES_USER -d $$POSTGRES_DB || exit 1"],
            "30s",
        ),
    }


def _valkey_service() -> dict[str, Any]:
    """Valkey (Redis-compatible) service definition."""
    return {
        "image": "public.ecr.aws/valkey/valkey:8-alpine",
        "ports": ["${REDIS_PORT}:6379"],
        "volumes": ["valkey-data:/data"],
        "restart": "unless-stopped",
        "healthcheck": _healthcheck(["CMD-SHELL", "redis-cli ping | grep PONG"], "10s"),
    }


def _rustfs_service() -> dict[str, Any]:
    """RustFS (S3-compatible) service definition."""
    return {
        "image": "public.ecr.aws/n9g5z2x9/docker-mirror/rustfs:latest",
        "command": ["/data"],
        "volumes": ["rustfs-data:/data"],
        "restart": "unless-stopped",
        "environment": {
            "RUSTFS_ADDRESS": ":9010",
            "RUSTFS_ACCESS_KEY": "${S3_ACCESS_KEY}",
            "RUSTFS_SECRET_KEY": "${S3_SECRET_KEY}",
            "RUSTFS_CONSOLE_ENABLE": "true",
        },
        "ports": ["${S3_PORT}:9010", "${S3_CONSOLE_PORT}:9001"],
        "healthcheck": _healthcheck(
            ["CMD", "curl", "-f", "http://localhost:9010/health"], "10s"
        ),
    }


def _postgres_mcp_service() -> dict[str, Any]:
    """Postgres MCP server, reachable on the compose network over SSE."""
    return {
        "image": "public.ecr.aws/n9g5z2x9/docker-mirror/postgres-mcp:latest",
        "command": ["--access-mode=unrestricted", "--transport=sse"],
        "restart": "unless-stopped",
        "environment": {
            "DATABASE_URI": (
                "postgres://${POSTGRES_USER}:${POSTGRES_PASSWORD}"
                "@postgres:5432/${POSTGRES_DB}"
            ),
        },
        "depends_on": {
            "postgres": {"condition": "service_healthy", "restart": True},
        },
    }
