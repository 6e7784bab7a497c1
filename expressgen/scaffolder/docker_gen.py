"""Docker Compose document generation.

Builds the ``docker-compose.yml`` for a generated project as a plain dict
and serialises it with PyYAML.  The ``app`` service is always present; a
database service, its named volume and the matching ``DATABASE_URL`` are
added for server-based databases.  SQLite runs in-process and adds nothing.
"""

from __future__ import annotations

from typing import Any

import yaml

from .models import DatabaseKind, ProjectConfig

APP_PORT = 3000

# Database kind -> (service name, image, container port, volume name, data dir)
_DATABASE_SERVICES: dict[DatabaseKind, tuple[str, str, int, str, str]] = {
    DatabaseKind.MONGODB: ("mongodb", "mongo:7", 27017, "mongodb_data", "/data/db"),
    DatabaseKind.POSTGRESQL: (
        "postgres", "postgres:15", 5432, "postgres_data", "/var/lib/postgresql/data",
    ),
    DatabaseKind.MYSQL: ("mysql", "mysql:8", 3306, "mysql_data", "/var/lib/mysql"),
}


def database_url(config: ProjectConfig, host: str = "localhost") -> str | None:
    """Connection URL for *config*'s database as reached from *host*.

    SQLite has no server; its value is the storage file path.
    """
    name = config.project_name
    if config.database is DatabaseKind.MONGODB:
        if host == "localhost":
            return f"mongodb://localhost:27017/{name}"
        return f"mongodb://admin:password@{host}:27017/{name}?authSource=admin"
    if config.database is DatabaseKind.POSTGRESQL:
        return f"postgres://admin:password@{host}:5432/{name}"
    if config.database is DatabaseKind.MYSQL:
        return f"mysql://admin:password@{host}:3306/{name}"
    if config.database is DatabaseKind.SQLITE:
        return f"./data/{name}.sqlite"
    return None


def _database_environment(config: ProjectConfig) -> list[str]:
    name = config.project_name
    if config.database is DatabaseKind.MONGODB:
        return [
            "MONGO_INITDB_ROOT_USERNAME=admin",
            "MONGO_INITDB_ROOT_PASSWORD=password",
        ]
    if config.database is DatabaseKind.POSTGRESQL:
        return [
            f"POSTGRES_DB={name}",
            "POSTGRES_USER=admin",
            "POSTGRES_PASSWORD=password",
        ]
    return [
        f"MYSQL_DATABASE={name}",
        "MYSQL_USER=admin",
        "MYSQL_PASSWORD=password",
        "MYSQL_ROOT_PASSWORD=password",
    ]


def build_compose(config: ProjectConfig) -> dict[str, Any]:
    """Return the Compose document for *config* as a dict."""
    app: dict[str, Any] = {
        "build": ".",
        "ports": [f"{APP_PORT}:{APP_PORT}"],
        "environment": ["NODE_ENV=production", f"PORT={APP_PORT}"],
        "env_file": [".env"],
    }
    services: dict[str, Any] = {"app": app}
    volumes: dict[str, Any] = {}

    service_def = _DATABASE_SERVICES.get(config.database)
    if service_def is not None:
        service, image, port, volume, data_dir = service_def
        services[service] = {
            "image": image,
            "ports": [f"{port}:{port}"],
            "environment": _database_environment(config),
            "volumes": [f"{volume}:{data_dir}"],
        }
        volumes[volume] = {}
        app["depends_on"] = [service]
        app["environment"].append(f"DATABASE_URL={database_url(config, host=service)}")
    elif config.database is DatabaseKind.SQLITE:
        app["volumes"] = ["./data:/app/data"]

    doc: dict[str, Any] = {"services": services}
    if volumes:
        doc["volumes"] = volumes
    return doc


def render_compose(config: ProjectConfig) -> str:
    """Serialise :func:`build_compose` to YAML, preserving key order."""
    return yaml.safe_dump(build_compose(config), sort_keys=False, default_flow_style=False)
