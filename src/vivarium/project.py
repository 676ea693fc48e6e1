"""Project identity and configuration loading for Vivarium."""

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .console import debug

CONFIG_FILES = ("vivarium.yaml", "vivarium.yml", "vivarium.json")


class ConfigError(Exception):
    """Raised when project configuration is missing or invalid."""

    pass


@dataclass
class Project:
    """Identity of a project managed by Vivarium."""

    name: str  # Registry key, normalized
    root: Path  # Absolute path

    @property
    def compose_name(self) -> str:
        """Compose project name used to group the project's containers."""
        return f"{self.name}-local"


@dataclass
class PostgresConfig:
    user: str
    password: str
    database: str


@dataclass
class S3Config:
    access_key: str
    secret_key: str
    buckets: list[str] = field(default_factory=list)


@dataclass
class ServicesConfig:
    postgres: PostgresConfig | None = None
    redis: bool = False
    s3: S3Config | None = None


@dataclass
class PackageConfig:
    """Per-package settings (e.g. "frontend", "backend")."""

    env_file: str | None = None
    env: dict[str, str] = field(default_factory=dict)
    post_setup: list[str] = field(default_factory=list)
    framework: str = "nextjs"
    directory: str | None = None


@dataclass
class VivariumConfig:
    services: ServicesConfig
    packages: dict[str, PackageConfig]


def get_project(path: Path | None = None) -> Project:
    """Resolve the project for a directory.

    The name comes from package.json when present, otherwise from the
    directory name. Scoped npm names like "@acme/shop" become "acme-shop".

    Args:
        path: Project root. Defaults to current working directory.

    Returns:
        Project with normalized name and absolute root
    """
    root = (path or Path.cwd()).resolve()
    raw_name = _read_package_json(root).get("name") or root.name
    return Project(name=normalize_name(str(raw_name)), root=root)


def normalize_name(name: str) -> str:
    """Normalize a name into a registry and compose safe identity.

    Examples:
        My App -> my-app
        @acme/shop -> acme-shop
    """
    normalized = re.sub(r"[^a-z0-9_-]+", "-", name.lower()).strip("-_")
    if not normalized:
        raise ConfigError(f"Cannot derive a project name from {name!r}")
    return normalized


def load_config(root: Path) -> VivariumConfig:
    """Load vivarium configuration with cascading lookup.

    1. vivarium.yaml / vivarium.yml / vivarium.json in project root
    2. "vivarium" key in package.json

    Args:
        root: Project root

    Returns:
        Parsed configuration

    Raises:
        ConfigError: If no config is found or it is invalid
    """
    config = try_load_config(root)
    if config is None:
        raise ConfigError(
            "No vivarium config found. Create vivarium.yaml or vivarium.json, "
            'or add "vivarium" to package.json.'
        )
    return config


def try_load_config(root: Path) -> VivariumConfig | None:
    """Load configuration, returning None when no config source exists."""
    for filename in CONFIG_FILES:
        config_path = root / filename
        if not config_path.exists():
            continue
        debug(f"Loading config from {filename}")
        try:
            with config_path.open() as f:
                if filename.endswith(".json"):
                    raw = json.load(f)
                else:
                    raw = yaml.safe_load(f)
        except (OSError, ValueError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not read {filename}: {e}") from e
        return parse_config(raw)

    package = _read_package_json(root)
    if "vivarium" in package:
        debug('Loading config from package.json "vivarium" key')
        return parse_config(package["vivarium"])

    return None


def parse_config(raw: Any) -> VivariumConfig:
    """Validate raw config data and build a VivariumConfig.

    Raises:
        ConfigError: If required fields are missing or malformed
    """
    if not isinstance(raw, dict):
        raise ConfigError("Config must be an object.")
    services = raw.get("services")
    if not isinstance(services, dict):
        raise ConfigError('Config must have a "services" object.')
    packages = raw.get("packages")
    if not isinstance(packages, dict):
        raise ConfigError('Config must have a "packages" object.')

    return VivariumConfig(
        services=_parse_services(services),
        packages={
            name: _parse_package(name, pkg or {}) for name, pkg in packages.items()
        },
    )


def _parse_services(raw: dict[str, Any]) -> ServicesConfig:
    services = ServicesConfig(redis=bool(raw.get("redis", False)))

    postgres = raw.get("postgres")
    if postgres:
        _require_keys("services.postgres", postgres, ("user", "password", "database"))
        services.postgres = PostgresConfig(
            user=str(postgres["user"]),
            password=str(postgres["password"]),
            database=str(postgres["database"]),
        )

    s3 = raw.get("s3")
    if s3:
        _require_keys("services.s3", s3, ("accessKey", "secretKey"))
        buckets = s3.get("buckets", [])
        if not isinstance(buckets, list):
            raise ConfigError('"services.s3.buckets" must be a list.')
        services.s3 = S3Config(
            access_key=str(s3["accessKey"]),
            secret_key=str(s3["secretKey"]),
            buckets=[str(b) for b in buckets],
        )

    return services


def _parse_package(name: str, raw: Any) -> PackageConfig:
    if not isinstance(raw, dict):
        raise ConfigError(f'Package "{name}" must be an object.')

    framework = raw.get("framework", "nextjs")
    if framework not in ("nextjs", "vite"):
        raise ConfigError(f'Package "{name}": framework must be "nextjs" or "vite".')

    env = raw.get("env", {})
    post_setup = raw.get("postSetup", [])
    if not isinstance(env, dict) or not isinstance(post_setup, list):
        raise ConfigError(f'Package "{name}": "env" must be an object, "postSetup" a list.')

    return PackageConfig(
        env_file=raw.get("envFile"),
        env={str(k): str(v) for k, v in env.items()},
        post_setup=[str(cmd) for cmd in post_setup],
        framework=framework,
        directory=raw.get("directory"),
    )


def _require_keys(section: str, raw: Any, keys: tuple[str, ...]) -> None:
    if not isinstance(raw, dict):
        raise ConfigError(f'"{section}" must be an object.')
    missing = [k for k in keys if k not in raw]
    if missing:
        raise ConfigError(f'"{section}" is missing: {", ".join(missing)}')


def _read_package_json(root: Path) -> dict[str, Any]:
    package_path = root / "package.json"
    if not package_path.exists():
        return {}
    try:
        with package_path.open() as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read package.json: {e}") from e
    return data if isinstance(data, dict) else {}
