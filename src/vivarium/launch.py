"""Keep .claude/launch.json dev-server entries in step with the claimed ports."""

import json
from pathlib import Path
from typing import Any

from .ports import PortMap
from .project import PackageConfig

LAUNCH_FILE = Path(".claude") / "launch.json"


def update_launch_json(
    project_root: Path,
    ports: PortMap,
    packages: dict[str, PackageConfig],
) -> Path | None:
    """Rewrite the ``frontend`` and ``api`` launch configurations.

    Each entry gets its port, and its ``env`` is merged with the URLs of
    the other side. Other entries and unrelated env keys are left alone.

    Args:
        project_root: Project root directory
        ports: Port map of the project's slot
        packages: Packages section of the project config

    Returns:
        Path of the updated file, or None if there was nothing to update

    Raises:
        ValueError: If the file is not valid JSON
        OSError: If the file cannot be read or written
    """
    launch_path = project_root / LAUNCH_FILE
    if not launch_path.is_file():
        return None

    launch = json.loads(launch_path.read_text())
    configurations = launch.get("configurations") if isinstance(launch, dict) else None
    if not isinstance(configurations, list):
        return None

    has_frontend = "frontend" in packages
    has_backend = "backend" in packages

    for entry in configurations:
        if not isinstance(entry, dict):
            continue
        if has_frontend and entry.get("name") == "frontend":
            entry["port"] = ports.frontend
            entry["env"] = {
                **(entry.get("env") or {}),
                **_frontend_env(packages["frontend"], ports, has_backend),
            }
        elif has_backend and entry.get("name") == "api":
            entry["port"] = ports.backend
            if has_frontend:
                entry["env"] = {
                    **(entry.get("env") or {}),
                    "FRONTEND_URL": f"http://127.0.0.1:{ports.frontend}",
                }

    launch_path.write_text(json.dumps(launch, indent=2) + "\n")
    return launch_path


def _frontend_env(package: PackageConfig, ports: PortMap, has_backend: bool) -> dict[str, Any]:
    prefix = "VITE_" if package.framework == "vite" else "NEXT_PUBLIC_"
    env: dict[str, Any] = {}
    if has_backend:
        env[f"{prefix}API_URL"] = f"http://127.0.0.1:{ports.backend}"
    env[f"{prefix}FRONTEND_URL"] = f"http://127.0.0.1:{ports.frontend}"
    env[f"{prefix}ASSET_SRC"] = f"http://127.0.0.1:{ports.s3}"
    return env
