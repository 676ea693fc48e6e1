"""Docker and docker compose invocation helpers."""

import os
import shutil
import subprocess
from pathlib import Path

from .console import debug, dim, step

REQUIRED_TOOLS = ("docker",)

MCP_PROXY_IMAGE = "ghcr.io/sparfenyuk/mcp-proxy:v0.11.0"


class ComposeError(Exception):
    """Raised when a docker compose command fails."""

    pass


def compose(
    compose_file: Path,
    env_file: Path,
    args: list[str],
    cwd: Path | None = None,
) -> None:
    """Run docker compose with the generated compose and env files.

    Output streams straight to the terminal.

    Args:
        compose_file: Path to compose.yaml
        env_file: Path to the compose .env
        args: docker compose subcommand and arguments
        cwd: Working directory

    Raises:
        ComposeError: If docker is missing or the command fails
    """
    cmd = [
        "docker",
        "compose",
        "--file",
        str(compose_file),
        "--env-file",
        str(env_file),
        *args,
    ]
    debug(f"Running: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, cwd=cwd, check=True)
    except FileNotFoundError as e:
        raise ComposeError("docker is not installed or not on PATH") from e
    except subprocess.CalledProcessError as e:
        raise ComposeError(
            f"docker compose {' '.join(args)} exited with status {e.returncode}"
        ) from e


def run_mcp_proxy(compose_name: str, service: str) -> None:
    """Bridge stdio to the SSE endpoint of a compose service.

    Runs a throwaway proxy container on the project's compose network,
    inheriting stdin and stdout so MCP clients can talk to it directly.

    Args:
        compose_name: Compose project name, which names the network
        service: Compose service serving SSE on port 8000

    Raises:
        ComposeError: If docker is missing or the proxy exits with an error
    """
    cmd = [
        "docker",
        "run",
        "--rm",
        "-i",
        "--network",
        f"{compose_name}_default",
        MCP_PROXY_IMAGE,
        f"http://{service}:8000/sse",
    ]
    debug(f"Running: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, check=True)
    except FileNotFoundError as e:
        raise ComposeError("docker is not installed or not on PATH") from e
    except subprocess.CalledProcessError as e:
        raise ComposeError(f"mcp-proxy exited with status {e.returncode}") from e


def check_prerequisites() -> list[str]:
    """Return the required tools missing from PATH."""
    return [tool for tool in REQUIRED_TOOLS if shutil.which(tool) is None]


def create_s3_bucket(
    endpoint: str, bucket: str, access_key: str, secret_key: str
) -> bool:
    """Create an S3 bucket via the aws CLI.

    Args:
        endpoint: S3 endpoint URL
        bucket: Bucket name
        access_key: Access key
        secret_key: Secret key

    Returns:
        True if created, False if it already exists or could not be created
    """
    env = {
        **os.environ,
        "AWS_ACCESS_KEY_ID": access_key,
        "AWS_SECRET_ACCESS_KEY": secret_key,
    }
    try:
        subprocess.run(
            ["aws", "--endpoint-url", endpoint, "s3", "mb", f"s3://{bucket}"],
            capture_output=True,
            text=True,
            env=env,
            check=True,
            timeout=30,
        )
    except subprocess.CalledProcessError:
        dim(f"Bucket already exists: {bucket}")
        return False
    except (subprocess.SubprocessError, FileNotFoundError) as e:
        dim(f"Could not create bucket {bucket}: {e}")
        return False

    step(f"Created bucket: {bucket}")
    return True
