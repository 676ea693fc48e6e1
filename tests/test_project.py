"""Tests for project module."""

import json

import pytest

from vivarium.project import (
    ConfigError,
    get_project,
    load_config,
    normalize_name,
    try_load_config,
)

CONFIG = {
    "services": {
        "postgres": {"user": "app", "password": "secret", "database": "shop"},
        "redis": True,
        "s3": {"accessKey": "ak", "secretKey": "sk", "buckets": ["assets", "tmp"]},
    },
    "packages": {
        "backend": {"envFile": "backend/.env", "postSetup": ["make migrate"]},
        "frontend": {"envFile": "web/.env.local", "framework": "vite", "directory": "web"},
    },
}


def test_project_name_from_package_json(temp_dir):
    """Test that package.json name is the project identity."""
    (temp_dir / "package.json").write_text(json.dumps({"name": "shop"}))

    project = get_project(temp_dir)

    assert project.name == "shop"
    assert project.compose_name == "shop-local"
    assert project.root == temp_dir.resolve()


def test_project_name_falls_back_to_directory(temp_dir):
    """Test projects without package.json use their directory name."""
    project_dir = temp_dir / "My Blog"
    project_dir.mkdir()

    assert get_project(project_dir).name == "my-blog"


def test_project_name_without_name_key(temp_dir):
    """Test package.json without a name falls back to the directory."""
    project_dir = temp_dir / "blog"
    project_dir.mkdir()
    (project_dir / "package.json").write_text("{}")

    assert get_project(project_dir).name == "blog"


def test_normalize_name():
    """Test normalization of names into registry-safe identities."""
    assert normalize_name("@acme/shop") == "acme-shop"
    assert normalize_name("Shop_API") == "shop_api"
    assert normalize_name("a..b") == "a-b"

    with pytest.raises(ConfigError):
        normalize_name("@@//")


def test_load_config_from_json(temp_dir):
    """Test loading vivarium.json."""
    (temp_dir / "vivarium.json").write_text(json.dumps(CONFIG))

    config = load_config(temp_dir)

    assert config.services.postgres.database == "shop"
    assert config.services.redis is True
    assert config.services.s3.buckets == ["assets", "tmp"]
    assert config.packages["backend"].env_file == "backend/.env"
    assert config.packages["backend"].post_setup == ["make migrate"]
    assert config.packages["frontend"].framework == "vite"
    assert config.packages["frontend"].directory == "web"


def test_load_config_from_yaml(temp_dir):
    """Test loading vivarium.yaml."""
    (temp_dir / "vivarium.yaml").write_text(
        """
services:
  redis: true
packages:
  backend:
    envFile: .env
"""
    )

    config = load_config(temp_dir)

    assert config.services.postgres is None
    assert config.services.redis is True
    assert config.packages["backend"].framework == "nextjs"


def test_load_config_from_package_json(temp_dir):
    """Test the "vivarium" key of package.json."""
    (temp_dir / "package.json").write_text(json.dumps({"name": "shop", "vivarium": CONFIG}))

    assert load_config(temp_dir).services.postgres.user == "app"


def test_config_file_wins_over_package_json(temp_dir):
    """Test lookup order."""
    (temp_dir / "package.json").write_text(json.dumps({"vivarium": CONFIG}))
    (temp_dir / "vivarium.json").write_text(json.dumps({"services": {}, "packages": {}}))

    config = load_config(temp_dir)

    assert config.services.postgres is None
    assert config.packages == {}


def test_missing_config(temp_dir):
    """Test that no config is an error for load_config only."""
    assert try_load_config(temp_dir) is None
    with pytest.raises(ConfigError, match="No vivarium config found"):
        load_config(temp_dir)


@pytest.mark.parametrize(
    "raw, message",
    [
        ({"packages": {}}, "services"),
        ({"services": {}}, "packages"),
        ({"services": {"postgres": {"user": "u"}}, "packages": {}}, "password"),
        ({"services": {}, "packages": {"web": {"framework": "angular"}}}, "framework"),
        ({"services": {"s3": {"accessKey": "a", "secretKey": "b", "buckets": "x"}}, "packages": {}}, "buckets"),
    ],
)
def test_invalid_config(temp_dir, raw, message):
    """Test validation errors name the offending field."""
    (temp_dir / "vivarium.json").write_text(json.dumps(raw))

    with pytest.raises(ConfigError, match=message):
        load_config(temp_dir)


def test_unparseable_config(temp_dir):
    """Test a syntax error in the config file."""
    (temp_dir / "vivarium.json").write_text("{")

    with pytest.raises(ConfigError, match="vivarium.json"):
        load_config(temp_dir)
