"""Tests for s3bridge configuration loading."""

import tempfile
from pathlib import Path

import pydantic
import pytest
import yaml

from s3bridge.config import S3BridgeConfig, load_config


def _write_yaml(data) -> Path:
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        return Path(f.name)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_load_example_config(self):
        """Loading the example config file populates all fields."""
        config = load_config(Path(__file__).resolve().parent.parent / "s3bridge.example.yaml")
        assert config.server.host == "0.0.0.0"
        assert config.server.port == 9000
        assert config.server.log_format == "text"
        assert config.metadata.engine == "sqlite"
        assert config.metadata.sqlite_path == "./data/metadata.db"
        assert config.storage.backend == "local"
        assert config.storage.local_root == "./data/objects"
        assert config.mapping.lookup_scope == "global"
        assert config.mapping.cache_control == "public, max-age=3600"
        assert config.observability.metrics is True

    def test_load_minimal_config(self):
        """Loading an empty YAML uses defaults for all fields."""
        config = load_config(_write_yaml({}))
        assert config == S3BridgeConfig()
        assert config.server.port == 9000
        assert config.mapping.lookup_scope == "global"

    def test_load_custom_server(self):
        config = load_config(
            _write_yaml({"server": {"port": 9010, "host": "127.0.0.1", "log_level": "DEBUG"}})
        )
        assert config.server.port == 9010
        assert config.server.host == "127.0.0.1"
        assert config.server.log_level == "DEBUG"

    def test_nested_metadata_sqlite_path(self):
        """metadata.sqlite.path is correctly parsed from nested YAML."""
        config = load_config(
            _write_yaml({"metadata": {"engine": "sqlite", "sqlite": {"path": "/custom/path.db"}}})
        )
        assert config.metadata.sqlite_path == "/custom/path.db"

    def test_nested_storage_sections(self):
        config = load_config(
            _write_yaml(
                {
                    "storage": {
                        "backend": "memory",
                        "local": {"root_dir": "/srv/objects"},
                        "memory": {"max_size_bytes": 1024},
                    }
                }
            )
        )
        assert config.storage.backend == "memory"
        assert config.storage.local_root == "/srv/objects"
        assert config.storage.memory_max_size_bytes == 1024

    def test_bucket_lookup_scope(self):
        config = load_config(_write_yaml({"mapping": {"lookup_scope": "bucket"}}))
        assert config.mapping.lookup_scope == "bucket"

    def test_invalid_lookup_scope_rejected(self):
        with pytest.raises(pydantic.ValidationError):
            load_config(_write_yaml({"mapping": {"lookup_scope": "galaxy"}}))

    def test_observability_toggles(self):
        config = load_config(
            _write_yaml({"observability": {"metrics": False, "health_check": False}})
        )
        assert config.observability.metrics is False
        assert config.observability.health_check is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml")
