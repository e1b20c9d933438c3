"""
Unit tests for configuration loading, logging setup and value types
"""

import json
import logging
import os
import sys

import pytest

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
sys.path.append(project_root)

from common.config import DEFAULTS, load_config
from common.logging_setup import JsonFormatter, setup_logging
from common.types import Bounds, LatLon, TileIndex


class TestLoadConfig:
    """YAML config with defaults"""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test missing file gives defaults"""
        cfg = load_config(str(tmp_path / "nope.yaml"))
        assert cfg == DEFAULTS
        # defaults are copied, not shared
        cfg["pyramid"]["tile_size"] = 1
        assert DEFAULTS["pyramid"]["tile_size"] == 256

    def test_partial_file_is_merged(self, tmp_path):
        """Test partial file is merged"""
        path = tmp_path / "pyramid.yaml"
        path.write_text("pyramid:\n  tile_size: 512\n")
        cfg = load_config(str(path))
        assert cfg["pyramid"]["tile_size"] == 512
        assert cfg["pyramid"]["legacy_tile_rounding"] is False
        assert cfg["logging"]["level"] == "INFO"

    def test_empty_file(self, tmp_path):
        """Test empty file"""
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(str(path)) == DEFAULTS

    def test_env_var(self, tmp_path, monkeypatch):
        """Test env var"""
        path = tmp_path / "env.yaml"
        path.write_text("pyramid:\n  strict: true\n")
        monkeypatch.setenv("PYRAMID_CONFIG", str(path))
        assert load_config()["pyramid"]["strict"] is True

    def test_non_mapping_raises(self, tmp_path):
        """Test non mapping raises"""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError, match="YAML mapping"):
            load_config(str(path))

    def test_repo_sample_config_loads(self):
        """Test repo sample config loads"""
        cfg = load_config(os.path.join(project_root, "config", "pyramid.yaml"))
        assert cfg["pyramid"]["tile_size"] == 256


class TestLogging:
    """JSON formatter and root setup"""

    def test_json_formatter(self):
        """Test json formatter"""
        record = logging.LogRecord("pyramid.test", logging.INFO, __file__, 1, "tile %d", (7,), None)
        record.extra = {"zoom": 3}
        payload = json.loads(JsonFormatter().format(record))
        assert payload["lvl"] == "INFO"
        assert payload["name"] == "pyramid.test"
        assert payload["msg"] == "tile 7"
        assert payload["extra"] == {"zoom": 3}
        assert isinstance(payload["t"], int)

    def test_json_formatter_uses_record_time(self):
        """Test json formatter uses record time"""
        record = logging.LogRecord("pyramid.cli", logging.INFO, __file__, 1, "done", (), None)
        record.created = 1700000000.25
        record.extra = {"tile": TileIndex(1, 2, 3)}
        payload = json.loads(JsonFormatter().format(record))
        assert payload["t"] == 1700000000250
        assert payload["extra"]["tile"] == str(TileIndex(1, 2, 3))
        assert "exc_info" not in payload

    def test_json_formatter_exception(self):
        """Test json formatter exception"""
        try:
            raise ValueError("boom")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        payload = json.loads(JsonFormatter().format(record))
        assert "ValueError: boom" in payload["exc_info"]

    def test_setup_logging_level_and_format(self, monkeypatch):
        """Test setup logging level and format"""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("LOG_FORMAT", raising=False)
        setup_logging("DEBUG", "text", force=True)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JsonFormatter)

        setup_logging("WARNING", force=False)  # already configured: no-op
        assert root.level == logging.DEBUG

        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        setup_logging(force=True)
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_unknown_level_falls_back_to_info(self):
        """Test unknown level falls back to info"""
        setup_logging("LOUD", force=True)
        assert logging.getLogger().level == logging.INFO


class TestTypes:
    """Value types"""

    def test_latlon_valid(self):
        """Test latlon valid"""
        p = LatLon(48.6263556, 2.2492123)
        assert (p.lat, p.lon) == (48.6263556, 2.2492123)

    @pytest.mark.parametrize("lat,lon", [(90.0, 0.0), (-90.0, 0.0), (0.0, 180.5), (float("nan"), 0.0)])
    def test_latlon_invalid(self, lat, lon):
        """Test latlon invalid"""
        with pytest.raises(ValueError):
            LatLon(lat, lon)

    def test_tile_index_unpacks(self):
        """Test tile index unpacks"""
        tx, ty, zoom = TileIndex(3, 5, 4)
        assert (tx, ty, zoom) == (3, 5, 4)
        assert TileIndex(3, 5, 4).to_dict() == {"x": 3, "y": 5, "zoom": 4}

    def test_tile_index_negative_zoom(self):
        """Test tile index negative zoom"""
        with pytest.raises(ValueError):
            TileIndex(0, 0, -1)

    def test_bounds(self):
        """Test bounds"""
        b = Bounds(1.0, 2.0, 3.0, 4.0)
        assert list(b) == [1.0, 2.0, 3.0, 4.0]
        assert b.to_list() == [1.0, 2.0, 3.0, 4.0]
