"""
Smoke tests for configuration loading and validation.
"""

import pytest

from main import load_config, validate_config
from models.config import Config, DetectorConfig


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["detector", "storage", "log_path", "log_level"])
    def test_missing_required_section(self, valid_config, section):
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error

    def test_missing_model_path(self, valid_config):
        valid_config["detector"]["model_path"] = ""
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "model_path" in error

    def test_threshold_out_of_range(self, valid_config):
        valid_config["detector"]["conf_threshold"] = 1.5
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "conf_threshold" in error

    def test_non_positive_input_size(self, valid_config):
        valid_config["detector"]["input_width"] = 0
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "input_width" in error

    def test_mean_needs_three_values(self, valid_config):
        valid_config["detector"]["mean"] = [0.5, 0.5]
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "mean" in error

    def test_zero_std(self, valid_config):
        valid_config["detector"]["std"] = [0.2, 0.0, 0.2]
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "std" in error

    def test_unknown_resize_mode(self, valid_config):
        valid_config["detector"]["resize_mode"] = "letterbox"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "resize_mode" in error

    def test_capacity_must_be_positive(self, valid_config):
        valid_config["queue"]["capacity"] = 0
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "capacity" in error

    def test_poll_interval_must_be_positive(self, valid_config):
        valid_config["scheduler"]["poll_interval_ms"] = -5
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "poll_interval_ms" in error

    def test_missing_results_dir(self, valid_config):
        del valid_config["storage"]["results_dir"]
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "results_dir" in error

    def test_invalid_port(self, valid_config):
        valid_config["server"]["port"] = 70000
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "port" in error

    def test_invalid_log_level(self, valid_config):
        valid_config["log_level"] = "VERBOSE"
        is_valid, error = validate_config(valid_config)
        assert is_valid is False
        assert "log_level" in error


class TestLoadConfig:
    def test_layers_default_and_overrides(self, tmp_path):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "default.yaml").write_text(
            "detector:\n  model_path: a.onnx\n  conf_threshold: 0.5\nlog_level: INFO\n"
        )
        (config_dir / "config.yaml").write_text("detector:\n  conf_threshold: 0.7\n")

        cfg = load_config(str(config_dir / "config.yaml"))

        assert cfg["detector"] == {"model_path": "a.onnx", "conf_threshold": 0.7}
        assert cfg["log_level"] == "INFO"

    def test_explicit_config_applied_last(self, tmp_path):
        config_dir = tmp_path / "config"
        config_dir.mkdir()
        (config_dir / "default.yaml").write_text("queue:\n  capacity: 10000\n")
        explicit = config_dir / "prod.yaml"
        explicit.write_text("queue:\n  capacity: 50\n")

        assert load_config(str(explicit))["queue"]["capacity"] == 50

    def test_missing_files_give_empty_config(self, tmp_path):
        assert load_config(str(tmp_path / "config" / "config.yaml")) == {}


class TestTypedConfig:
    def test_defaults(self):
        cfg = Config.from_dict({})
        assert cfg.queue.capacity == 10000
        assert cfg.scheduler.poll_interval == pytest.approx(0.01)
        assert cfg.detector.input_width == 640
        assert cfg.detector.input_height == 480
        assert cfg.detector.conf_threshold == 0.5
        assert cfg.detector.iou_threshold == 0.5
        assert cfg.detector.mean == [0.485, 0.456, 0.406]
        assert cfg.detector.std == [0.229, 0.224, 0.225]
        assert cfg.server.port == 8082

    def test_round_trip(self, valid_config):
        cfg = Config.from_dict(valid_config)
        assert Config.from_dict(cfg.to_dict()) == cfg

    def test_input_ratio(self):
        assert DetectorConfig(input_width=640, input_height=320).input_ratio == 2.0

    def test_default_mean_not_shared(self):
        a = DetectorConfig()
        a.mean[0] = 0.0
        assert DetectorConfig().mean[0] == 0.485
