"""Tests for engine configuration and logging setup."""

import json

import pytest
from pydantic import ValidationError

from pledge_domain.engine.positions import simulate_redemption
from pledge_domain.engine.yields import harvest_split, simulate_yield_display
from pledge_domain.errors import SimulatedValueError
from pledge_domain.fixed_point import WAD
from pledge_domain.logging import configure_logging, get_logger
from pledge_domain.schemas import EngineCFG, PledgePhase, PledgeSnapshot


def make_snapshot() -> PledgeSnapshot:
    return PledgeSnapshot(
        address="0x5fbdb2315678afecb367f032d93f642f64180aa3",
        funding_goal=10 * WAD,
        deadline=1_750_000_000,
        founder_share_bps=5100,
        phase=PledgePhase.ACTIVE,
        total_raised=10 * WAD,
        vault_balance=10 * WAD,
    )


class TestEngineCFG:

    def test_protocol_defaults(self):
        """Test the protocol default values."""
        cfg = EngineCFG()
        assert cfg.harvest_threshold == 10**15
        assert cfg.holder_yield_pct == 80
        assert cfg.slippage_buffer_bps == 100
        assert cfg.min_contribution == 10**14
        assert cfg.listing_fee == 10**16
        assert cfg.min_funding_goal == 10**15

    @pytest.mark.parametrize("overrides", [
        {"holder_yield_pct": 101},
        {"slippage_buffer_bps": -1},
        {"harvest_threshold": -1},
    ])
    def test_out_of_range_rejected(self, overrides):
        """Test out-of-range values are rejected."""
        with pytest.raises(ValidationError):
            EngineCFG(**overrides)

    def test_validate_assignment(self):
        """Test assignment is validated."""
        cfg = EngineCFG()
        with pytest.raises(ValidationError):
            cfg.holder_yield_pct = 150


class TestFromYaml:

    def test_overrides(self, tmp_path):
        """Test YAML values override the defaults."""
        path = tmp_path / "engine.yaml"
        path.write_text("slippage_buffer_bps: 200\nholder_yield_pct: 90\n")
        cfg = EngineCFG.from_yaml(path)
        assert cfg.slippage_buffer_bps == 200
        assert cfg.holder_yield_pct == 90
        assert cfg.harvest_threshold == 10**15

    def test_empty_file_gives_defaults(self, tmp_path):
        """Test an empty YAML file gives the defaults."""
        path = tmp_path / "engine.yaml"
        path.write_text("")
        assert EngineCFG.from_yaml(str(path)) == EngineCFG()

    def test_invalid_value(self, tmp_path):
        """Test an invalid YAML value raises ValidationError."""
        path = tmp_path / "engine.yaml"
        path.write_text("holder_yield_pct: 120\n")
        with pytest.raises(ValidationError):
            EngineCFG.from_yaml(path)

    def test_missing_file(self, tmp_path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            EngineCFG.from_yaml(tmp_path / "absent.yaml")

    def test_loaded_config_drives_engine(self, tmp_path):
        """Test a loaded config changes engine results."""
        path = tmp_path / "engine.yaml"
        path.write_text("holder_yield_pct: 50\n")
        split = harvest_split(10**15, EngineCFG.from_yaml(path))
        assert split.holder_share == split.protocol_share == 5 * 10**14


class TestLogging:

    @pytest.fixture(autouse=True)
    def restore_logging(self):
        yield
        configure_logging(level="WARNING")

    def _json_lines(self, output):
        return [json.loads(line) for line in output.splitlines() if line.strip()]

    def test_level_filters_engine_debug_events(self, capsys):
        """Test engine debug events are dropped below the configured level."""
        configure_logging(level="WARNING", format_json=True)
        preview = simulate_redemption(make_snapshot(), 0)
        assert not preview.ok
        assert "preview_rejected" not in capsys.readouterr().out

    def test_json_engine_events(self, capsys):
        """Test engine events render as JSON lines tagged with the subsystem."""
        configure_logging(level="DEBUG", format_json=True, include_timestamp=False)
        simulate_redemption(make_snapshot(), 0)

        events = self._json_lines(capsys.readouterr().out)
        rejected = [e for e in events if e["event"] == "preview_rejected"]
        assert len(rejected) == 1
        assert rejected[0]["subsystem"] == "pledge_engine"
        assert rejected[0]["level"] == "debug"
        assert rejected[0]["reason"] == "non_positive_amount"
        assert rejected[0]["logger"] == "pledge_domain.engine.positions"
        assert "timestamp" not in rejected[0]

    def test_reconfigure_reaches_used_loggers(self, capsys):
        """Test a second configure_logging call applies to loggers already used."""
        configure_logging(level="DEBUG", format_json=True)
        simulate_redemption(make_snapshot(), 0)
        assert "preview_rejected" in capsys.readouterr().out

        configure_logging(level="ERROR", format_json=True)
        simulate_redemption(make_snapshot(), 0)
        assert capsys.readouterr().out == ""

    def test_simulated_value_warning(self, capsys):
        """Test a simulated value reaching accounting logs a warning."""
        configure_logging(level="WARNING", format_json=True, include_timestamp=False)
        with pytest.raises(SimulatedValueError):
            harvest_split(simulate_yield_display(10**15, 30))

        events = self._json_lines(capsys.readouterr().out)
        assert [e["event"] for e in events] == ["simulated_value_rejected"]
        assert events[0]["level"] == "warning"
        assert events[0]["field"] == "accrued_yield"

    def test_console_format(self, capsys):
        """Test the console renderer names the event and its fields."""
        configure_logging(level="DEBUG")
        get_logger("tests").debug("console_event", value=1)
        output = capsys.readouterr().out
        assert "console_event" in output
        assert "value=1" in output

    def test_logging_does_not_change_results(self):
        """Test harvest results are the same at every log level."""
        configure_logging(level="DEBUG")
        debug_split = harvest_split(10**15)
        configure_logging(level="ERROR")
        assert harvest_split(10**15) == debug_split
        assert debug_split.holder_share == 8 * 10**14
