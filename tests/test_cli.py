"""
Tests for the command line interface.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from aura.cli import main


def run(capsys: pytest.CaptureFixture, *argv: str) -> tuple[int, str, str]:
    code = main(list(argv))
    captured = capsys.readouterr()
    return code, captured.out, captured.err


class TestDeviceCommands:
    """Tests for the device command."""

    def test_device_id_stable(self, sample_config: Path, capsys) -> None:
        """Test the installation id is persisted between runs."""
        code, first, _ = run(capsys, "-c", str(sample_config), "device", "id")
        assert code == 0

        _, second, _ = run(capsys, "-c", str(sample_config), "device", "id")
        assert first.strip() == second.strip()
        assert first.strip()

    def test_device_info(self, sample_config: Path, capsys) -> None:
        code, out, _ = run(capsys, "-c", str(sample_config), "--json", "device", "info")

        assert code == 0
        data = json.loads(out)
        assert data["deviceName"] == "CI Runner"
        assert data["appVersion"] == "2.3.0"

    def test_register_check_unregister(self, sample_config: Path, capsys) -> None:
        """Test the binding lifecycle through the CLI."""
        config = ["-c", str(sample_config), "--json"]

        code, out, _ = run(capsys, *config, "device", "register", "alice")
        assert code == 0
        device_id = json.loads(out)["deviceId"]

        code, out, _ = run(capsys, *config, "device", "check", "alice")
        assert code == 0
        assert json.loads(out) == {"allowed": True}

        code, out, _ = run(capsys, *config, "device", "show", "alice")
        assert code == 0
        assert json.loads(out)["deviceId"] == device_id

        code, out, _ = run(capsys, *config, "device", "list")
        assert code == 0
        assert [b["userId"] for b in json.loads(out)] == ["alice"]

        code, _, _ = run(capsys, *config, "device", "unregister", "alice")
        assert code == 0

        code, _, err = run(capsys, *config, "device", "show", "alice")
        assert code == 1
        assert "No device bound" in err

    def test_check_bound_elsewhere(
        self, sample_config: Path, temp_dir: Path, capsys
    ) -> None:
        """Test a binding made by another installation is refused."""
        store_path = temp_dir / "store.json"
        store_path.write_text(json.dumps({
            "@aura_user_device_mapping:alice": json.dumps({
                "deviceId": "someone-elses-phone",
                "deviceName": "Other Phone",
                "platform": "ios",
                "osVersion": "17.2",
                "appVersion": "1.0.0",
                "registeredAt": "2024-05-01T09:30:00Z",
            }),
        }))

        code, out, _ = run(capsys, "-c", str(sample_config), "--json", "device", "check", "alice")
        assert code == 2
        data = json.loads(out)
        assert data["allowed"] is False
        assert data["existingDevice"]["deviceId"] == "someone-elses-phone"

        code, _, err = run(capsys, "-c", str(sample_config), "device", "register", "alice")
        assert code == 2
        assert "another device" in err

        code, out, _ = run(
            capsys, "-c", str(sample_config), "--json", "device", "register", "alice", "--force"
        )
        assert code == 0
        assert json.loads(out)["deviceId"] != "someone-elses-phone"

    def test_corrupt_store_fails_open(
        self, sample_config: Path, temp_dir: Path, capsys
    ) -> None:
        """Test an unreadable store never blocks the check."""
        (temp_dir / "store.json").write_text("{corrupt")

        code, out, _ = run(capsys, "-c", str(sample_config), "--json", "device", "check", "alice")

        assert code == 0
        assert json.loads(out) == {"allowed": True}


class TestTrustCommands:
    """Tests for the trust command."""

    def test_evaluate_file(self, sample_config: Path, temp_dir: Path, capsys) -> None:
        record = temp_dir / "trust.json"
        record.write_text(json.dumps({
            "score": 35,
            "level": "restricted",
            "verifiedId": False,
            "verifiedBusiness": False,
            "completedBookings": 0,
            "avgResponseTime": 0,
            "cancellationRate": 0,
            "disputeCount": 0,
        }))

        code, out, _ = run(
            capsys, "-c", str(sample_config), "--json", "trust", "evaluate", str(record)
        )

        assert code == 0
        data = json.loads(out)
        assert data["badge"]["label"] == "Restricted"
        assert data["recommendations"] == [
            "Complete ID verification to boost your trust score",
            "Complete more bookings to build reputation",
        ]

    def test_evaluate_invalid(self, sample_config: Path, temp_dir: Path, capsys) -> None:
        record = temp_dir / "trust.json"
        record.write_text(json.dumps({"score": 35, "level": "gold"}))

        code, _, err = run(capsys, "-c", str(sample_config), "trust", "evaluate", str(record))

        assert code == 1
        assert "invalid trust record" in err

    def test_calculate(self, sample_config: Path, capsys) -> None:
        code, out, _ = run(
            capsys,
            "-c", str(sample_config), "--json",
            "trust", "calculate",
            "--verified-id", "--verified-business",
            "--bookings", "25",
            "--response-time", "15",
            "--cancellation-rate", "0.05",
        )

        assert code == 0
        data = json.loads(out)
        assert data["score"] == 95
        assert data["level"] == "verified"

    def test_calculate_invalid(self, sample_config: Path, capsys) -> None:
        code, _, _ = run(
            capsys, "-c", str(sample_config), "trust", "calculate", "--cancellation-rate", "4"
        )
        assert code == 1


class TestGeneralCommands:
    """Tests for validation and global options."""

    def test_validate(self, sample_config: Path, capsys) -> None:
        code, out, _ = run(capsys, "-c", str(sample_config), "validate")
        assert code == 0
        assert "valid" in out

    def test_validate_errors(self, temp_dir: Path, capsys) -> None:
        bad = temp_dir / "bad.yaml"
        with open(bad, "w") as f:
            yaml.dump({"storage": {"backend": "redis", "mapping_mode": "sharded"}}, f)

        code, _, err = run(capsys, "-c", str(bad), "validate")

        assert code == 1
        assert "backend" in err
        assert "mapping_mode" in err

    def test_missing_config(self, temp_dir: Path, capsys) -> None:
        code, _, err = run(capsys, "-c", str(temp_dir / "missing.yaml"), "validate")
        assert code == 1
        assert "not found" in err

    def test_malformed_yaml(self, temp_dir: Path, capsys) -> None:
        bad = temp_dir / "bad.yaml"
        bad.write_text("invalid: yaml: content: [")

        code, _, err = run(capsys, "-c", str(bad), "validate")

        assert code == 1
        assert "invalid configuration" in err

    def test_unknown_config_key(self, temp_dir: Path, capsys) -> None:
        """Test an unknown setting exits cleanly instead of crashing."""
        bad = temp_dir / "bad.yaml"
        bad.write_text("storage:\n  backnd: file\n")

        code, _, err = run(capsys, "-c", str(bad), "device", "id")

        assert code == 1
        assert "backnd" in err

    def test_no_command(self, capsys) -> None:
        code, out, _ = run(capsys)
        assert code == 0
        assert "usage" in out.lower()
