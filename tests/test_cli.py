"""Tests for the command line interface."""

import logging
import os

import pytest
import toml

from conftest import small_config
import Seismos.logging as seismos_logging
from Seismos.cli import build_parser, main


@pytest.fixture
def restore_log_level():
    level = seismos_logging.level
    yield
    seismos_logging.set_level(level)


class TestCli:
    """Argument parsing and exit codes."""

    def test_parser(self):
        ns = build_parser().parse_args(["input.toml", "-o", "out", "--print-matrices"])
        assert ns.input == "input.toml"
        assert ns.output_dir == "out"
        assert ns.print_matrices
        assert not ns.reference_fine
        assert not ns.quiet

    def test_missing_input(self, tmp_path):
        assert main([str(tmp_path / "missing.toml")]) == 1

    def test_invalid_input(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[parameters]\nT = -1.0\n")
        assert main([str(path)]) == 1

    def test_run(self, tmp_path, restore_log_level):
        path = tmp_path / "input.toml"
        config = small_config("ignored", parameters={"T": 1e-3})
        path.write_text(toml.dumps(config))

        out = tmp_path / "out"
        assert main([str(path), "-o", str(out), "--quiet"]) == 0
        assert seismos_logging.level == logging.WARNING
        assert os.path.exists(out / "snapshots" / "GMsFEM.toml")
        assert not os.path.exists("ignored")
