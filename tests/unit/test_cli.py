"""Unit tests for the command-line interface."""

from unittest.mock import AsyncMock, patch

import pytest
from click.testing import CliRunner

from remuxarr import __version__
from remuxarr.cli import cli
from remuxarr.models.file import ProcessResult


@pytest.fixture
def runner():
    return CliRunner()


def patched_pipeline(status="success", **fields):
    pipeline_cls = patch("remuxarr.cli.RemuxPipeline")
    mock_cls = pipeline_cls.start()
    mock_cls.return_value.process = AsyncMock(
        side_effect=lambda path: ProcessResult(status=status, file_path=path, **fields)
    )
    return pipeline_cls, mock_cls


class TestCLI:
    """Test CLI commands."""

    def test_version(self, runner):
        result = runner.invoke(cli, ["version"], obj={})

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_process_success(self, runner, container):
        pipeline_cls, _ = patched_pipeline(stripped=1, changed=True)
        try:
            result = runner.invoke(cli, ["process", str(container)], obj={})
        finally:
            pipeline_cls.stop()

        assert result.exit_code == 0
        assert "stripped 1" in result.output

    def test_process_failure_exit_code(self, runner, container):
        pipeline_cls, _ = patched_pipeline("failed", reason="remux_failed")
        try:
            result = runner.invoke(cli, ["process", str(container)], obj={})
        finally:
            pipeline_cls.stop()

        assert result.exit_code == 1

    def test_plan_forces_dry_run(self, runner, container, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("policy:\n  strip_mode: strip_audio\n")
        pipeline_cls, mock_cls = patched_pipeline("dry_run")
        try:
            result = runner.invoke(cli, ["--config", str(config_file), "plan", str(container)], obj={})
        finally:
            pipeline_cls.stop()

        assert result.exit_code == 0
        config = mock_cls.call_args[0][0]
        assert config.execution.dry_run is True
        assert config.policy.strip_mode.value == "strip_audio"

    def test_invalid_config(self, runner, container, tmp_path):
        config_file = tmp_path / "config.yaml"
        config_file.write_text("logging:\n  format: xml\n")

        result = runner.invoke(cli, ["--config", str(config_file), "version"], obj={})

        assert result.exit_code == 1
        assert "Error loading configuration" in result.output
