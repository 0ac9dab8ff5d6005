"""CLI tests for run-document and list-instances."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from fc_controller.models.instances import InstanceRecord
from fc_controller.models.types import OutcomeStatus
from fc_controller.orchestrator import Orchestrator
from fc_controller.services.run_service import RunService
from fc_ui.cli import main as cli
from tests.helpers.fakes import FakeControlPlane, no_interrupts, outcome

pytestmark = pytest.mark.unit_ui

runner = CliRunner()


@pytest.fixture
def plane(monkeypatch) -> FakeControlPlane:
    fake = FakeControlPlane()
    configs = []

    def _service(config):
        configs.append(config)
        return RunService(
            lambda: fake,
            orchestrator_factory=lambda cp, sink: Orchestrator(
                cp, sink, interrupt_source=no_interrupts
            ),
        )

    monkeypatch.setattr(cli, "configure_logging", lambda **kwargs: None)
    monkeypatch.setattr(cli.ctx_store, "service_factory", _service)
    fake.configs = configs  # type: ignore[attr-defined]
    return fake


def test_run_document_prints_each_outcome(plane: FakeControlPlane):
    plane.outcomes = [
        outcome("i-1", output="hello\n"),
        outcome("i-2", OutcomeStatus.FAILED, error="exit status 1", output=""),
    ]

    result = runner.invoke(
        cli.app,
        [
            "run-document",
            "-n", "AWS-RunShellScript",
            "-t", "i-1",
            "-t", "i-2",
            "-p", "commands:echo hello",
            "--region", "eu-west-1",
        ],
        catch_exceptions=False,
    )

    assert result.exit_code == 0
    assert "Initialized with targets: i-1, i-2" in result.output
    assert "i-1 - success:" in result.output
    assert "hello" in result.output
    assert "i-2 - failed:" in result.output
    assert "exit status 1" in result.output
    assert plane.submitted == [
        (["i-1", "i-2"], "AWS-RunShellScript", {"commands": "echo hello"})
    ]
    assert plane.configs[0].region == "eu-west-1"  # type: ignore[attr-defined]


def test_run_document_requires_name(plane: FakeControlPlane):
    result = runner.invoke(cli.app, ["run-document", "-t", "i-1"])
    assert result.exit_code == 1
    assert "no document name set to trigger" in result.output
    assert plane.submitted == []


def test_run_document_rejects_malformed_parameter(plane: FakeControlPlane):
    result = runner.invoke(cli.app, ["run-document", "-n", "doc", "-t", "i-1", "-p", "oops"])
    assert result.exit_code == 1
    assert "expected name:value" in result.output
    assert plane.submitted == []


def test_run_document_without_targets(plane: FakeControlPlane):
    result = runner.invoke(cli.app, ["run-document", "-n", "doc"])
    assert result.exit_code == 1
    assert "no targets set" in result.output


def test_run_document_submission_failure(plane: FakeControlPlane):
    plane.submit_error = RuntimeError("InvalidInstanceId")
    result = runner.invoke(cli.app, ["run-document", "-n", "doc", "-t", "i-1"])
    assert result.exit_code == 1
    assert "Run failed: failed to run command [submit]: InvalidInstanceId" in result.output


def test_run_document_timeout(plane: FakeControlPlane):
    plane.outcomes = [outcome("i-1")]
    plane.close = False
    result = runner.invoke(
        cli.app, ["run-document", "-n", "doc", "-t", "i-1", "-t", "i-2", "-i", "0.2"]
    )
    assert result.exit_code == 1
    assert "i-1 - success:" in result.output
    assert "timeout reached" in result.output
    assert "i-2 -" not in result.output


def test_list_instances_output_feeds_target_file(plane: FakeControlPlane, tmp_path):
    plane.instances = [
        InstanceRecord(InstanceId="i-1", Name="web-1", PingStatus="Online"),
        InstanceRecord(InstanceId="i-2"),
    ]
    plane.outcomes = [outcome("i-1"), outcome("i-2")]
    target_file = tmp_path / "instances.json"

    listed = runner.invoke(cli.app, ["list-instances", "--output", str(target_file)])
    assert listed.exit_code == 0
    assert "Wrote 2 instance(s)" in listed.output
    assert json.loads(target_file.read_text(encoding="utf-8"))[0] == {
        "InstanceId": "i-1",
        "Name": "web-1",
        "PingStatus": "Online",
    }

    ran = runner.invoke(
        cli.app, ["run-document", "-n", "doc", "--target-file", str(target_file)]
    )
    assert ran.exit_code == 0
    assert plane.submitted[0][0] == ["i-1", "i-2"]


def test_list_instances_table(plane: FakeControlPlane):
    plane.instances = [
        InstanceRecord(InstanceId="i-1", Name="web-1", State="running", ImageId="ami-123")
    ]
    result = runner.invoke(cli.app, ["list-instances"], env={"COLUMNS": "200"})
    assert result.exit_code == 0
    for text in ("Instance ID", "State", "Image ID", "i-1", "web-1", "running", "ami-123"):
        assert text in result.output


@pytest.mark.parametrize("timeout", ["inf", "nan", "1e10", "0"])
def test_run_document_rejects_unusable_timeout(plane: FakeControlPlane, timeout):
    result = runner.invoke(cli.app, ["run-document", "-n", "doc", "-t", "i-1", "-i", timeout])
    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert plane.submitted == []
