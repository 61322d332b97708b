"""Tests for publishing the function artifact."""
import subprocess
import pytest
from unittest.mock import MagicMock, patch
from composer.build import BUILD_ENVIRONMENT, output_tail, publish_artifact
from composer.config.schema import BuildSettings
from composer.errors import BuildError


@pytest.fixture(autouse=True)
def quiet_log():
    """Keep pulumi.log off the engine outside a Pulumi run."""
    with patch("composer.build.pulumi.log") as log:
        yield log


@pytest.fixture
def project(tmp_path):
    """A sibling packaging project with an existing publish directory."""
    app_dir = tmp_path / "FunctionApp"
    (app_dir / "publish").mkdir(parents=True)
    return app_dir


@patch("composer.build.subprocess.run")
def test_publish_runs_command_in_project(mock_run, project):
    """Test the command, working directory and environment of the build."""
    mock_run.return_value = MagicMock(stdout="Build succeeded.", stderr="")
    settings = BuildSettings(command="dotnet publish --output publish", directory=str(project))

    result = publish_artifact(settings, str(project / "publish"))

    args, kwargs = mock_run.call_args
    assert args[0] == "dotnet publish --output publish"
    assert kwargs["shell"] is True
    assert kwargs["check"] is True
    assert kwargs["cwd"] == project.resolve()
    assert kwargs["env"]["DOTNET_CLI_TELEMETRY_OPTOUT"] == "1"
    assert BUILD_ENVIRONMENT == {"DOTNET_CLI_TELEMETRY_OPTOUT": "1"}

    assert result.stdout == "Build succeeded."
    assert result.skipped is False


@patch("composer.build.subprocess.run")
def test_publish_failure_raises_build_error(mock_run, project):
    """Test that a non-zero exit is a hard failure carrying stderr."""
    mock_run.side_effect = subprocess.CalledProcessError(
        1, "dotnet publish", output="", stderr="error CS1002: ; expected"
    )
    settings = BuildSettings(directory=str(project))

    with pytest.raises(BuildError) as exc_info:
        publish_artifact(settings, str(project / "publish"))

    assert "exit code 1" in str(exc_info.value)
    assert exc_info.value.stderr == "error CS1002: ; expected"


@patch("composer.build.subprocess.run")
def test_missing_build_directory(mock_run, tmp_path):
    """Test that a missing packaging project fails without running anything."""
    settings = BuildSettings(directory=str(tmp_path / "missing"))

    with pytest.raises(BuildError) as exc_info:
        publish_artifact(settings, str(tmp_path / "missing" / "publish"))

    assert "Build directory not found" in str(exc_info.value)
    mock_run.assert_not_called()


@patch("composer.build.subprocess.run")
def test_missing_publish_output(mock_run, tmp_path):
    """Test that a build that produced no publish directory fails."""
    mock_run.return_value = MagicMock(stdout="", stderr="")
    app_dir = tmp_path / "FunctionApp"
    app_dir.mkdir()

    with pytest.raises(BuildError) as exc_info:
        publish_artifact(BuildSettings(directory=str(app_dir)), str(app_dir / "publish"))

    assert "Publish output not found" in str(exc_info.value)


@patch("composer.build.subprocess.run")
def test_skip_build_uses_existing_artifact(mock_run, project):
    """Test that skip-build only checks the publish directory."""
    settings = BuildSettings(directory=str(project), skip=True)

    result = publish_artifact(settings, str(project / "publish"))

    assert result.skipped is True
    mock_run.assert_not_called()


@patch("composer.build.subprocess.run")
def test_publish_failure_message_carries_build_output(mock_run, project):
    """Test that compiler errors on stdout and warnings on stderr reach the message."""
    mock_run.side_effect = subprocess.CalledProcessError(
        1,
        "dotnet publish",
        output="Restore complete.\nProgram.cs(3,9): error CS1002: ; expected\n",
        stderr="warn 99",
    )

    with pytest.raises(BuildError) as exc_info:
        publish_artifact(BuildSettings(directory=str(project)), str(project / "publish"))

    message = str(exc_info.value)
    assert "error CS1002" in message
    assert "warn 99" in message
    assert exc_info.value.stdout.startswith("Restore complete.")


def test_output_tail_keeps_last_lines():
    """Test trimming long build output to its last lines."""
    stdout = "\n".join(f"line {i}" for i in range(50))

    tail = output_tail(stdout, "", lines=3)

    assert tail == "line 47\nline 48\nline 49"
    assert output_tail(None, "  ") == "(no output)"
