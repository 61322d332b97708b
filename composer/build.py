"""Publishing the function artifact before resources are declared."""
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path

import pulumi

from .config.schema import BuildSettings
from .errors import BuildError

# Added on top of the inherited environment for every build.
BUILD_ENVIRONMENT = {
    "DOTNET_CLI_TELEMETRY_OPTOUT": "1",
}

# Lines of build output kept in a failure message.
OUTPUT_TAIL_LINES = 20


@dataclass
class BuildResult:
    """Output of a completed build."""
    command: str
    directory: Path
    stdout: str = ""
    stderr: str = ""
    skipped: bool = False


def publish_artifact(settings: BuildSettings, publish_path: str) -> BuildResult:
    """Run the build command and check that it produced the publish directory.

    Args:
        settings: Build command, working directory and skip flag.
        publish_path: Directory the blob archive is created from.

    Returns:
        BuildResult: Captured command output.

    Raises:
        BuildError: If the working directory is missing, the command exits
            non-zero, or the publish directory does not exist afterwards.
    """
    work_dir = Path(settings.directory).resolve()

    if settings.skip:
        pulumi.log.info(f"Skipping build; using existing artifact at {publish_path}")
        result = BuildResult(settings.command, work_dir, skipped=True)
    else:
        if not work_dir.is_dir():
            raise BuildError(f"Build directory not found: {work_dir}")

        pulumi.log.info(f"Publishing function artifact in {work_dir}")
        try:
            completed = subprocess.run(
                settings.command,
                shell=True,
                cwd=work_dir,
                env={**os.environ, **BUILD_ENVIRONMENT},
                capture_output=True,
                text=True,
                check=True
            )
        except subprocess.CalledProcessError as e:
            output = output_tail(e.stdout, e.stderr)
            raise BuildError(
                f"Build command failed with exit code {e.returncode}: {settings.command}\n{output}",
                stdout=e.stdout or "",
                stderr=e.stderr or "",
            ) from e

        pulumi.log.debug(completed.stdout)
        result = BuildResult(settings.command, work_dir, completed.stdout, completed.stderr)

    if not Path(publish_path).is_dir():
        raise BuildError(f"Publish output not found: {Path(publish_path).resolve()}")

    return result


def output_tail(stdout, stderr, lines: int = OUTPUT_TAIL_LINES) -> str:
    """Last ``lines`` lines of the build's stdout followed by its stderr.

    ``dotnet publish`` reports compiler errors on stdout, so both streams are kept.
    """
    parts = []
    for text in (stdout, stderr):
        if text and text.strip():
            parts.append("\n".join(text.rstrip().splitlines()[-lines:]))
    return "\n".join(parts) or "(no output)"
