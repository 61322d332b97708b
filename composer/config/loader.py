"""Stack configuration loading."""
import yaml
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from pydantic import ValidationError

from .schema import BUILD_KEYS, FOUNDATION_KEYS, DeploymentConfig
from ..errors import ConfigurationError, MissingConfigError

AZURE_NAMESPACE = "azure-native"
PROJECT_FILE = "Pulumi.yaml"

PROJECT_KEYS = (
    "location",
    "function-count",
    "function-name",
    "unit-prefix",
    "publish-path",
    "runtime-version",
    "output-style",
) + BUILD_KEYS + FOUNDATION_KEYS


class ConfigSource(Protocol):
    """Anything with a ``get(key)`` returning None for absent keys.

    ``pulumi.Config`` and plain dicts both qualify.
    """

    def get(self, key: str) -> Optional[Any]:
        ...


class ConfigLoader:
    """Builds a validated DeploymentConfig from stack configuration."""

    @staticmethod
    def from_values(project: ConfigSource, azure: Optional[ConfigSource] = None) -> DeploymentConfig:
        """Validate configuration read from project and ``azure-native`` namespaces.

        Args:
            project: Source for the project's own keys.
            azure: Source for ``azure-native`` keys; ``location`` falls back to it.

        Returns:
            DeploymentConfig: Validated configuration.

        Raises:
            MissingConfigError: If a required key is absent.
            ConfigurationError: If a key is present but malformed.
        """
        raw: Dict[str, Any] = {}
        for key in PROJECT_KEYS:
            value = project.get(key)
            if value is not None:
                raw[key] = value

        if "location" not in raw and azure is not None:
            location = azure.get("location")
            if location is not None:
                raw["location"] = location

        build = {key: raw.pop(key) for key in BUILD_KEYS if key in raw}
        if build:
            raw["build"] = build

        return ConfigLoader.validate(raw)

    @staticmethod
    def from_pulumi() -> DeploymentConfig:
        """Load configuration of the currently running Pulumi stack."""
        import pulumi
        return ConfigLoader.from_values(pulumi.Config(), pulumi.Config(AZURE_NAMESPACE))

    @staticmethod
    def from_stack_file(file_path: str) -> DeploymentConfig:
        """Load and validate a ``Pulumi.<stack>.yaml`` file.

        Keys are taken from the ``azure-native`` namespace and from the project
        namespace named in the sibling ``Pulumi.yaml``; any other namespace is
        treated as the project's when no project file is found.

        Raises:
            FileNotFoundError: If the stack file doesn't exist.
            yaml.YAMLError: If the YAML is malformed.
            ConfigurationError: If the configuration is invalid.
        """
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        project_name = ConfigLoader.project_name(Path(file_path).parent)
        project: Dict[str, Any] = {}
        azure: Dict[str, Any] = {}
        for key, value in (data.get("config") or {}).items():
            namespace, _, name = str(key).partition(":")
            if not name or isinstance(value, dict):
                # Secrets are stored as {"secure": ...}; none of ours are secret
                continue
            if namespace == AZURE_NAMESPACE:
                azure[name] = value
            elif project_name is None or namespace == project_name:
                project[name] = value

        return ConfigLoader.from_values(project, azure)

    @staticmethod
    def project_name(project_dir: Path) -> Optional[str]:
        """Read the project name from ``Pulumi.yaml`` in a directory, if present."""
        project_file = Path(project_dir) / PROJECT_FILE
        if not project_file.exists():
            return None
        with open(project_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        return data.get("name")

    @staticmethod
    def validate(raw: Dict[str, Any]) -> DeploymentConfig:
        try:
            return DeploymentConfig.model_validate(raw)
        except ValidationError as e:
            missing = [_error_key(err) for err in e.errors() if err["type"] == "missing"]
            if missing:
                raise MissingConfigError(missing) from e
            details = "; ".join(f"{_error_key(err)}: {err['msg']}" for err in e.errors())
            raise ConfigurationError(f"Invalid configuration: {details}") from e


def _error_key(error: Dict[str, Any]) -> str:
    loc = [str(part) for part in error.get("loc", ()) if part != "build"]
    return ".".join(loc) or "config"
