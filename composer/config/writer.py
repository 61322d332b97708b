"""Stack configuration file generation."""
from pathlib import Path
from typing import Optional
from jinja2 import Environment, FileSystemLoader

from .loader import ConfigLoader
from .schema import DeploymentConfig

DEFAULT_PROJECT_NAME = "function-fleet"


class StackConfigWriter:
    """Writes ``Pulumi.<stack>.yaml`` files from a validated configuration."""

    def __init__(self, project_dir: str = ".", project_name: Optional[str] = None):
        """Initialize the writer.

        Args:
            project_dir: Directory holding ``Pulumi.yaml``.
            project_name: Config namespace; read from ``Pulumi.yaml`` when omitted.
        """
        self.project_dir = Path(project_dir)
        self.project_name = (
            project_name
            or ConfigLoader.project_name(self.project_dir)
            or DEFAULT_PROJECT_NAME
        )

        template_dir = Path(__file__).parent / "templates"
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            trim_blocks=True,
            lstrip_blocks=True
        )

    def stack_file(self, stack: str) -> Path:
        return self.project_dir / f"Pulumi.{stack}.yaml"

    def render(self, config: DeploymentConfig) -> str:
        template = self.jinja_env.get_template("stack.yaml.j2")
        return template.render(
            project=self.project_name,
            config=config,
            foundation=config.foundation,
        )

    def write(self, stack: str, config: DeploymentConfig, force: bool = False) -> Path:
        """Render the stack file for ``stack``.

        Raises:
            FileExistsError: If the file exists and ``force`` is False.
        """
        path = self.stack_file(stack)
        if path.exists() and not force:
            raise FileExistsError(f"Stack configuration already exists: {path}")
        path.write_text(self.render(config))
        return path
