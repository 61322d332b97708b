"""Pydantic models for stack configuration."""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..resources.runtime import DotNetVersion

DEFAULT_BUILD_COMMAND = "dotnet clean && dotnet publish --output publish"
DEFAULT_BUILD_DIR = "../FunctionApp"
DEFAULT_PUBLISH_PATH = "../FunctionApp/publish"
DEFAULT_FUNCTION_NAME = "MyCoolFunction"
DEFAULT_UNIT_PREFIX = "cool-function"

FOUNDATION_KEYS = ("foundationOrgName", "foundationProjectName", "foundationStackName")
BUILD_KEYS = ("build-command", "build-dir", "skip-build")


class OutputStyle(str, Enum):
    """How unit URLs are exported from the stack."""
    AGGREGATE = "aggregate"
    PER_UNIT = "per-unit"


class FoundationReference(BaseModel):
    """Pointer to the stack that owns the shared resource group and storage account."""
    model_config = ConfigDict(frozen=True)

    org_name: str
    project_name: str
    stack_name: str

    @property
    def stack_path(self) -> str:
        return f"{self.org_name}/{self.project_name}/{self.stack_name}"


class BuildSettings(BaseModel):
    """Local command that publishes the function artifact."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    command: str = Field(default=DEFAULT_BUILD_COMMAND, alias="build-command", min_length=1)
    directory: str = Field(default=DEFAULT_BUILD_DIR, alias="build-dir", min_length=1)
    skip: bool = Field(default=False, alias="skip-build")


class DeploymentConfig(BaseModel):
    """Root configuration of one composition pass.

    Field aliases are the stack configuration keys, so a mapping read from
    ``pulumi.Config`` or a ``Pulumi.<stack>.yaml`` file validates directly.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    location: str = Field(min_length=1)
    function_count: int = Field(alias="function-count", ge=0)
    function_name: str = Field(default=DEFAULT_FUNCTION_NAME, alias="function-name", min_length=1)
    unit_prefix: str = Field(default=DEFAULT_UNIT_PREFIX, alias="unit-prefix", min_length=1)
    publish_path: str = Field(default=DEFAULT_PUBLISH_PATH, alias="publish-path", min_length=1)
    runtime_version: DotNetVersion = Field(default=DotNetVersion.V8, alias="runtime-version")
    output_style: OutputStyle = Field(default=OutputStyle.AGGREGATE, alias="output-style")
    build: BuildSettings = Field(default_factory=BuildSettings)
    foundation_org_name: Optional[str] = Field(default=None, alias="foundationOrgName")
    foundation_project_name: Optional[str] = Field(default=None, alias="foundationProjectName")
    foundation_stack_name: Optional[str] = Field(default=None, alias="foundationStackName")

    @field_validator("runtime_version", mode="before")
    @classmethod
    def _parse_runtime_version(cls, value):
        if isinstance(value, str):
            return DotNetVersion.parse(value)
        return value

    @field_validator("output_style", mode="before")
    @classmethod
    def _normalize_output_style(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @model_validator(mode="after")
    def _check_foundation(self) -> "DeploymentConfig":
        names = [self.foundation_org_name, self.foundation_project_name, self.foundation_stack_name]
        if any(names) and not all(names):
            raise ValueError(f"{', '.join(FOUNDATION_KEYS)} must be set together or not at all")
        return self

    @property
    def foundation(self) -> Optional[FoundationReference]:
        """The configured foundation stack, or None for a self-contained stack."""
        if not self.foundation_org_name:
            return None
        return FoundationReference(
            org_name=self.foundation_org_name,
            project_name=self.foundation_project_name,
            stack_name=self.foundation_stack_name,
        )
