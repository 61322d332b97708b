"""The Pulumi program: one composition pass over the stack configuration."""
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import pulumi

from .build import publish_artifact
from .config.loader import ConfigLoader, ConfigSource
from .config.schema import BuildSettings, DeploymentConfig, OutputStyle
from .resources.foundation import Foundation, provision_foundation, reference_foundation
from .resources.function_app import FunctionEndpointUnit, FunctionEndpointUnitArgs
from .resources.naming import (
    API_URLS_OUTPUT,
    RESOURCE_GROUP_OUTPUT,
    STORAGE_ACCOUNT_OUTPUT,
    unit_name,
    unit_output_key,
)

Publisher = Callable[[BuildSettings, str], Any]


@dataclass
class Composition:
    """Everything declared by one pass, plus what the stack exports."""
    foundation: Foundation
    units: List[FunctionEndpointUnit] = field(default_factory=list)
    outputs: Dict[str, Any] = field(default_factory=dict)


def compose(config: DeploymentConfig, publish: Publisher = publish_artifact) -> Composition:
    """Declare the foundation and ``config.function_count`` endpoint units.

    The artifact is published before any resource is declared, so a failed
    build aborts the pass with nothing registered.

    Args:
        config: Validated stack configuration.
        publish: Builds the artifact; raises to abort the pass.

    Returns:
        Composition: Declared units and the outputs to export.
    """
    publish(config.build, config.publish_path)

    if config.foundation:
        foundation = reference_foundation(config.foundation)
    else:
        foundation = provision_foundation(config.location)

    composition = Composition(foundation=foundation)
    for i in range(config.function_count):
        unit = FunctionEndpointUnit(
            unit_name(config.unit_prefix, i),
            FunctionEndpointUnitArgs(
                resource_group_name=foundation.resource_group_name,
                storage_account_name=foundation.storage_account_name,
                region=config.location,
                function_name=config.function_name,
                publish_path=config.publish_path,
                dotnet_version=config.runtime_version,
            ),
        )
        composition.units.append(unit)

    pulumi.log.info(f"Declared {len(composition.units)} function endpoint unit(s)")

    if config.output_style is OutputStyle.PER_UNIT:
        for unit in composition.units:
            composition.outputs[unit_output_key(unit.unit_name)] = unit.api_url
    else:
        composition.outputs[API_URLS_OUTPUT] = pulumi.Output.all(
            *[unit.api_url for unit in composition.units]
        )

    if foundation.owned:
        composition.outputs[RESOURCE_GROUP_OUTPUT] = foundation.resource_group_name
        composition.outputs[STORAGE_ACCOUNT_OUTPUT] = foundation.storage_account_name

    return composition


def pulumi_program(project_config: Optional[ConfigSource] = None,
                   azure_config: Optional[ConfigSource] = None) -> None:
    """Entry point run by the Pulumi engine.

    Configuration is validated before anything is declared; the optional
    sources replace ``pulumi.Config`` lookups.
    """
    if project_config is None:
        config = ConfigLoader.from_pulumi()
    else:
        config = ConfigLoader.from_values(project_config, azure_config)

    composition = compose(config)
    for key, value in composition.outputs.items():
        pulumi.export(key, value)
