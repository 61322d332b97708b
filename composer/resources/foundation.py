"""Shared resource group and storage account the units are placed in."""
from dataclasses import dataclass
from typing import Any

import pulumi
import pulumi_azure_native as azure_native

from .naming import RESOURCE_GROUP_OUTPUT, STORAGE_ACCOUNT_OUTPUT
from ..config.schema import FoundationReference
from ..errors import FoundationResolutionError


@dataclass
class Foundation:
    """Names of the shared resources, both still pending."""
    resource_group_name: pulumi.Output[str]
    storage_account_name: pulumi.Output[str]
    # False when read from another stack.
    owned: bool = False


def reference_foundation(ref: FoundationReference) -> Foundation:
    """Read the shared resource names exported by another stack."""
    pulumi.log.info(f"Using foundation stack {ref.stack_path}")
    stack = pulumi.StackReference(ref.stack_path)

    def read(name: str) -> pulumi.Output[str]:
        # Absent keys fail in require_output, empty values here
        return stack.require_output(name).apply(
            lambda value: require_foundation_output(ref.stack_path, name, value)
        )

    return Foundation(
        resource_group_name=read(RESOURCE_GROUP_OUTPUT),
        storage_account_name=read(STORAGE_ACCOUNT_OUTPUT),
    )


def require_foundation_output(stack_path: str, name: str, value: Any) -> str:
    if value is None or value == "":
        raise FoundationResolutionError(f"Foundation stack '{stack_path}' has no output '{name}'")
    return str(value)


def provision_foundation(location: str) -> Foundation:
    """Declare a resource group and storage account owned by this stack."""
    resource_group = azure_native.resources.ResourceGroup(
        "resourceGroup",
        location=location,
    )

    storage_account = azure_native.storage.StorageAccount(
        "sa",
        resource_group_name=resource_group.name,
        location=location,
        sku=azure_native.storage.SkuArgs(
            name="Standard_LRS",
        ),
        kind="StorageV2",
    )

    return Foundation(
        resource_group_name=resource_group.name,
        storage_account_name=storage_account.name,
        owned=True,
    )
