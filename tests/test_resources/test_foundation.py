"""Tests for the shared foundation resources."""
import pulumi
import pytest
from composer.config.schema import FoundationReference
from composer.errors import FoundationResolutionError
from composer.resources.foundation import provision_foundation, reference_foundation, require_foundation_output


@pulumi.runtime.test
def test_reference_foundation_reads_stack_outputs(mocks):
    """Test reading shared names from another stack."""
    foundation = reference_foundation(FoundationReference(org_name="contoso", project_name="foundation", stack_name="dev"))
    assert foundation.owned is False

    def check(names):
        resource_group_name, storage_account_name = names
        assert resource_group_name == "shared-rg"
        assert storage_account_name == "sharedsa"
        reference = next(r for r in mocks.resources if r.typ == "pulumi:pulumi:StackReference")
        assert reference.name == "contoso/foundation/dev"
        assert mocks.declared() == []

    return pulumi.Output.all(foundation.resource_group_name, foundation.storage_account_name).apply(check)


def test_require_foundation_output():
    """Test that a missing foundation output is a resolution error."""
    assert require_foundation_output("contoso/foundation/dev", "storageAccountName", "sharedsa") == "sharedsa"

    with pytest.raises(FoundationResolutionError) as exc_info:
        require_foundation_output("contoso/foundation/dev", "storageAccountName", None)
    assert "storageAccountName" in str(exc_info.value)

    with pytest.raises(FoundationResolutionError):
        require_foundation_output("contoso/foundation/dev", "resourceGroupName", "")


@pulumi.runtime.test
def test_provision_foundation(mocks):
    """Test the self-contained resource group and storage account."""
    foundation = provision_foundation("westeurope")
    assert foundation.owned is True

    def check(names):
        assert names == ["resourceGroup", "sa"]
        account = mocks.named("sa")
        assert account.inputs["kind"] == "StorageV2"
        assert account.inputs["sku"] == {"name": "Standard_LRS"}
        assert account.inputs["resourceGroupName"] == "resourceGroup"
        assert mocks.named("resourceGroup").inputs["location"] == "westeurope"

    return pulumi.Output.all(foundation.resource_group_name, foundation.storage_account_name).apply(check)


@pytest.mark.parametrize("stack_outputs, message", [
    ({"resourceGroupName": "shared-rg"}, "storageAccountName"),
    ({"resourceGroupName": "shared-rg", "storageAccountName": ""}, "has no output 'storageAccountName'"),
])
def test_reference_foundation_missing_output(mocks, stack_outputs, message):
    """Test that an absent or empty foundation output fails the pass."""
    mocks.stack_outputs = stack_outputs
    resolved = []

    @pulumi.runtime.test
    def read_foundation():
        foundation = reference_foundation(
            FoundationReference(org_name="contoso", project_name="foundation", stack_name="dev")
        )
        return foundation.storage_account_name.apply(resolved.append)

    with pytest.raises(Exception, match=message):
        read_foundation()

    assert resolved == []
