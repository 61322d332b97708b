"""Shared fixtures: Pulumi mocks and configuration factories."""
import pulumi
import pytest

from composer.config.loader import ConfigLoader


class FleetMocks(pulumi.runtime.Mocks):
    """Records every declared resource and invoke, and fakes provider outputs."""

    def __init__(self, failing_types=()):
        self.resources = []
        self.calls = []
        self.failing_types = set(failing_types)
        self.stack_outputs = {
            "resourceGroupName": "shared-rg",
            "storageAccountName": "sharedsa",
        }

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        if args.typ in self.failing_types:
            raise Exception(f"{args.typ} '{args.name}' rejected by provider")
        self.resources.append(args)

        outputs = dict(args.inputs)
        outputs.setdefault("name", args.name)
        if args.typ == "azure-native:web:WebApp":
            outputs["defaultHostName"] = f"{args.name}.azurewebsites.net"
        elif args.typ == "azure-native:insights:Component":
            outputs["instrumentationKey"] = f"{args.name}-ikey"
        elif args.typ == "pulumi:pulumi:StackReference":
            outputs["outputs"] = dict(self.stack_outputs)
            outputs["secretOutputNames"] = []
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        self.calls.append(args)
        if args.token.endswith("listStorageAccountServiceSAS"):
            return {"serviceSasToken": "tok"}
        return {}

    def declared(self, prefix="azure-native:"):
        """Resources whose type starts with ``prefix``."""
        return [r for r in self.resources if r.typ.startswith(prefix)]

    def named(self, name):
        return next(r for r in self.resources if r.name == name)


@pytest.fixture
def mocks(install_mocks):
    """Install fresh Pulumi mocks for one test."""
    return install_mocks()


@pytest.fixture
def make_config():
    """Build a validated DeploymentConfig from stack config keys.

    Underscores in keyword names stand for hyphens (``function_count`` sets
    ``function-count``); passing None removes a key.
    """
    def factory(**overrides):
        raw = {
            "location": "westeurope",
            "function-count": 1,
            "foundationOrgName": "contoso",
            "foundationProjectName": "foundation",
            "foundationStackName": "dev",
        }
        raw.update({k.replace("_", "-"): v for k, v in overrides.items()})
        return ConfigLoader.validate({k: v for k, v in raw.items() if v is not None})
    return factory


@pytest.fixture
def install_mocks():
    """Install mocks whose provider rejects the given resource types."""
    def factory(failing_types=()):
        fleet_mocks = FleetMocks(failing_types=failing_types)
        pulumi.runtime.set_mocks(fleet_mocks, preview=False)
        return fleet_mocks
    return factory
