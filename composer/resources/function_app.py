"""Function Endpoint Unit: one publicly reachable Azure Function and its supporting resources."""
from dataclasses import dataclass
from typing import Optional

import pulumi
import pulumi_azure_native as azure_native

from .naming import api_url_for, blob_download_url
from .runtime import DotNetVersion

UNIT_TYPE = "function-fleet:index:FunctionEndpointUnit"

# Validity window of the package download token.
SAS_START_TIME = "2022-01-01"
SAS_EXPIRY_TIME = "2030-01-01"

WORKER_RUNTIME = "dotnet-isolated"
EXTENSION_VERSION = "~4"


@dataclass
class FunctionEndpointUnitArgs:
    """Inputs of a Function Endpoint Unit."""
    resource_group_name: pulumi.Input[str]
    storage_account_name: pulumi.Input[str]
    region: pulumi.Input[str]
    function_name: str
    publish_path: str
    dotnet_version: DotNetVersion = DotNetVersion.V8


class FunctionEndpointUnit(pulumi.ComponentResource):
    """A consumption-plan Function App running a zipped artifact from blob storage.

    The unit declares, all parented to itself:

    1. a private blob container in the shared storage account,
    2. a block blob archived from ``publish_path``,
    3. a read-only container SAS token used to build the package URL,
    4. a Log Analytics workspace and an Application Insights component,
    5. a Linux ``Y1`` (Dynamic) App Service plan,
    6. the Function App, running from the package URL.

    ``api_url`` resolves once the Function App has a host name. If any of
    the resources above fails, it never resolves.
    """

    api_url: pulumi.Output[str]

    def __init__(self, name: str, args: FunctionEndpointUnitArgs,
                 opts: Optional[pulumi.ResourceOptions] = None):
        super().__init__(UNIT_TYPE, name, None, opts)
        self.unit_name = name
        child = pulumi.ResourceOptions(parent=self)

        # Artifact storage
        container = azure_native.storage.BlobContainer(
            f"{name}-function-zip-container",
            resource_group_name=args.resource_group_name,
            account_name=args.storage_account_name,
            public_access=azure_native.storage.PublicAccess.NONE,
            opts=child,
        )

        # The engine zips the directory when it uploads the blob
        blob = azure_native.storage.Blob(
            f"{name}-function-zip-blob",
            resource_group_name=args.resource_group_name,
            account_name=args.storage_account_name,
            container_name=container.name,
            type=azure_native.storage.BlobType.BLOCK,
            source=pulumi.FileArchive(args.publish_path),
            opts=child,
        )

        sas = azure_native.storage.list_storage_account_service_sas_output(
            resource_group_name=args.resource_group_name,
            account_name=args.storage_account_name,
            protocols=azure_native.storage.HttpProtocol.HTTPS,
            shared_access_start_time=SAS_START_TIME,
            shared_access_expiry_time=SAS_EXPIRY_TIME,
            resource="c",
            permissions="r",
            canonicalized_resource=pulumi.Output.concat(
                "/blob/", args.storage_account_name, "/", container.name
            ),
            opts=pulumi.InvokeOptions(parent=self),
        )

        self.package_url = pulumi.Output.all(
            args.storage_account_name,
            container.name,
            blob.name,
            sas.service_sas_token,
        ).apply(lambda parts: blob_download_url(*parts))

        # Monitoring
        workspace = azure_native.operationalinsights.Workspace(
            f"{name}-workspace",
            resource_group_name=args.resource_group_name,
            retention_in_days=30,
            sku=azure_native.operationalinsights.WorkspaceSkuArgs(
                name="PerGB2018",
            ),
            features=azure_native.operationalinsights.WorkspaceFeaturesArgs(
                enable_data_export=True,
            ),
            opts=child,
        )

        app_insights = azure_native.insights.Component(
            f"{name}-app-insights",
            resource_group_name=args.resource_group_name,
            application_type="web",
            kind="web",
            workspace_resource_id=workspace.id,
            opts=child,
        )

        # Hosting
        plan = azure_native.web.AppServicePlan(
            f"{name}-app-service-plan",
            resource_group_name=args.resource_group_name,
            location=args.region,
            kind="Linux",
            reserved=True,
            sku=azure_native.web.SkuDescriptionArgs(
                name="Y1",
                tier="Dynamic",
            ),
            opts=child,
        )

        runtime = args.dotnet_version.runtime
        app = azure_native.web.WebApp(
            f"{name}-function-app",
            resource_group_name=args.resource_group_name,
            server_farm_id=plan.id,
            kind="FunctionApp",
            site_config=azure_native.web.SiteConfigArgs(
                net_framework_version=runtime.net_framework_version,
                linux_fx_version=runtime.linux_fx_version,
                detailed_error_logging_enabled=True,
                http_logging_enabled=True,
                app_settings=[
                    azure_native.web.NameValuePairArgs(
                        name="FUNCTIONS_WORKER_RUNTIME",
                        value=WORKER_RUNTIME,
                    ),
                    azure_native.web.NameValuePairArgs(
                        name="FUNCTIONS_EXTENSION_VERSION",
                        value=EXTENSION_VERSION,
                    ),
                    azure_native.web.NameValuePairArgs(
                        name="WEBSITE_RUN_FROM_PACKAGE",
                        value=self.package_url,
                    ),
                    azure_native.web.NameValuePairArgs(
                        name="APPINSIGHTS_INSTRUMENTATIONKEY",
                        value=app_insights.instrumentation_key,
                    ),
                ],
                cors=azure_native.web.CorsSettingsArgs(
                    allowed_origins=["*"],
                ),
            ),
            opts=child,
        )

        function_name = args.function_name
        self.api_url = app.default_host_name.apply(
            lambda host_name: api_url_for(host_name, function_name)
        )

        self.register_outputs({
            "api_url": self.api_url,
        })
