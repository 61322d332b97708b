"""Naming and URL helpers shared by the composer and the CLI."""

# Output keys a foundation stack exports and the composer reads back.
RESOURCE_GROUP_OUTPUT = "resourceGroupName"
STORAGE_ACCOUNT_OUTPUT = "storageAccountName"

# Aggregate export holding every unit URL in creation order.
API_URLS_OUTPUT = "functionAppApiUrls"
UNIT_URL_SUFFIX = "-api-url"


def unit_name(prefix: str, index: int) -> str:
    """Name of the unit at a zero-based index (``cool-function-1`` for 0)."""
    return f"{prefix}-{index + 1}"


def unit_output_key(name: str) -> str:
    """Export key for one unit's URL in the per-unit output style."""
    return f"{name}{UNIT_URL_SUFFIX}"


def blob_download_url(account_name: str, container_name: str, blob_name: str, sas_token: str) -> str:
    """Build a SAS-signed URL for a blob in an Azure storage account."""
    return f"https://{account_name}.blob.core.windows.net/{container_name}/{blob_name}?{sas_token}"


def api_url_for(host_name: str, function_name: str) -> str:
    """Public URL of an HTTP-triggered function on a Function App host."""
    return f"https://{host_name}/api/{function_name}"
