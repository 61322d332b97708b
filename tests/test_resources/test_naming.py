"""Tests for naming and URL helpers."""
from composer.resources.naming import api_url_for, blob_download_url, unit_name, unit_output_key


def test_blob_download_url():
    """Test the SAS-signed package URL format."""
    assert blob_download_url("sa1", "c1", "b1", "tok") == "https://sa1.blob.core.windows.net/c1/b1?tok"


def test_api_url():
    """Test the public function URL format."""
    url = api_url_for("my-app.azurewebsites.net", "MyCoolFunction")
    assert url == "https://my-app.azurewebsites.net/api/MyCoolFunction"


def test_unit_names_start_at_one():
    """Test unit names derived from zero-based indexes."""
    assert [unit_name("cool-function", i) for i in range(3)] == [
        "cool-function-1",
        "cool-function-2",
        "cool-function-3",
    ]
    assert unit_output_key("cool-function-2") == "cool-function-2-api-url"
