"""Shared pytest fixtures."""

import pytest

from factories import ADMIN_PASSWORD
from nomadisch.main_config import AdminConfig, AirtableConfig, CloudinaryConfig


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def airtable_config() -> AirtableConfig:
    return AirtableConfig(token="pat-test", base_id="appBASE", events_table="Events", settings_table="Globals")


@pytest.fixture
def admin_config() -> AdminConfig:
    return AdminConfig(password=ADMIN_PASSWORD)


@pytest.fixture
def cloudinary_config() -> CloudinaryConfig:
    return CloudinaryConfig(cloud_name="nomadisch", upload_preset="unsigned-covers", folder="nomadisch/events")
