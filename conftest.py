"""Shared pytest fixtures."""

import pytest

from config.types import AirflowConnectionConfig
from plugins.airflow.tests.helpers import FakeAirflow


@pytest.fixture
def token_config():
    return AirflowConnectionConfig(base_url="http://airflow.test:8080", token="secret-token")


@pytest.fixture
def basic_config():
    return AirflowConnectionConfig(
        base_url="http://airflow.test:8080", username="admin", password="hunter2"
    )


@pytest.fixture
def fake_airflow():
    return FakeAirflow()


@pytest.fixture
def airflow_client(fake_airflow, token_config):
    return fake_airflow.client(token_config)
