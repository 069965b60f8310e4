import pytest
from fastapi.testclient import TestClient

from section_planner.main import app
from section_planner.services.catalog import build_catalog_context
from tests.factories import make_subject


@pytest.fixture
def three_block_subjects():
    return [
        make_subject(1, 1, 2, name="Math"),
        make_subject(2, 1, 3, name="History"),
        make_subject(3, 2, 3, name="Biology"),
        make_subject(4, 1, 2, name="Art"),
    ]


@pytest.fixture
def three_block_context(three_block_subjects):
    return build_catalog_context(three_block_subjects)


@pytest.fixture()
def client():
    with TestClient(app) as test_client:
        yield test_client
