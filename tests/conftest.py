import pytest

from fakes import FakeModelClient, RecordingSleep, make_page


@pytest.fixture
def page():
    return make_page()


@pytest.fixture
def fake_client():
    return FakeModelClient()


@pytest.fixture
def fake_sleep():
    return RecordingSleep()
