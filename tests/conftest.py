import pytest

from fakes import FakeHttpClient
from services import NpmServices


@pytest.fixture
def fake_http():
    return FakeHttpClient()


@pytest.fixture
def services(fake_http):
    return NpmServices.create(fake_http)
