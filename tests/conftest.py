import hashlib
import itertools

import pytest

from tests.fakes import FakeAtomicKeyValueStore, FakeKeyValueStore


@pytest.fixture()
def store():
    return FakeKeyValueStore()


@pytest.fixture()
def atomic_store():
    return FakeAtomicKeyValueStore()


@pytest.fixture(params=["plain", "atomic"])
def any_store(request):
    """Every store flavour the components must work against."""
    if request.param == "atomic":
        return FakeAtomicKeyValueStore()
    return FakeKeyValueStore()


@pytest.fixture()
def md5_stub():
    return lambda p: hashlib.md5(p.encode("utf-8")).hexdigest()


@pytest.fixture()
def clock():
    """Millisecond clock that ticks by one on every read."""
    counter = itertools.count(1_700_000_000_000)
    return lambda: next(counter)


@pytest.fixture()
def fixed_codes(monkeypatch):
    """
    Make generated codes deterministic: 111111, 222222, ...
    """
    from app.domain import services as domain_services

    codes = iter(range(111111, 1_000_000, 111111))
    monkeypatch.setattr(domain_services, "generate_6digit_code", lambda: next(codes))
    yield
