import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import requests

from src.core.errors import TransientFetchError, ValidationError
from src.server.schemas.catalog import Banner
from src.services.address_lookup import VIACEP_URL, lookup_cep, normalize_cep
from src.services.banners import get_active_banners, select_active_banners

from conftest import FakeStore

NOW = datetime(2024, 6, 1, 12, 0)


def _banner(bid, **kw):
    return Banner(id=bid, title=bid, image_url=f"https://cdn.example/{bid}.jpg", **kw)


def test_active_banners_window_and_order():
    banners = [
        _banner("late", display_order=3),
        _banner("off", display_order=0, is_active=False),
        _banner("future", display_order=1, start_date=NOW + timedelta(days=1)),
        _banner("expired", display_order=1, end_date=NOW - timedelta(seconds=1)),
        _banner("first", display_order=1, start_date=NOW - timedelta(days=1), end_date=NOW + timedelta(days=1)),
    ]
    assert [b.id for b in select_active_banners(banners, NOW)] == ["first", "late"]


def test_aware_and_naive_dates_compare():
    start = datetime(2024, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=3)))  # 11:00 UTC
    banners = [_banner("b", start_date=start)]
    assert [b.id for b in select_active_banners(banners, NOW)] == ["b"]


def test_default_now_is_current_utc():
    yesterday = datetime.now(timezone.utc) - timedelta(days=1)
    banners = [
        _banner("live", start_date=yesterday.replace(tzinfo=None)),
        _banner("ended", end_date=yesterday),
    ]
    assert [b.id for b in select_active_banners(banners)] == ["live"]


def test_get_active_banners_uses_store():
    store = FakeStore()
    store.banners = [_banner("b2", display_order=2), _banner("b1", display_order=1)]
    out = asyncio.run(get_active_banners(store, NOW))
    assert [b.id for b in out] == ["b1", "b2"]


class FakeResponse:
    def __init__(self, data=None, status=200, bad_json=False):
        self.data = data
        self.status = status
        self.bad_json = bad_json

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status}")

    def json(self):
        if self.bad_json:
            raise ValueError("no json")
        return self.data


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.urls = []

    def get(self, url, timeout=None):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.response


def test_normalize_cep():
    assert normalize_cep("01310-100") == "01310100"
    for bad in ["123", "", None, "0131010000"]:
        with pytest.raises(ValidationError):
            normalize_cep(bad)


def test_lookup_cep_maps_viacep_fields():
    session = FakeSession(FakeResponse({
        "cep": "01310-100",
        "logradouro": "Avenida Paulista",
        "bairro": "Bela Vista",
        "localidade": "São Paulo",
        "uf": "SP",
    }))
    address = lookup_cep("01310100", session=session)
    assert session.urls == [VIACEP_URL.format(cep="01310100")]
    assert address.cep == "01310-100"
    assert address.street == "Avenida Paulista"
    assert (address.city, address.state) == ("São Paulo", "SP")


def test_lookup_cep_unknown():
    with pytest.raises(ValidationError, match="não encontrado"):
        lookup_cep("99999999", session=FakeSession(FakeResponse({"erro": True})))


def test_lookup_cep_invalid_does_not_call_out():
    session = FakeSession(FakeResponse({}))
    with pytest.raises(ValidationError):
        lookup_cep("12-34", session=session)
    assert session.urls == []


@pytest.mark.parametrize("session", [
    FakeSession(error=requests.ConnectionError("down")),
    FakeSession(FakeResponse(status=500)),
    FakeSession(FakeResponse(bad_json=True)),
])
def test_lookup_cep_transient_failures(session):
    with pytest.raises(TransientFetchError):
        lookup_cep("01310100", session=session)
