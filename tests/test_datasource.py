"""Tests for the manufacturers read pipeline."""

import asyncio
import json

import httpx
import pytest
from fake_nautobot import create_app, manufacturer
from nautobot_provider.client import create_client
from nautobot_provider.credential import TokenCredential
from nautobot_provider.datasource import ManufacturersDataSource, ReadPhase
from nautobot_provider.models import ManufacturerListParams

BASE_URL = "https://nb.example.com"


def _read(client, **kwargs):
    ds = ManufacturersDataSource(**kwargs)
    ds.configure(client)
    return asyncio.run(ds.read())


def _fake_client(records, page_size=50):
    app = create_app(records, page_size=page_size)
    client = create_client(BASE_URL, TokenCredential("abc"), transport=httpx.ASGITransport(app=app))
    return app, client


def _page(results, next_url=None, count=None):
    return {
        "count": len(results) if count is None else count,
        "next": next_url,
        "previous": None,
        "results": results,
    }


# =============================================================================
# Schema
# =============================================================================

class TestSchema:
    def test_single_computed_list_attribute(self):
        schema = ManufacturersDataSource().schema()
        assert list(schema.attributes) == ["manufacturers"]
        top = schema["manufacturers"]
        assert top.computed and not top.required
        assert set(top.attributes) == {
            "id", "created", "last_updated", "display", "name", "slug", "description",
            "notes_url", "url", "devicetype_count", "inventoryitem_count",
            "platform_count", "custom_fields",
        }

    def test_leaf_dispositions(self):
        leaves = ManufacturersDataSource().schema()["manufacturers"].attributes
        assert leaves["name"].required
        assert leaves["id"].computed and not leaves["id"].optional
        assert leaves["description"].optional and not leaves["description"].computed
        for name in ("display", "slug", "notes_url", "url", "custom_fields"):
            assert leaves[name].optional and leaves[name].computed, name
        for name in ("devicetype_count", "inventoryitem_count", "platform_count"):
            assert leaves[name].kind.value == "int64"

    def test_type_name(self):
        assert ManufacturersDataSource().metadata("nautobot") == "nautobot_manufacturers"


# =============================================================================
# Read scenarios
# =============================================================================

class TestRead:
    def test_happy_path(self, api_client):
        resp = _read(api_client)
        assert resp.phase is ReadPhase.PUBLISHED
        assert len(resp.diagnostics) == 0
        items = resp.state["manufacturers"].value
        assert len(items) == 1
        assert items[0]["name"].value == "Acme"
        assert items[0]["id"].value == "11111111-1111-1111-1111-111111111111"

    def test_upstream_401(self, mock_api):
        api = mock_api(lambda request: httpx.Response(401, text="Invalid token."))
        resp = _read(api)
        assert resp.phase is ReadPhase.FAILED
        assert resp.state is None
        (diag,) = resp.diagnostics
        assert diag.summary == "failed to get manufacturers list"
        assert "401" in diag.detail
        assert diag.code == "ProtocolError"

    def test_transport_error(self, mock_api):
        def handler(request):
            raise httpx.ConnectTimeout("timed out", request=request)

        resp = _read(mock_api(handler))
        (diag,) = resp.diagnostics
        assert diag.summary == "failed to get manufacturers list"
        assert diag.code == "TransportError"
        assert resp.state is None

    def test_malformed_json(self, mock_api):
        resp = _read(mock_api(lambda request: httpx.Response(200, text="not-json")))
        assert resp.phase is ReadPhase.FAILED
        (diag,) = resp.diagnostics
        assert diag.summary == "Failed to serialize"
        assert resp.state is None

    def test_null_display_still_published(self, mock_api):
        record = manufacturer("Acme", display=None)
        resp = _read(mock_api(lambda request: httpx.Response(200, json=_page([record]))))
        assert resp.phase is ReadPhase.PUBLISHED
        assert len(resp.diagnostics) == 0
        item = resp.state["manufacturers"][0]
        assert item["display"].is_null
        assert item["name"].value == "Acme"

    def test_null_name_fails_with_path(self, mock_api):
        records = [manufacturer("Acme"), manufacturer("Other", name=None)]
        resp = _read(mock_api(lambda request: httpx.Response(200, json=_page(records))))
        assert resp.phase is ReadPhase.FAILED
        assert resp.state is None
        (diag,) = resp.diagnostics
        assert diag.code == "LiftError"
        assert "manufacturers[1].name" in diag.detail

    def test_empty_list(self, mock_api):
        resp = _read(mock_api(lambda request: httpx.Response(200, json=_page([]))))
        assert resp.phase is ReadPhase.PUBLISHED
        assert resp.state.to_python() == {"manufacturers": []}

    def test_unconfigured(self):
        resp = asyncio.run(ManufacturersDataSource().read())
        assert resp.phase is ReadPhase.FAILED
        (diag,) = resp.diagnostics
        assert diag.summary == "Unconfigured data source"

    def test_configure_with_none_is_noop(self, api_client):
        ds = ManufacturersDataSource()
        ds.configure(api_client)
        ds.configure(None)
        assert asyncio.run(ds.read()).phase is ReadPhase.PUBLISHED

    def test_filters_sent_upstream(self):
        app, client = _fake_client([manufacturer("Acme"), manufacturer("Globex")])
        resp = _read(client, params=ManufacturerListParams(slug="globex"))
        names = [m["name"] for m in resp.state.to_python()["manufacturers"]]
        assert names == ["Globex"]
        assert "slug=globex" in app.state.requests[0]["url"]


# =============================================================================
# Pagination
# =============================================================================

class TestPagination:
    NAMES = ["Acme", "Globex", "Initech", "Umbrella", "Wonka"]

    def test_follows_next_in_upstream_order(self):
        app, client = _fake_client([manufacturer(n) for n in self.NAMES], page_size=2)
        resp = _read(client)
        assert resp.phase is ReadPhase.PUBLISHED
        names = [m["name"] for m in resp.state.to_python()["manufacturers"]]
        assert names == self.NAMES
        assert len(app.state.requests) == 3
        assert all(r["headers"]["authorization"] == "Token abc" for r in app.state.requests)

    def test_page_size_requested(self):
        app, client = _fake_client([manufacturer(n) for n in self.NAMES])
        resp = _read(client, page_size=3)
        assert len(resp.state["manufacturers"].value) == 5
        assert "limit=3" in app.state.requests[0]["url"]
        assert len(app.state.requests) == 2

    def test_page_cap_warns_instead_of_truncating_silently(self):
        app, client = _fake_client([manufacturer(n) for n in self.NAMES], page_size=2)
        resp = _read(client, max_pages=2)
        assert resp.phase is ReadPhase.PUBLISHED
        assert len(resp.state["manufacturers"].value) == 4
        (warning,) = resp.diagnostics.warnings()
        assert warning.summary == "manufacturers list truncated"
        assert not resp.diagnostics.has_error()

    def test_page_cap_not_hit_when_exhausted(self):
        _, client = _fake_client([manufacturer(n) for n in self.NAMES], page_size=5)
        resp = _read(client, max_pages=1)
        assert len(resp.diagnostics) == 0

    def test_invalid_page_cap(self):
        with pytest.raises(ValueError):
            ManufacturersDataSource(max_pages=0)

    def test_failure_on_later_page_publishes_nothing(self, mock_api):
        def handler(request):
            if "offset" in request.url.params:
                return httpx.Response(502, text="Bad gateway")
            return httpx.Response(
                200,
                json=_page([manufacturer("Acme")], next_url=f"{BASE_URL}/api/dcim/manufacturers/?offset=1", count=2),
            )

        resp = _read(mock_api(handler))
        assert resp.phase is ReadPhase.FAILED
        assert resp.state is None
        assert "502" in resp.diagnostics.errors()[0].detail

    def test_off_host_next_link_is_never_followed(self, mock_api):
        hosts = []

        def handler(request):
            hosts.append(request.url.host)
            return httpx.Response(
                200,
                json=_page([manufacturer("Acme")], next_url="https://evil.example.com/steal?offset=1", count=2),
            )

        resp = _read(mock_api(handler))
        assert hosts == ["nb.example.com"]
        assert resp.phase is ReadPhase.FAILED
        (diag,) = resp.diagnostics
        assert diag.code == "ReadOnlyViolation"

    @pytest.mark.parametrize(
        "next_url",
        [
            "http://nb.example.com/api/dcim/manufacturers/?offset=1",
            "https://nb.example.com:8080/api/dcim/manufacturers/?offset=1",
            "http://nb.example.com:8080/api/dcim/manufacturers/?offset=1",
        ],
    )
    def test_next_link_on_other_scheme_or_port_is_never_followed(self, mock_api, next_url):
        seen = []

        def handler(request):
            seen.append((str(request.url), request.headers.get("authorization")))
            return httpx.Response(
                200, json=_page([manufacturer("Acme")], next_url=next_url, count=2)
            )

        resp = _read(mock_api(handler))
        assert seen == [(f"{BASE_URL}/api/dcim/manufacturers/", "Token abc")]
        assert resp.phase is ReadPhase.FAILED
        assert resp.state is None
        (diag,) = resp.diagnostics
        assert diag.summary == "failed to get manufacturers list"
        assert diag.code == "ReadOnlyViolation"

    def test_malformed_next_link_fails_read(self, mock_api):
        def handler(request):
            return httpx.Response(
                200,
                json=_page([manufacturer("Acme")], next_url="https://[nb.example.com/x", count=2),
            )

        resp = _read(mock_api(handler))
        assert resp.phase is ReadPhase.FAILED
        assert resp.state is None
        (diag,) = resp.diagnostics
        assert diag.summary == "failed to get manufacturers list"

    def test_repeated_next_link_fails_read(self, mock_api):
        seen = []
        loop_url = f"{BASE_URL}/api/dcim/manufacturers/?offset=1"

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(
                200, json=_page([manufacturer(f"M{len(seen)}")], next_url=loop_url, count=10)
            )

        resp = _read(mock_api(handler))
        assert seen == [f"{BASE_URL}/api/dcim/manufacturers/", loop_url]
        assert resp.phase is ReadPhase.FAILED
        assert resp.state is None
        (diag,) = resp.diagnostics
        assert diag.summary == "failed to get manufacturers list"
        assert diag.code == "PaginationLoop"

    def test_next_link_back_to_first_page_fails_read(self, mock_api):
        first = f"{BASE_URL}/api/dcim/manufacturers/"

        def handler(request):
            return httpx.Response(200, json=_page([manufacturer("Acme")], next_url=first, count=10))

        resp = _read(mock_api(handler))
        (diag,) = resp.diagnostics
        assert diag.code == "PaginationLoop"


def test_string_count_is_not_coerced(mock_api):
    record = manufacturer("Acme", devicetype_count="5")
    resp = _read(mock_api(lambda request: httpx.Response(200, json=_page([record]))))
    assert resp.phase is ReadPhase.FAILED
    (diag,) = resp.diagnostics
    assert diag.summary == "Failed to serialize"


# =============================================================================
# Properties
# =============================================================================

def test_every_record_is_published_with_name_and_id():
    records = [manufacturer(n) for n in TestPagination.NAMES]
    _, client = _fake_client(records, page_size=2)
    published = _read(client).state.to_python()["manufacturers"]
    assert [(m["name"], m["id"]) for m in published] == [(r["name"], r["id"]) for r in records]


def test_read_is_idempotent():
    _, client = _fake_client([manufacturer(n) for n in TestPagination.NAMES], page_size=2)
    first = _read(client)
    second = _read(client)
    assert first.state == second.state
    assert json.dumps(first.state.to_python()) == json.dumps(second.state.to_python())


def test_cancellation_publishes_nothing(mock_api):
    async def _test():
        started = asyncio.Event()

        async def handler(request):
            started.set()
            await asyncio.sleep(3600)

        ds = ManufacturersDataSource()
        ds.configure(mock_api(handler))
        task = asyncio.create_task(ds.read())
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(_test())


def test_concurrent_reads(api_client):
    async def _test():
        sources = [ManufacturersDataSource() for _ in range(4)]
        for ds in sources:
            ds.configure(api_client)
        return await asyncio.gather(*(ds.read() for ds in sources))

    results = asyncio.run(_test())
    assert all(r.phase is ReadPhase.PUBLISHED for r in results)
    assert len({json.dumps(r.state.to_python()) for r in results}) == 1
