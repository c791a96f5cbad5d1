"""Tests for the failover fetch client."""

import httpx
import pytest

from thorchain_dashboard.api import (
    AllProvidersFailedError,
    FailoverClient,
    FetchRequest,
    ParseMode,
    ProviderHTTPError,
    ProviderParseError,
    ProviderRegistry,
    ProviderTransportError,
    ResponseCache,
)
from tests.conftest import FAST, STABLE


def test_fast_path_success(client, upstream):
    """A healthy primary answers and no other provider is tried."""
    upstream.json("fast.example", {"v": 1})
    upstream.json("stable.example", {"v": 2})

    assert client.execute(FetchRequest(path="/x")) == {"v": 1}
    assert upstream.hosts() == ["fast.example"]


def test_example_scenario(client, upstream, clock):
    """Primary 500 fails over to stable, later calls hit the cache until the TTL lapses."""
    upstream.status("fast.example", 500)
    upstream.json("stable.example", {"v": 1})

    assert client.execute(FetchRequest(path="/x")) == {"v": 1}
    health = client.health()
    assert health["fast"].consecutive_failures == 1
    assert health["stable"].consecutive_failures == 0
    assert upstream.hosts() == ["fast.example", "stable.example"]

    clock.advance(1.0)
    assert client.execute(FetchRequest(path="/x")) == {"v": 1}
    assert len(upstream.calls) == 2

    clock.advance(5.0)
    client.execute(FetchRequest(path="/x"))
    assert len(upstream.calls) > 2


def test_cache_hit_makes_no_network_call(client, upstream):
    """A second cacheable call within TTL returns the same payload without I/O."""
    upstream.json("fast.example", {"pools": [1, 2, 3]})

    first = client.execute(FetchRequest(path="/thorchain/pools"))
    second = client.execute(FetchRequest(path="/thorchain/pools"))

    assert first == second
    assert len(upstream.calls) == 1


def test_cache_hit_does_not_change_health(client, upstream):
    """Serving from cache leaves failure counters untouched."""
    upstream.status("fast.example", 503)
    upstream.json("stable.example", {"v": 1})
    client.execute(FetchRequest(path="/x"))

    client.execute(FetchRequest(path="/x"))

    assert client.health()["fast"].consecutive_failures == 1


def test_ttl_expiry_forces_network(client, upstream, clock):
    """Once the TTL has elapsed the next call goes to the network again."""
    upstream.json("fast.example", {"v": 1})
    client.execute(FetchRequest(path="/x"))
    for _ in range(3):
        client.execute(FetchRequest(path="/x"))

    clock.advance(5.0)
    client.execute(FetchRequest(path="/x"))

    assert len(upstream.calls) == 2


@pytest.mark.parametrize("failure", ["status", "connect", "timeout"])
def test_failover_counts_exactly_one_failure(client, upstream, failure):
    """Transport errors, timeouts, and non-2xx responses all fail over to the next provider."""
    if failure == "status":
        upstream.status("fast.example", 502)
    elif failure == "connect":
        upstream.fail_connect("fast.example")
    else:

        def timeout(request):
            raise httpx.ReadTimeout("timed out", request=request)

        upstream.route("fast.example", timeout)
    upstream.json("stable.example", {"from": "stable"})

    assert client.execute(FetchRequest(path="/x")) == {"from": "stable"}

    health = client.health()
    assert health["fast"].consecutive_failures == 1
    assert health["stable"].consecutive_failures == 0
    assert health["fast"].last_error


def test_success_resets_counter(client, upstream):
    """A provider's counter returns to zero on its next success."""
    upstream.status("stable.example", 500)
    upstream.status("fast.example", 500)
    with pytest.raises(AllProvidersFailedError):
        client.execute(FetchRequest(path="/x", cacheable=False))
    assert client.health()["stable"].consecutive_failures == 1

    upstream.json("stable.example", {"ok": True})
    client.execute(FetchRequest(path="/x", cacheable=False))

    assert client.health()["stable"].consecutive_failures == 0
    assert client.health()["fast"].consecutive_failures == 2


def test_demotion_and_recovery(client, upstream):
    """After three failures the primary is tried last; one success restores it."""
    upstream.status("fast.example", 500)
    upstream.json("stable.example", {"v": "stable"})

    for _ in range(3):
        client.execute(FetchRequest(path="/x", cacheable=False))
    assert client.health()["fast"].consecutive_failures == 3

    upstream.calls.clear()
    client.execute(FetchRequest(path="/x", cacheable=False))
    assert upstream.hosts() == ["stable.example"]

    # Demoted primary is still attempted when the secondary fails
    upstream.status("stable.example", 500)
    upstream.json("fast.example", {"v": "fast"})
    upstream.calls.clear()
    assert client.execute(FetchRequest(path="/x", cacheable=False)) == {"v": "fast"}
    assert upstream.hosts() == ["stable.example", "fast.example"]
    assert client.health()["fast"].consecutive_failures == 0

    upstream.json("stable.example", {"v": "stable"})
    upstream.calls.clear()
    client.execute(FetchRequest(path="/x", cacheable=False))
    assert upstream.hosts() == ["fast.example"]


def test_total_exhaustion_raises_and_caches_nothing(client, upstream):
    """If every provider fails the call raises and no entry is written."""
    upstream.status("fast.example", 500)
    upstream.fail_connect("stable.example")

    with pytest.raises(AllProvidersFailedError) as exc_info:
        client.execute(FetchRequest(path="/thorchain/network"))

    error = exc_info.value
    assert error.path == "/thorchain/network"
    assert [e.provider for e in error.errors] == ["fast", "stable"]
    assert isinstance(error.errors[0], ProviderHTTPError)
    assert error.errors[0].status_code == 500
    assert isinstance(error.last_error, ProviderTransportError)
    assert "/thorchain/network" in str(error)
    assert len(client.cache) == 0


def test_at_most_one_attempt_per_provider(client, upstream):
    """Failover never retries the same provider within one call."""
    upstream.status("fast.example", 500)
    upstream.status("stable.example", 500)

    with pytest.raises(AllProvidersFailedError):
        client.execute(FetchRequest(path="/x"))

    assert upstream.hosts() == ["fast.example", "stable.example"]


def test_height_query_routes_to_archive(client, upstream):
    """Height-pinned requests go to the archive with a height parameter and cache separately."""
    upstream.json("fast.example", {"height": "latest"})
    upstream.json("archive.example", {"height": 100})

    latest = client.execute(FetchRequest(path="/thorchain/pool/BTC.BTC"))
    pinned = client.execute(FetchRequest(path="/thorchain/pool/BTC.BTC", target_height=100))

    assert latest == {"height": "latest"}
    assert pinned == {"height": 100}
    archive_calls = upstream.calls_to("archive.example")
    assert len(archive_calls) == 1
    assert archive_calls[0].url.params["height"] == "100"
    assert len(client.cache) == 2


def test_height_parameter_appended_to_existing_query(client, upstream):
    """The height parameter joins an existing query string with '&'."""
    upstream.json("archive.example", [])

    client.execute(FetchRequest(path="/thorchain/quote/swap?amount=1", target_height=7))

    url = str(upstream.calls[0].url)
    assert url == "https://archive.example/thorchain/quote/swap?amount=1&height=7"


def test_headers_merge_request_wins(client, upstream):
    """Provider headers are sent, request headers override them on conflict."""
    upstream.status("fast.example", 500)
    upstream.json("stable.example", {})

    client.execute(FetchRequest(path="/x", headers={"x-client-id": "override", "x-extra": "1"}))

    sent = upstream.calls_to("stable.example")[0].headers
    assert sent["x-client-id"] == "override"
    assert sent["x-extra"] == "1"
    assert sent["accept"] == "application/json"


def test_parse_error_fails_over(client, upstream):
    """Malformed JSON from a 2xx response counts as a provider failure."""
    upstream.text("fast.example", "<html>not json</html>")
    upstream.json("stable.example", {"v": 1})

    assert client.execute(FetchRequest(path="/x")) == {"v": 1}
    assert client.health()["fast"].consecutive_failures == 1


def test_parse_error_is_reported(client, upstream):
    """When every provider returns garbage the aggregated error carries parse failures."""
    upstream.text("fast.example", "{")
    upstream.text("stable.example", "{")

    with pytest.raises(AllProvidersFailedError) as exc_info:
        client.execute(FetchRequest(path="/x"))

    assert all(isinstance(e, ProviderParseError) for e in exc_info.value.errors)


def test_text_parse_mode(client, upstream):
    """Text mode returns the raw body."""
    upstream.text("fast.example", "720")

    assert client.execute(FetchRequest(path="/thorchain/mimir/key/CHURNINTERVAL", parse_as=ParseMode.TEXT)) == "720"


def test_non_cacheable_request_skips_cache(client, upstream):
    """cacheable=False neither reads nor writes the cache."""
    upstream.json("fast.example", {"v": 1})

    client.execute(FetchRequest(path="/x", cacheable=False))
    client.execute(FetchRequest(path="/x", cacheable=False))

    assert len(upstream.calls) == 2
    assert len(client.cache) == 0


def test_bypass_cache_refreshes_entry(client, upstream):
    """bypass_cache fetches fresh data and stores it for later readers."""
    counter = {"n": 0}

    def handler(request):
        counter["n"] += 1
        return httpx.Response(200, json={"n": counter["n"]})

    upstream.route("fast.example", handler)

    assert client.execute(FetchRequest(path="/x")) == {"n": 1}
    assert client.execute(FetchRequest(path="/x", bypass_cache=True)) == {"n": 2}
    assert client.execute(FetchRequest(path="/x")) == {"n": 2}
    assert len(upstream.calls) == 2


def test_non_get_requests_have_distinct_cache_keys():
    """The method is part of the cache key for non-GET requests."""
    get_key = FetchRequest(path="/x").cache_key
    head_key = FetchRequest(path="/x", method="HEAD").cache_key

    assert get_key == "/x:latest"
    assert head_key == "HEAD /x:latest"
    assert FetchRequest(path="/x", target_height=5).cache_key == "/x:5"


def test_clear_cache_and_reset_counters(client, upstream):
    """Administrative operations drop cached data and failure counts."""
    upstream.status("fast.example", 500)
    upstream.json("stable.example", {"v": 1})
    client.execute(FetchRequest(path="/x"))

    client.clear_cache()
    client.reset_failure_counters()

    assert len(client.cache) == 0
    assert client.health()["fast"].consecutive_failures == 0


def test_health_returns_snapshot(client):
    """Mutating the returned health does not affect the client."""
    snapshot = client.health()
    snapshot["fast"].consecutive_failures = 99

    assert client.health()["fast"].consecutive_failures == 0


def test_instances_do_not_share_state(upstream, clock):
    """Two clients keep separate caches and health."""
    registry = ProviderRegistry([FAST, STABLE])
    upstream.status("fast.example", 500)
    upstream.json("stable.example", {"v": 1})

    with upstream.client() as http_client:
        realtime = FailoverClient(registry, 5.0, http_client=http_client, clock=clock)
        history = FailoverClient(registry, 30.0, http_client=http_client, clock=clock)

        realtime.execute(FetchRequest(path="/x"))

        assert realtime.health()["fast"].consecutive_failures == 1
        assert history.health()["fast"].consecutive_failures == 0
        assert len(history.cache) == 0
        assert history.ttl == 30.0


def test_ttl_taken_from_injected_cache(registry, clock):
    """With a cache injected the TTL may be omitted and is read from the cache."""
    failover = FailoverClient(registry, cache=ResponseCache(30.0, clock=clock), http_client=httpx.Client())

    assert failover.ttl == 30.0
    failover.http_client.close()


def test_conflicting_ttl_and_cache_rejected(registry, clock):
    """A TTL that disagrees with the injected cache is a configuration error."""
    with pytest.raises(ValueError, match="does not match"):
        FailoverClient(registry, 5.0, cache=ResponseCache(30.0, clock=clock))


def test_ttl_or_cache_required(registry):
    with pytest.raises(ValueError, match="ttl or cache"):
        FailoverClient(registry)
