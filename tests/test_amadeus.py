"""Tests for the Amadeus API tier (HTTP mocked)."""
from unittest.mock import patch, MagicMock
import pytest
import requests
from airport_lookup.core.errors import UpstreamError
from airport_lookup.core.models import LookupOptions, AIRPORT, METRO
from airport_lookup.core.resolver import AirportResolver
from airport_lookup.core.scoring import calculate_confidence
from airport_lookup.gazetteers.amadeus import AmadeusProvider
from airport_lookup.gazetteers.static_table import StaticFallbackProvider


LOCATIONS_PAYLOAD = {
    "data": [
        {
            "type": "location",
            "subType": "CITY",
            "name": "PARIS",
            "iataCode": "PAR",
            "address": {"cityName": "PARIS", "countryName": "FRANCE", "countryCode": "FR"},
            "geoCode": {"latitude": 48.85341, "longitude": 2.3488},
            "analytics": {"travelers": {"score": 100}},
        },
        {
            "type": "location",
            "subType": "AIRPORT",
            "name": "CHARLES DE GAULLE",
            "iataCode": "CDG",
            "address": {"cityName": "PARIS", "countryName": "FRANCE", "countryCode": "FR"},
            "geoCode": {"latitude": 49.01278, "longitude": 2.55},
            "analytics": {"travelers": {"score": 25}},
        },
        {
            "type": "location",
            "subType": "AIRPORT",
            "name": "ORLY",
            "iataCode": "ORY",
            "address": {"cityName": "PARIS", "countryCode": "FR"},
        },
        {"type": "location", "subType": "AIRPORT", "name": "NO CODE"},
    ]
}


def token_response():
    resp = MagicMock()
    resp.json.return_value = {"access_token": "abc123", "expires_in": 1799}
    return resp


def json_response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    return resp


@pytest.fixture
def provider():
    return AmadeusProvider(host="test.api.amadeus.com", client_id="id", client_secret="secret", enabled=True)


def test_disabled_without_credentials():
    provider = AmadeusProvider(client_id=None, client_secret=None, enabled=True)
    with patch("airport_lookup.gazetteers.amadeus.requests.get") as mock_get:
        assert provider.probe("paris", LookupOptions()) == []
        mock_get.assert_not_called()


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_probe_maps_cities_and_airports(mock_post, mock_get, provider):
    mock_post.return_value = token_response()
    mock_get.return_value = json_response(LOCATIONS_PAYLOAD)

    results = provider.probe("paris", LookupOptions())

    by_code = {r.iata_code: r for r in results}
    assert set(by_code) == {"PAR", "CDG", "ORY"}

    assert by_code["PAR"].type == METRO
    assert by_code["PAR"].airport_codes == ("PAR",)
    assert by_code["PAR"].confidence == 1.0
    assert by_code["PAR"].source == "api"

    assert by_code["CDG"].type == AIRPORT
    assert by_code["CDG"].city == "Paris"
    assert by_code["CDG"].confidence == pytest.approx(calculate_confidence(0.25), abs=1e-4)
    assert by_code["ORY"].confidence == 0.7

    _, kwargs = mock_get.call_args
    assert kwargs["params"]["subType"] == "AIRPORT,CITY"
    assert kwargs["params"]["keyword"] == "PARIS"
    assert kwargs["headers"]["Authorization"] == "Bearer abc123"
    assert kwargs["timeout"] == provider.timeout


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_token_is_reused(mock_post, mock_get, provider):
    mock_post.return_value = token_response()
    mock_get.return_value = json_response({"data": []})

    provider.probe("paris", LookupOptions())
    provider.probe("london", LookupOptions())

    assert mock_post.call_count == 1
    assert mock_get.call_count == 2


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_network_error_raises_upstream(mock_post, mock_get, provider):
    mock_post.return_value = token_response()
    mock_get.side_effect = requests.Timeout("timed out")

    with pytest.raises(UpstreamError) as exc_info:
        provider.probe("paris", LookupOptions())
    assert exc_info.value.tier == "api"
    assert isinstance(exc_info.value.cause, requests.Timeout)


@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_auth_failure_raises_upstream(mock_post, provider):
    resp = MagicMock()
    resp.raise_for_status.side_effect = requests.HTTPError("401 Unauthorized")
    mock_post.return_value = resp

    with pytest.raises(UpstreamError):
        provider.probe("paris", LookupOptions())


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_malformed_payload_raises_upstream(mock_post, mock_get, provider):
    mock_post.return_value = token_response()

    mock_get.return_value = json_response(["not", "a", "dict"])
    with pytest.raises(UpstreamError):
        provider.probe("paris", LookupOptions())

    mock_get.return_value = json_response({"data": {"iataCode": "PAR"}})
    with pytest.raises(UpstreamError):
        provider.probe("paris", LookupOptions())

    bad_json = MagicMock()
    bad_json.json.side_effect = ValueError("Expecting value")
    mock_get.return_value = bad_json
    with pytest.raises(UpstreamError):
        provider.probe("paris", LookupOptions())


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_non_object_nested_fields_are_ignored(mock_post, mock_get, provider):
    mock_post.return_value = token_response()
    mock_get.return_value = json_response({"data": [
        {"subType": "AIRPORT", "iataCode": "YYZ", "name": "PEARSON", "address": "TORONTO", "geoCode": [43.6, -79.6]},
        {"subType": "AIRPORT", "iataCode": "YTZ", "name": "BILLY BISHOP", "analytics": {"travelers": 5}},
        {"subType": "CITY", "iataCode": "YTO", "name": "TORONTO", "analytics": "high", "airportCodes": "YYZ"},
    ]})

    results = provider.probe("toronto", LookupOptions())

    by_code = {r.iata_code: r for r in results}
    assert by_code["YYZ"].city == ""
    assert by_code["YYZ"].latitude is None
    assert by_code["YTZ"].confidence == 0.7
    assert by_code["YTO"].type == METRO
    assert by_code["YTO"].airport_codes == ("YTO",)
    assert by_code["YTO"].confidence == 0.7


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_non_object_token_payload_raises_upstream(mock_post, mock_get, provider):
    mock_post.return_value = json_response(["abc123"])

    with pytest.raises(UpstreamError) as exc_info:
        provider.probe("toronto", LookupOptions())
    assert exc_info.value.tier == "api"
    mock_get.assert_not_called()


@patch("airport_lookup.gazetteers.amadeus.requests.get")
@patch("airport_lookup.gazetteers.amadeus.requests.post")
def test_malformed_api_falls_back_to_static_table(mock_post, mock_get, provider):
    mock_post.return_value = json_response(["abc123"])
    resolver = AirportResolver(providers=[provider, StaticFallbackProvider()])

    result = resolver.lookup("Toronto")

    assert result.iata_code == "YTO"
    assert result.source == "fallback"
    assert resolver.get_stats()["errors"] == 1
