from __future__ import annotations

import json

import pytest

from cyfra_client import cli
from cyfra_client.client import CyfraClient
from cyfra_client.errors import DateDiscoveryError, UnknownTileError, ValidationError
from cyfra_client.settings import Settings

from tests.conftest import FakeBackend


def test_blocking_client_round_trip(test_settings: Settings) -> None:
    backend = FakeBackend()
    with CyfraClient(settings=test_settings, backend=backend) as client:
        options = client.filter_options()
        assert options.countries == ["Egypt", "Germany", "Poland"]

        listing = client.search_tiles(category="Forest")
        assert [tile.id for tile in listing.tiles] == ["33UUU"]

        dates = client.available_dates("33UUU")
        assert dates is not None and dates.total == 3

        summary = client.analyze_real("33UUU", "2024-10-15", ["NDVI"])
        assert summary.indices[0].code == "NDVI"

        synthetic = client.analyze_synthetic(256, 256, ["NDVI"])
        assert synthetic.width == 256

    assert backend.calls_to("tiles")[0] == {"category": "Forest"}


def test_blocking_client_raises_typed_errors(test_settings: Settings) -> None:
    backend = FakeBackend()
    backend.dates["34UDC"] = {"error": "quota exceeded"}
    with CyfraClient(settings=test_settings, backend=backend) as client:
        with pytest.raises(ValidationError):
            client.analyze_synthetic(32, 256, ["NDVI"])
        with pytest.raises(DateDiscoveryError, match="quota exceeded"):
            client.available_dates("34UDC")


def test_blocking_client_rejects_tiles_missing_from_catalog(test_settings: Settings) -> None:
    backend = FakeBackend()
    with CyfraClient(settings=test_settings, backend=backend) as client:
        with pytest.raises(UnknownTileError):
            client.analyze_real("99XXX", "2024-10-15", ["NDVI"])
        with pytest.raises(ValidationError, match="no indices selected"):
            client.analyze_real("99XXX", "2024-10-15", [])

        summary = client.analyze_real("35MRT", "2024-10-15", ["NDVI"])
        assert summary.indices[0].code == "NDVI"

    assert backend.calls_to("tiles") == [{"q": "99XXX"}, {"q": "35MRT"}]
    assert len(backend.calls_to("analyze")) == 1


@pytest.fixture
def fake_cli(monkeypatch, test_settings: Settings) -> FakeBackend:
    backend = FakeBackend()
    monkeypatch.setattr(
        cli,
        "CyfraClient",
        lambda api_url=None: CyfraClient(settings=test_settings, backend=backend),
    )
    return backend


def test_cli_tiles_command(fake_cli: FakeBackend, capsys) -> None:
    args = cli.build_parser().parse_args(["tiles", "--region", "Africa"])
    assert cli.run(args) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["count"] == 1
    assert output["tiles"][0]["id"] == "35MRT"


def test_cli_analyze_synthetic(fake_cli: FakeBackend, capsys) -> None:
    args = cli.build_parser().parse_args(
        ["analyze", "--mode", "synthetic", "--width", "256", "--height", "256", "--indices", "NDVI,XYZ"]
    )
    assert cli.run(args) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["indices"][0]["range"] == "[-1.000, 1.000]"
    assert output["indices"][0]["mean"] == "0.420"
    assert fake_cli.calls_to("analyze_synthetic") == [
        {"width": 256, "height": 256, "indices": ["NDVI", "XYZ"]}
    ]


def test_cli_dates_without_products(fake_cli: FakeBackend, capsys) -> None:
    fake_cli.dates["34UDC"] = {"products": []}
    args = cli.build_parser().parse_args(["dates", "34UDC"])
    assert cli.run(args) == 0
    output = json.loads(capsys.readouterr().out)
    assert output["message"] == "No products found for this tile"


def test_cli_rejects_conflicting_filters() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args(["tiles", "--region", "Africa", "--country", "Egypt"])
