import logging

import pytest
from openpyxl import load_workbook

import browse_irl
from irlbrowse.client import ServerError
from irlbrowse.models import ListingPage


class FakeClient:

    def __init__(self, *responses):
        self.base_url = "https://api.example.test/api/"
        self.responses = list(responses)
        self.calls = []

    def fetch(self, kind, params):
        self.calls.append((kind, dict(params)))
        response = self.responses.pop(0) if self.responses else ListingPage(items=[], total=0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_client(monkeypatch):
    monkeypatch.delenv("IRLWORK_API_URL", raising=False)
    monkeypatch.delenv("IRLWORK_ALLOW_IP_LOCATION", raising=False)

    def install(*responses):
        client = FakeClient(*responses)
        monkeypatch.setattr(browse_irl, "build_client_from_env", lambda: client)
        return client

    return install


def human_rows():
    return [
        {"id": "h1", "name": "Lan", "skills": ["Errands"], "city": "Hue", "hourly_rate": 18,
         "rating": 4.8},
        {"id": "h2", "name": "Sam", "skills": ["Delivery"], "city": "Austin", "hourly_rate": 40,
         "rating": 4.5},
    ]


def test_unparsable_max_rate_is_not_sent(fake_client):
    client = fake_client(ListingPage(items=human_rows(), total=2))

    assert browse_irl.main(["humans", "--max-rate", "abc", "--category", "Errands"]) == 0

    kind, params = client.calls[0]
    assert kind == "humans"
    assert "max_rate" not in params
    assert params["skill"] == "Errands"


def test_page_argument_fetches_requested_offset(fake_client):
    rows = [{"id": f"t{idx}", "title": f"Task {idx}"} for idx in range(16)]
    client = fake_client(ListingPage(items=rows, total=20), ListingPage(items=rows[:4], total=20))

    assert browse_irl.main(["tasks", "--page", "2", "--sort", "pay_high"]) == 0

    assert [params["offset"] for _, params in client.calls] == ["0", "16"]
    assert client.calls[1][1]["sort"] == "pay_high"


def test_out_of_range_page_fails(fake_client, caplog):
    fake_client(ListingPage(items=[{"id": "t1"}], total=1))

    with caplog.at_level(logging.ERROR):
        assert browse_irl.main(["tasks", "--page", "5"]) == 1

    assert "Page 5 is out of range (1-1)" in caplog.text


def test_sort_must_belong_to_listing_kind(fake_client, capsys):
    client = fake_client()

    with pytest.raises(SystemExit) as excinfo:
        browse_irl.main(["humans", "--sort", "pay_high"])

    assert excinfo.value.code == 2
    assert "not available for humans" in capsys.readouterr().err
    assert client.calls == []


def test_fetch_failure_returns_error(fake_client):
    fake_client(ServerError("Server error (503)", status_code=503))

    assert browse_irl.main(["tasks"]) == 1


def test_coordinates_enable_geo_search(fake_client):
    client = fake_client(ListingPage(items=[], total=0))

    assert browse_irl.main(["tasks", "--lat", "10.5", "--lng", "106", "--radius", "25",
                            "--city", "Saigon"]) == 0

    params = client.calls[-1][1]
    assert params["sort"] == "distance"
    assert params["user_lat"] == "10.5"
    assert params["user_lng"] == "106"
    assert params["radius_km"] == "25"
    assert params["city"] == "Saigon"


def test_api_url_argument_overrides_client_base_url(fake_client):
    client = fake_client(ListingPage(items=[], total=0))

    assert browse_irl.main(["tasks", "--api-url", "http://localhost:3002/api"]) == 0
    assert client.base_url == "http://localhost:3002/api/"


def test_export_writes_visible_rows(fake_client, tmp_path, caplog):
    fake_client(ListingPage(items=human_rows(), total=2))
    target = tmp_path / "humans.xlsx"

    with caplog.at_level(logging.INFO):
        assert browse_irl.main(["humans", "--max-rate", "20", "--export", str(target)]) == 0

    assert "Showing 1 matching humans from items 1-2 of 2" in caplog.text

    worksheet = load_workbook(target).active
    assert worksheet.max_row == 2
    assert worksheet.cell(row=2, column=1).value == "h1"
