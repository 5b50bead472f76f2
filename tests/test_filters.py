import pytest

from irlbrowse.filters import FilterStore, parse_max_rate, parse_radius
from irlbrowse.models import ANYWHERE, FilterState, GeoPoint


def build_store():
    resets = []
    store = FilterStore()
    store.on_change(lambda: resets.append(True))
    return store, resets


@pytest.mark.parametrize(
    "name, value",
    [
        ("search_text", "plumbing"),
        ("category", "delivery"),
        ("city", "Austin"),
        ("country", "Vietnam"),
        ("country_code", "VN"),
        ("max_rate", "40"),
        ("radius_km", "25"),
        ("geo_center", GeoPoint(10.8, 106.6)),
        ("include_remote", False),
        ("skills", ("cleaning",)),
    ],
)
def test_changing_filter_triggers_page_reset(name, value):
    store, resets = build_store()

    assert store.set_field(name, value) is True
    assert resets == [True]


def test_sort_change_does_not_reset_page():
    store, resets = build_store()

    assert store.set_field("sort_key", "pay_high") is True
    assert store.state.sort_key == "pay_high"
    assert resets == []


def test_setting_same_value_is_not_a_change():
    store, resets = build_store()
    store.set_field("city", "Austin")
    resets.clear()

    assert store.set_field("city", "Austin") is False
    assert resets == []


def test_unknown_field_raises():
    store, _ = build_store()
    with pytest.raises(KeyError):
        store.set_field("colour", "red")
    with pytest.raises(KeyError):
        store.clear_field("colour")


def test_clear_field_restores_sentinel():
    store, resets = build_store()
    store.set_field("radius_km", 50)
    assert store.state.radius_km == "50"

    store.clear_field("radius_km")
    assert store.state.radius_km == ANYWHERE
    assert len(resets) == 2


def test_clear_all_resets_everything():
    store, resets = build_store()
    store.set_field("city", "Austin")
    store.set_field("max_rate", "30")
    store.set_field("sort_key", "newest")
    resets.clear()

    assert store.clear_all() is True
    assert store.state == FilterState()
    assert resets == [True]
    assert store.clear_all() is False


def test_clear_all_with_only_sort_set_keeps_page():
    store, resets = build_store()
    store.set_field("sort_key", "newest")

    assert store.clear_all() is True
    assert resets == []


def test_active_filters_skip_unusable_values():
    store, _ = build_store()
    store.set_field("city", "Hanoi")
    store.set_field("max_rate", "abc")
    store.set_field("skills", "driving, , photography")

    assert store.state.skills == ("driving", "photography")
    assert store.active_filters() == ["city", "skills"]



def test_text_fields_are_stored_as_strings():
    store, resets = build_store()

    assert store.set_field("city", 10001) is True
    assert store.state.city == "10001"
    assert store.set_field("city", "10001") is False
    assert resets == [True]


@pytest.mark.parametrize(
    "raw, expected",
    [("false", False), ("No", False), (" 0 ", False), ("off", False), ("true", True),
     ("yes", True), (0, False), (1, True)],
)
def test_include_remote_parses_words(raw, expected):
    store, _ = build_store()

    store.set_field("include_remote", raw)

    assert store.state.include_remote is expected


def test_geo_center_accepts_pairs_and_drops_junk():
    store, _ = build_store()

    store.set_field("geo_center", ["10.5", 106])
    assert store.state.geo_center == GeoPoint(10.5, 106.0)

    store.set_field("geo_center", "nowhere")
    assert store.state.geo_center is None


def test_initial_state_is_normalized():
    store = FilterStore(FilterState(city=75001, max_rate=40, skills=["Errands"]))

    assert store.state.city == "75001"
    assert store.state.max_rate == "40"
    assert store.state.skills == ("Errands",)

@pytest.mark.parametrize(
    "raw, expected",
    [("50", 50.0), (" 12.5 ", 12.5), (30, 30.0), ("", None), ("abc", None),
     ("nan", None), ("inf", None), (None, None)],
)
def test_parse_max_rate(raw, expected):
    assert parse_max_rate(raw) == expected


@pytest.mark.parametrize(
    "raw, expected",
    [("25", 25.0), (100, 100.0), ("anywhere", None), ("Anywhere", None),
     ("0", None), ("-5", None), ("far", None)],
)
def test_parse_radius(raw, expected):
    assert parse_radius(raw) == expected
