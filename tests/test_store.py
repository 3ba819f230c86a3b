# tests/test_store.py

import json

import pytest

from psnprofile.models import ProfileSnapshot, RecentGame, RecentTrophy, TrophyCounts
from psnprofile.store import ResultStore
from tests.helpers import PROFILE_URL


@pytest.fixture
def store(tmp_path):
    return ResultStore(str(tmp_path / "psnprofiles.json"))


@pytest.fixture
def snapshot():
    return ProfileSnapshot(
        source=PROFILE_URL,
        updated="2026-10-18T09:15:02.123Z",
        username="OSullivanJA",
        level=432,
        profile_image="https://i.psnprofiles.com/avatars/m/x.png",
        trophy_counts=TrophyCounts(total=1234, platinum=48, gold=201, silver=399, bronze=586),
        stats={"Games Played": "92"},
        recent_trophies=(RecentTrophy(trophy_name="Partners", game="A Way Out", rarity_label="Common"),),
        recent_games=(RecentGame(title="A Way Out", trophies_earned=55, trophies_total=55),),
    )


def test_load_previous_missing_file(store):
    assert store.load_previous() is None


def test_load_previous_invalid_json(store):
    store.path.write_text("{not json", encoding="utf-8")
    assert store.load_previous() is None


def test_load_previous_non_object(store):
    store.path.write_text("[1, 2, 3]", encoding="utf-8")
    assert store.load_previous() is None


def test_load_previous_directory_in_place_of_file(tmp_path):
    (tmp_path / "out.json").mkdir()
    assert ResultStore(str(tmp_path / "out.json")).load_previous() is None


def test_save_writes_two_space_json(store, snapshot):
    store.save(snapshot)
    text = store.path.read_text(encoding="utf-8")

    assert text.startswith('{\n  "source": ')
    data = json.loads(text)
    assert data["username"] == "OSullivanJA"
    assert data["trophyCounts"]["total"] == 1234
    assert data["recentGames"][0] == {"title": "A Way Out", "trophiesEarned": 55, "trophiesTotal": 55}
    assert "error" not in data


def test_save_creates_parent_directories(tmp_path, snapshot):
    store = ResultStore(str(tmp_path / "data" / "nested" / "profile.json"))
    store.save(snapshot)
    assert store.exists()


def test_save_then_load_previous(store, snapshot):
    store.save(snapshot)
    assert store.load_previous() == snapshot


def test_save_keeps_non_ascii(store, snapshot):
    store.save(ProfileSnapshot(source=PROFILE_URL, updated=snapshot.updated, username="Ōkami"))
    assert "Ōkami" in store.path.read_text(encoding="utf-8")


def test_placeholder_shape(store):
    store.save(ProfileSnapshot.placeholder(PROFILE_URL, "boom", updated="2026-10-18T00:00:00.000Z"))
    data = json.loads(store.path.read_text(encoding="utf-8"))

    assert data == {
        "source": PROFILE_URL,
        "updated": "2026-10-18T00:00:00.000Z",
        "error": "boom",
        "username": "",
        "level": 0,
        "profileImage": "",
        "trophyCounts": {"total": None, "platinum": None, "gold": None, "silver": None, "bronze": None},
        "stats": {},
        "recentTrophies": [],
        "recentGames": [],
    }


def test_placeholder_requires_message():
    with pytest.raises(ValueError):
        ProfileSnapshot.placeholder(PROFILE_URL, "")


def test_load_previous_huge_number_does_not_raise(store):
    store.path.write_text('{"source": "x", "updated": "y", "level": 1e999}', encoding="utf-8")
    previous = store.load_previous()

    assert previous is not None
    assert previous.level == 0


def test_load_previous_infinite_trophy_count_is_none(store):
    store.path.write_text('{"trophyCounts": {"total": 1e999, "gold": 3}}', encoding="utf-8")
    counts = store.load_previous().trophy_counts

    assert counts.total is None
    assert counts.gold == 3


def test_load_previous_deeply_nested_json(store):
    store.path.write_text("[" * 100000 + "]" * 100000, encoding="utf-8")
    assert store.load_previous() is None
