"""
Saved content library: per-profile isolation, ordering and platform filter.
"""
from datetime import datetime, timedelta

import pytest

from studio.core.errors import NotFound
from studio.services import content_store
from tests.conftest import TEST_PROFILE_ID, OTHER_PROFILE_ID


@pytest.fixture
def two_profiles(make_profile):
    make_profile(TEST_PROFILE_ID)
    make_profile(OTHER_PROFILE_ID)


@pytest.fixture
def ticking_clock(monkeypatch):
    """Each save lands one minute after the previous one."""
    moments = iter(datetime(2026, 1, 1, 8, 0) + timedelta(minutes=i) for i in range(100))
    monkeypatch.setattr(content_store, "utc_now", lambda: next(moments))


def test_save_fills_default_title(db, two_profiles):
    item = content_store.save_content(
        db, TEST_PROFILE_ID, "post body", "promotion", "facebook", business_name="Shwe Tea House"
    )
    assert item.title == "promotion for Shwe Tea House"
    assert item.user_id == TEST_PROFILE_ID
    assert item.id

    untitled = content_store.save_content(db, TEST_PROFILE_ID, "another", "post", "instagram")
    assert untitled.title == "post"

    titled = content_store.save_content(db, TEST_PROFILE_ID, "x", "post", "instagram", title="Mine")
    assert titled.title == "Mine"


def test_list_is_newest_first(db, two_profiles, ticking_clock):
    first = content_store.save_content(db, TEST_PROFILE_ID, "one", "post", "facebook")
    second = content_store.save_content(db, TEST_PROFILE_ID, "two", "post", "instagram")
    third = content_store.save_content(db, TEST_PROFILE_ID, "three", "post", "facebook")

    items = content_store.list_content(db, TEST_PROFILE_ID)
    assert [i.id for i in items] == [third.id, second.id, first.id]


def test_list_filters_by_platform(db, two_profiles, ticking_clock):
    content_store.save_content(db, TEST_PROFILE_ID, "fb", "post", "facebook")
    content_store.save_content(db, TEST_PROFILE_ID, "ig", "post", "instagram")

    assert [i.content for i in content_store.list_content(db, TEST_PROFILE_ID, platform="instagram")] == ["ig"]
    assert len(content_store.list_content(db, TEST_PROFILE_ID, platform="all")) == 2
    assert content_store.list_content(db, TEST_PROFILE_ID, platform="telegram") == []


def test_profiles_never_see_each_others_items(db, two_profiles):
    mine = content_store.save_content(db, TEST_PROFILE_ID, "mine", "post", "facebook")
    content_store.save_content(db, OTHER_PROFILE_ID, "theirs", "post", "facebook")

    assert [i.content for i in content_store.list_content(db, TEST_PROFILE_ID)] == ["mine"]
    assert [i.content for i in content_store.list_content(db, OTHER_PROFILE_ID)] == ["theirs"]

    with pytest.raises(NotFound):
        content_store.get_content(db, OTHER_PROFILE_ID, mine.id)
    with pytest.raises(NotFound):
        content_store.delete_content(db, OTHER_PROFILE_ID, mine.id)
    assert content_store.get_content(db, TEST_PROFILE_ID, mine.id).content == "mine"


def test_delete_removes_item(db, two_profiles):
    item = content_store.save_content(db, TEST_PROFILE_ID, "bye", "post", "facebook")
    item_id = item.id
    content_store.delete_content(db, TEST_PROFILE_ID, item_id)

    assert content_store.list_content(db, TEST_PROFILE_ID) == []
    with pytest.raises(NotFound):
        content_store.delete_content(db, TEST_PROFILE_ID, item_id)
