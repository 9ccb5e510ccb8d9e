from datetime import datetime, timedelta, timezone

import pytest

from myweblog.models.ids import ThemeAssetId, new_id
from myweblog.models.results import CategoryDeleteResult, DataResult, ResultKind, StartUpReport
from myweblog.models.weblog_models import AccessLevel, Page, Post, PostStatus, Revision, WebLogUser, as_utc, utc_now


def test_new_id_is_22_url_safe_characters():
    ids = {new_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(value) == 22 and "=" not in value and "+" not in value and "/" not in value for value in ids)


def test_theme_asset_id():
    asset_id = ThemeAssetId.parse("tech-theme/css/style.css")
    assert (asset_id.theme_id, asset_id.path) == ("tech-theme", "css/style.css")
    assert str(asset_id) == "tech-theme/css/style.css"

    with pytest.raises(ValueError):
        ThemeAssetId.parse("no-path")


def test_post_tags_and_categories_are_sets_in_order():
    post = Post(
        id="p",
        web_log_id="wl",
        author_id="a",
        title="T",
        permalink="t",
        updated_on=datetime(2024, 1, 1, tzinfo=timezone.utc),
        tags=["Python", "python ", "Async", ""],
        category_ids=["c2", "c1", "c2"],
    )
    assert post.tags == ["python", "async"]
    assert post.category_ids == ["c2", "c1"]
    assert post.status == PostStatus.DRAFT.value


def test_timestamps_are_utc():
    eastern = timezone(timedelta(hours=-5))
    page = Page(
        id="g",
        web_log_id="wl",
        author_id="a",
        title="T",
        permalink="t",
        published_on=datetime(2024, 1, 1, 7, 0, tzinfo=eastern),
        updated_on=datetime(2024, 1, 1, 12, 0),
    )
    assert page.published_on == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
    assert page.published_on.utcoffset() == timedelta(0)
    assert page.updated_on.tzinfo is not None


def test_timestamps_keep_millisecond_precision():
    revision = Revision(as_of=datetime(2024, 1, 10, 12, 0, 0, 123456, tzinfo=timezone.utc))
    assert revision.as_of == datetime(2024, 1, 10, 12, 0, 0, 123000, tzinfo=timezone.utc)
    assert utc_now().microsecond % 1000 == 0
    assert as_utc(datetime(2024, 1, 10, 7, 0, 0, 999999)).microsecond == 999000


def test_access_levels_include_lower_ones():
    assert AccessLevel.has_access(AccessLevel.AUTHOR, AccessLevel.EDITOR)
    assert AccessLevel.has_access(AccessLevel.WEB_LOG_ADMIN, AccessLevel.ADMINISTRATOR)
    assert AccessLevel.has_access("Editor", "Editor")
    assert not AccessLevel.has_access(AccessLevel.ADMINISTRATOR, AccessLevel.WEB_LOG_ADMIN)


def test_display_name():
    user = WebLogUser(id="u", web_log_id="wl", email="e", first_name="Grace", last_name="Hopper")
    assert user.display_name == "Grace Hopper"
    assert user.model_copy(update={"preferred_name": "Amazing Grace"}).display_name == "Amazing Grace Hopper"


def test_result_values():
    assert DataResult.success("x").ok
    assert DataResult.not_found().kind == ResultKind.NOT_FOUND
    assert not DataResult.blocked("has posts").ok
    assert DataResult.unresolved("stopped", value=["posts"]).value == ["posts"]
    assert CategoryDeleteResult("deleted") is CategoryDeleteResult.DELETED
    assert StartUpReport().changed is False
    assert StartUpReport(migrations_applied=["v2.1.1"]).changed is True
