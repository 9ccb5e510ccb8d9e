import pytest

from myweblog.exceptions import ConflictError
from myweblog.models.results import ResultKind
from myweblog.models.weblog_models import CustomFeed, PostStatus, RedirectRule, RssOptions


@pytest.mark.asyncio
async def test_all_and_find(data, sample):
    assert [web_log.id for web_log in await data.web_log.all()] == [sample.one.id, sample.two.id]
    assert await data.web_log.find_by_id(sample.one.id) == sample.one
    assert await data.web_log.find_by_id("no-such-web-log") is None
    assert await data.web_log.find_by_host("https://two.example.com") == sample.two
    assert await data.web_log.find_by_host("https://three.example.com") is None


@pytest.mark.asyncio
async def test_duplicate_url_base_conflicts(data, sample):
    with pytest.raises(ConflictError):
        await data.web_log.add(sample.two.model_copy(update={"id": "wl-three"}))


@pytest.mark.asyncio
async def test_update_settings_leaves_rss_and_rules_alone(data, sample):
    await data.web_log.update_redirect_rules(
        sample.one.model_copy(update={"redirect_rules": [RedirectRule(from_url="/old", to_url="/new")]})
    )
    changed = sample.one.model_copy(update={"name": "Number One", "posts_per_page": 5, "theme_id": "other"})

    assert await data.web_log.update_settings(changed) is True

    found = await data.web_log.find_by_id(sample.one.id)
    assert (found.name, found.posts_per_page, found.theme_id) == ("Number One", 5, "other")
    assert found.redirect_rules == [RedirectRule(from_url="/old", to_url="/new")]
    assert await data.web_log.update_settings(changed.model_copy(update={"id": "missing"})) is False


@pytest.mark.asyncio
async def test_update_rss_options(data, sample):
    rss = RssOptions(
        feed_name="rss.xml",
        items_in_feed=20,
        custom_feeds=[CustomFeed(id="feed-go", source=f"category:{sample.go.id}", path="go.xml")],
    )
    assert await data.web_log.update_rss_options(sample.one.model_copy(update={"rss": rss})) is True

    found = await data.web_log.find_by_id(sample.one.id)
    assert found.rss == rss
    assert found.name == sample.one.name


@pytest.mark.asyncio
async def test_update_redirect_rules(data, sample):
    rules = [
        RedirectRule(from_url="/2023/(.*)", to_url="/archive/$1", is_regex=True),
        RedirectRule(from_url="/feed", to_url="/feed.xml"),
    ]
    assert await data.web_log.update_redirect_rules(sample.two.model_copy(update={"redirect_rules": rules})) is True
    assert (await data.web_log.find_by_id(sample.two.id)).redirect_rules == rules


@pytest.mark.asyncio
async def test_delete_removes_everything_of_the_web_log(data, sample):
    result = await data.web_log.delete(sample.one.id)

    assert result.ok
    assert await data.web_log.find_by_id(sample.one.id) is None
    assert await data.web_log_user.find_by_web_log(sample.one.id) == []
    assert await data.category.find_by_web_log(sample.one.id) == []
    assert await data.tag_map.find_by_web_log(sample.one.id) == []
    assert await data.upload.find_by_web_log(sample.one.id) == []
    assert await data.page.find_full_by_web_log(sample.one.id) == []
    assert await data.post.find_full_by_web_log(sample.one.id) == []
    assert await data.post.count_by_status(PostStatus.DRAFT, sample.one.id) == 0

    # The other web log and the shared theme are untouched
    assert await data.web_log.find_by_id(sample.two.id) == sample.two
    assert await data.post.find_full_by_id(sample.other_post.id, sample.two.id) is not None
    assert await data.page.find_by_permalink("about", sample.two.id) is not None
    assert await data.upload.find_by_path(sample.other_logo.path, sample.two.id) == sample.other_logo
    assert await data.theme.exists(sample.theme.id)


@pytest.mark.asyncio
async def test_delete_missing_web_log(data, sample):
    result = await data.web_log.delete("no-such-web-log")
    assert result.kind == ResultKind.NOT_FOUND
