import pytest

from myweblog.exceptions import ConflictError
from myweblog.models.weblog_models import Page


@pytest.mark.asyncio
async def test_all_is_ordered_by_title_without_text_or_history(data, sample):
    pages = await data.page.all(sample.one.id)

    assert [page.id for page in pages] == [sample.about.id, sample.contact.id, sample.secret.id]
    assert all(page.text == "" for page in pages)
    assert all(page.metadata == [] and page.revisions == [] and page.prior_permalinks == [] for page in pages)


@pytest.mark.asyncio
async def test_counts(data, sample):
    assert await data.page.count_all(sample.one.id) == 3
    assert await data.page.count_listed(sample.one.id) == 2
    assert await data.page.count_all(sample.two.id) == 1


@pytest.mark.asyncio
async def test_find_by_id_leaves_out_history(data, sample):
    page = await data.page.find_by_id(sample.about.id, sample.one.id)

    assert page.text == "<p>About</p>"
    assert page.metadata == sample.about.metadata
    assert page.prior_permalinks == []
    assert page.revisions == []
    assert await data.page.find_by_id(sample.about.id, sample.two.id) is None


@pytest.mark.asyncio
async def test_find_full_by_id(data, sample):
    assert await data.page.find_full_by_id(sample.about.id, sample.one.id) == sample.about


@pytest.mark.asyncio
async def test_find_full_by_web_log(data, sample):
    pages = await data.page.find_full_by_web_log(sample.two.id)
    assert pages == [sample.other_about]


@pytest.mark.asyncio
async def test_find_by_permalink_is_scoped(data, sample):
    assert (await data.page.find_by_permalink("about", sample.two.id)).id == sample.other_about.id
    assert await data.page.find_by_permalink("about", sample.one.id) is None


@pytest.mark.asyncio
async def test_find_current_permalink(data, sample):
    assert await data.page.find_current_permalink(["about", "about/"], sample.one.id) == "about-us"
    assert await data.page.find_current_permalink(["about", "about/"], sample.two.id) is None
    assert await data.page.find_current_permalink([], sample.one.id) is None


@pytest.mark.asyncio
async def test_find_listed(data, sample):
    pages = await data.page.find_listed(sample.one.id)

    assert [page.id for page in pages] == [sample.about.id, sample.contact.id]
    assert pages[0].text == ""
    assert pages[0].metadata == sample.about.metadata


@pytest.mark.asyncio
async def test_find_page_of_pages_fetches_one_extra(data, sample):
    data.page.admin_page_size = 2

    first = await data.page.find_page_of_pages(sample.one.id, 1)
    second = await data.page.find_page_of_pages(sample.one.id, 2)

    assert [page.id for page in first] == [sample.about.id, sample.contact.id, sample.secret.id]
    assert [page.id for page in second] == [sample.secret.id]
    assert first[0].metadata == []


@pytest.mark.asyncio
async def test_update_replaces_content_and_history(data, sample):
    changed = sample.about.model_copy(
        update={
            "title": "About This Site",
            "permalink": "about-this-site",
            "prior_permalinks": ["about", "about-us"],
            "text": "<p>New</p>",
            "show_in_page_list": False,
        }
    )
    assert await data.page.update(changed) is True
    assert await data.page.find_full_by_id(sample.about.id, sample.one.id) == changed

    assert await data.page.update(changed.model_copy(update={"web_log_id": sample.two.id})) is False


@pytest.mark.asyncio
async def test_update_prior_permalinks(data, sample):
    assert await data.page.update_prior_permalinks(sample.secret.id, sample.one.id, ["hidden", "private"]) is True
    page = await data.page.find_full_by_id(sample.secret.id, sample.one.id)
    assert page.prior_permalinks == ["hidden", "private"]

    assert await data.page.update_prior_permalinks(sample.secret.id, sample.two.id, ["x"]) is False
    assert await data.page.update_prior_permalinks("no-such-page", sample.one.id, ["x"]) is False


@pytest.mark.asyncio
async def test_delete(data, sample):
    assert await data.page.delete(sample.secret.id, sample.two.id) is False
    assert await data.page.delete(sample.secret.id, sample.one.id) is True
    assert await data.page.find_by_id(sample.secret.id, sample.one.id) is None
    assert await data.page.delete(sample.secret.id, sample.one.id) is False


@pytest.mark.asyncio
async def test_duplicate_permalink_in_web_log_conflicts(data, sample):
    copy = Page(
        id="page-copy",
        web_log_id=sample.one.id,
        author_id=sample.ada.id,
        title="Copy",
        permalink=sample.about.permalink,
        published_on=sample.about.published_on,
        updated_on=sample.about.updated_on,
    )
    with pytest.raises(ConflictError):
        await data.page.add(copy)

    # The same permalink in another web log is fine
    await data.page.add(copy.model_copy(update={"web_log_id": sample.two.id, "author_id": sample.alan.id}))


@pytest.mark.asyncio
async def test_restore(data, sample):
    pages = [
        sample.about.model_copy(update={"id": f"restored-{number}", "permalink": f"restored-{number}"})
        for number in range(3)
    ]
    report = await data.page.restore(pages)

    assert report.ok
    assert report.restored == 3
    restored = await data.page.find_full_by_id("restored-1", sample.one.id)
    assert restored.revisions == sample.about.revisions
    assert restored.prior_permalinks == sample.about.prior_permalinks
