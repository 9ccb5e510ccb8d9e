from datetime import datetime, timedelta, timezone

import pytest

from myweblog.exceptions import ConflictError
from myweblog.models.weblog_models import Episode, Post, PostStatus


@pytest.mark.asyncio
async def test_count_by_status(data, sample):
    assert await data.post.count_by_status(PostStatus.PUBLISHED, sample.one.id) == 4
    assert await data.post.count_by_status(PostStatus.DRAFT, sample.one.id) == 1
    assert await data.post.count_by_status("Published", sample.two.id) == 1


@pytest.mark.asyncio
async def test_find_by_id_leaves_out_history(data, sample):
    post = await data.post.find_by_id(sample.generics.id, sample.one.id)

    assert post.text == sample.generics.text
    assert post.tags == ["go", "generics"]
    assert post.category_ids == [sample.go.id]
    assert post.metadata == sample.generics.metadata
    assert post.prior_permalinks == []
    assert post.revisions == []
    assert await data.post.find_by_id(sample.generics.id, sample.two.id) is None


@pytest.mark.asyncio
async def test_find_full_by_id(data, sample):
    assert await data.post.find_full_by_id(sample.generics.id, sample.one.id) == sample.generics


@pytest.mark.asyncio
async def test_find_full_by_web_log(data, sample):
    posts = await data.post.find_full_by_web_log(sample.one.id)
    assert {post.id for post in posts} == {
        sample.generics.id,
        sample.modules.id,
        sample.typing.id,
        sample.draft.id,
        sample.misc_post.id,
    }


@pytest.mark.asyncio
async def test_find_by_permalink_is_scoped(data, sample):
    one = await data.post.find_by_permalink("2024/go-generics.html", sample.one.id)
    two = await data.post.find_by_permalink("2024/go-generics.html", sample.two.id)
    assert one.id == sample.generics.id
    assert two.id == sample.other_post.id


@pytest.mark.asyncio
async def test_find_current_permalink(data, sample):
    found = await data.post.find_current_permalink(["2023/generics.html"], sample.one.id)
    assert found == sample.generics.permalink
    assert await data.post.find_current_permalink(["2023/generics.html"], sample.two.id) is None


@pytest.mark.asyncio
async def test_published_posts_newest_first_with_extra_row(data, sample):
    first = await data.post.find_page_of_published_posts(sample.one.id, 1, 2)
    last = await data.post.find_page_of_published_posts(sample.one.id, 2, 2)

    assert [post.id for post in first] == [sample.typing.id, sample.modules.id, sample.generics.id]
    assert [post.id for post in last] == [sample.generics.id, sample.misc_post.id]
    assert all(post.revisions == [] and post.prior_permalinks == [] for post in first)


@pytest.mark.asyncio
async def test_page_number_below_one_is_first_page(data, sample):
    first = await data.post.find_page_of_published_posts(sample.one.id, 1, 2)
    assert await data.post.find_page_of_published_posts(sample.one.id, 0, 2) == first


@pytest.mark.asyncio
async def test_categorized_posts(data, sample):
    posts = await data.post.find_page_of_categorized_posts(sample.one.id, [sample.go.id, sample.tech.id], 1, 10)
    # Go Modules is in both categories but listed once; the draft is left out
    assert [post.id for post in posts] == [sample.modules.id, sample.generics.id]

    assert await data.post.find_page_of_categorized_posts(sample.one.id, [], 1, 10) == []
    assert await data.post.find_page_of_categorized_posts(sample.two.id, [sample.go.id], 1, 10) == []


@pytest.mark.asyncio
async def test_tagged_posts_match_case_insensitively(data, sample):
    posts = await data.post.find_page_of_tagged_posts(sample.one.id, "Go", 1, 10)
    assert [post.id for post in posts] == [sample.modules.id, sample.generics.id]


@pytest.mark.asyncio
async def test_page_of_posts_includes_drafts_without_text(data, sample):
    posts = await data.post.find_page_of_posts(sample.one.id, 1, 10)

    # Drafts sort by their updated date
    assert [post.id for post in posts] == [
        sample.draft.id,
        sample.typing.id,
        sample.modules.id,
        sample.generics.id,
        sample.misc_post.id,
    ]
    assert all(post.text == "" for post in posts)


@pytest.mark.asyncio
async def test_surrounding_posts(data, sample):
    older, newer = await data.post.find_surrounding_posts(sample.one.id, sample.modules.published_on)
    assert older.id == sample.generics.id
    assert newer.id == sample.typing.id

    older, newer = await data.post.find_surrounding_posts(sample.one.id, sample.typing.published_on)
    assert older.id == sample.modules.id
    assert newer is None


@pytest.mark.asyncio
async def test_sub_millisecond_timestamps_read_back_equal(data, sample):
    on = datetime(2024, 1, 26, 9, 30, 15, 123456, tzinfo=timezone.utc)
    post = sample.typing.model_copy(update={"id": "precise", "permalink": "2024/precise.html"})
    post = Post.model_validate({**post.model_dump(), "published_on": on, "updated_on": on})
    await data.post.add(post)

    assert await data.post.find_full_by_id("precise", sample.one.id) == post
    older, newer = await data.post.find_surrounding_posts(sample.one.id, on)
    assert older.id == sample.typing.id
    assert newer is None


@pytest.mark.asyncio
async def test_update_replaces_post(data, sample):
    changed = sample.generics.model_copy(
        update={
            "title": "Generics in Go",
            "tags": ["golang"],
            "category_ids": [sample.tech.id, sample.go.id],
            "updated_on": sample.generics.updated_on + timedelta(days=1),
            "episode": Episode(media="episode-1.mp3", length=1024, duration="0:42:00"),
        }
    )
    assert await data.post.update(changed) is True
    assert await data.post.find_full_by_id(sample.generics.id, sample.one.id) == changed

    assert await data.post.update(changed.model_copy(update={"id": "no-such-post"})) is False


@pytest.mark.asyncio
async def test_update_prior_permalinks(data, sample):
    assert await data.post.update_prior_permalinks(sample.modules.id, sample.one.id, ["old/modules"]) is True
    post = await data.post.find_full_by_id(sample.modules.id, sample.one.id)
    assert post.prior_permalinks == ["old/modules"]
    assert await data.post.update_prior_permalinks(sample.modules.id, sample.two.id, []) is False


@pytest.mark.asyncio
async def test_delete(data, sample):
    assert await data.post.delete(sample.generics.id, sample.two.id) is False
    assert await data.post.delete(sample.generics.id, sample.one.id) is True
    assert await data.post.find_by_id(sample.generics.id, sample.one.id) is None
    assert await data.post.find_current_permalink(["2023/generics.html"], sample.one.id) is None


@pytest.mark.asyncio
async def test_duplicate_permalink_conflicts(data, sample):
    copy = sample.typing.model_copy(update={"id": "typing-copy"})
    with pytest.raises(ConflictError):
        await data.post.add(copy)


@pytest.mark.asyncio
async def test_restore(data, sample):
    posts = [
        sample.generics.model_copy(update={"id": f"restored-{number}", "permalink": f"restored/{number}"})
        for number in range(5)
    ]
    data.post.batch_size = 2
    report = await data.post.restore(posts)

    assert report.ok
    assert report.restored == 5
    restored = await data.post.find_full_by_id("restored-4", sample.one.id)
    assert restored.tags == sample.generics.tags
    assert restored.revisions == sample.generics.revisions
