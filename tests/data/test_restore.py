import pytest

from myweblog.data.restore import create_archive, restore_archive
from myweblog.exceptions import ConflictError, WebLogDataError
from myweblog.models.backup import Archive


@pytest.mark.asyncio
async def test_create_archive(data, sample):
    archive = await create_archive(data, sample.one.id)

    assert archive.web_log == sample.one
    assert {user.id for user in archive.users} == {sample.ada.id, sample.grace.id}
    assert len(archive.categories) == 4
    assert archive.tag_mappings == [sample.go_tag]
    assert len(archive.pages) == 3
    assert len(archive.posts) == 5
    assert archive.uploads == [sample.logo]
    assert archive.themes == [sample.theme]
    assert archive.theme_assets == [sample.style]


@pytest.mark.asyncio
async def test_create_archive_of_missing_web_log(data, sample):
    with pytest.raises(WebLogDataError):
        await create_archive(data, "no-such-web-log")


@pytest.mark.asyncio
async def test_restore_over_existing_web_log_needs_overwrite(data, sample):
    archive = await create_archive(data, sample.one.id)

    with pytest.raises(ConflictError):
        await restore_archive(data, archive)


@pytest.mark.asyncio
async def test_restore_from_json_with_overwrite(data, sample):
    archive = Archive.model_validate_json((await create_archive(data, sample.one.id)).model_dump_json())
    await data.post.update_prior_permalinks(sample.generics.id, sample.one.id, [])

    reports = await restore_archive(data, archive, overwrite=True)

    assert [report.entity for report in reports] == [
        "theme",
        "theme asset",
        "user",
        "category",
        "tag map",
        "page",
        "post",
        "upload",
    ]
    assert all(report.ok for report in reports)
    assert await data.post.find_full_by_id(sample.generics.id, sample.one.id) == sample.generics
    assert await data.page.find_full_by_id(sample.about.id, sample.one.id) == sample.about
    assert await data.upload.find_by_path(sample.logo.path, sample.one.id) == sample.logo
    assert await data.web_log_user.find_by_id(sample.ada.id, sample.one.id) == sample.ada
    assert await data.post.find_full_by_id(sample.other_post.id, sample.two.id) is not None
