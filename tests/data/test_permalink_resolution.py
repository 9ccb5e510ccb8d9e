import pytest

from myweblog.data.permalinks import PermalinkResolver


@pytest.mark.asyncio
async def test_current_permalinks_resolve_to_content(data, sample):
    resolver = PermalinkResolver(data)

    post = await resolver.resolve("2024/go-generics.html", sample.one.id)
    assert post.kind == "post"
    assert post.post.id == sample.generics.id

    page = await resolver.resolve("about-us", sample.one.id)
    assert page.kind == "page"
    assert page.page.id == sample.about.id


@pytest.mark.asyncio
async def test_trailing_slash_and_prior_permalinks_redirect(data, sample):
    resolver = PermalinkResolver(data)

    contact = await resolver.resolve("contact", sample.one.id)
    assert (contact.kind, contact.redirect_to) == ("redirect", "contact/")

    about = await resolver.resolve("about", sample.one.id)
    assert (about.kind, about.redirect_to) == ("redirect", "about-us")

    generics = await resolver.resolve("2023/generics.html/", sample.one.id)
    assert generics.redirect_to == sample.generics.permalink


@pytest.mark.asyncio
async def test_resolution_is_scoped_to_the_web_log(data, sample):
    resolver = PermalinkResolver(data)

    about = await resolver.resolve("about", sample.two.id)
    assert about.kind == "page"
    assert about.page.id == sample.other_about.id
    assert await resolver.resolve("about-us", sample.two.id) is None
    assert await resolver.resolve("nothing-here", sample.one.id) is None
