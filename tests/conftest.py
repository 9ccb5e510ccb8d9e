"""
Shared fixtures.

`data` runs each test against every backend: SQLite through SQLAlchemy/aiosqlite, and
MongoDB. MongoDB tests use the server named by `MYWEBLOG_TEST_MONGODB_URL` when it is
set and an in-memory mongomock-motor client otherwise; each test gets its own database,
dropped afterwards. `sample` seeds two web logs with users, categories, posts, pages, tag
mappings, uploads and a theme.
"""

import os
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest_asyncio
from mongomock_motor import AsyncMongoMockClient
from motor.motor_asyncio import AsyncIOMotorClient
from sqlalchemy.ext.asyncio import create_async_engine

from myweblog.data.serialization import DocumentSerializer
from myweblog.database.mongo import MongoData
from myweblog.database.sql import SqlData
from myweblog.models.ids import ThemeAssetId
from myweblog.models.weblog_models import (
    AccessLevel,
    Category,
    MetaItem,
    Page,
    Post,
    PostStatus,
    Revision,
    TagMap,
    Theme,
    ThemeAsset,
    ThemeTemplate,
    Upload,
    WebLog,
    WebLogUser,
)

MONGODB_URL = os.environ.get("MYWEBLOG_TEST_MONGODB_URL")


def when(day: int, month: int = 1) -> datetime:
    return datetime(2024, month, day, 12, 0, 0, tzinfo=timezone.utc)


# ============================================================================
# Backends
# ============================================================================


@pytest_asyncio.fixture(params=["sql", "mongodb"])
async def data(request, tmp_path):
    if request.param == "sql":
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'myweblog.db'}")
        backend = SqlData(engine, DocumentSerializer())
        await backend.start_up()
        yield backend
        await backend.close()
        return

    if MONGODB_URL:
        client = AsyncIOMotorClient(MONGODB_URL, serverSelectionTimeoutMS=2000)
    else:
        client = AsyncMongoMockClient()
    name = f"myweblog_test_{uuid.uuid4().hex}"
    backend = MongoData(client[name], DocumentSerializer())
    await backend.start_up()
    yield backend
    await client.drop_database(name)
    client.close()


# ============================================================================
# Sample content
# ============================================================================


def build_sample() -> SimpleNamespace:
    one = WebLog(id="wl-one", name="One", slug="one", url_base="https://one.example.com", theme_id="tech-theme")
    two = WebLog(id="wl-two", name="Two", slug="two", url_base="https://two.example.com")

    ada = WebLogUser(
        id="user-ada",
        web_log_id=one.id,
        email="ada@example.com",
        first_name="Ada",
        last_name="Lovelace",
        preferred_name="Ada",
        access_level=AccessLevel.WEB_LOG_ADMIN,
    )
    grace = WebLogUser(
        id="user-grace",
        web_log_id=one.id,
        email="grace@example.com",
        first_name="Grace",
        last_name="Hopper",
        preferred_name="Amazing Grace",
    )
    alan = WebLogUser(
        id="user-alan",
        web_log_id=two.id,
        email="ada@example.com",
        first_name="Alan",
        last_name="Turing",
        preferred_name="Alan",
    )

    tech = Category(id="cat-tech", web_log_id=one.id, name="Tech", slug="tech")
    go = Category(id="cat-go", web_log_id=one.id, name="Go", slug="go", parent_id=tech.id)
    python = Category(id="cat-python", web_log_id=one.id, name="Python", slug="python", parent_id=tech.id)
    misc = Category(id="cat-misc", web_log_id=one.id, name="misc", slug="misc", description="Everything else")
    other_tech = Category(id="cat-two-tech", web_log_id=two.id, name="Tech", slug="tech")

    def post(post_id, title, day, categories, status=PostStatus.PUBLISHED, **extra):
        return Post(
            id=post_id,
            web_log_id=one.id,
            author_id=ada.id,
            status=status,
            title=title,
            permalink=f"2024/{post_id}.html",
            published_on=when(day) if status == PostStatus.PUBLISHED else None,
            updated_on=when(day) + timedelta(hours=1),
            text=f"<p>{title}</p>",
            category_ids=categories,
            **extra,
        )

    generics = post(
        "go-generics",
        "Go Generics",
        10,
        [go.id],
        tags=["go", "Generics"],
        prior_permalinks=["2023/generics.html"],
        metadata=[MetaItem(name="series", value="go")],
        revisions=[
            Revision(as_of=when(10) + timedelta(hours=1), text="<p>Go Generics</p>"),
            Revision(as_of=when(10), text="<p>first draft</p>"),
        ],
    )
    modules = post("go-modules", "Go Modules", 20, [go.id, tech.id], tags=["go"])
    typing = post("python-typing", "Python Typing", 25, [python.id], tags=["python"])
    draft = post("go-draft", "Draft on Go", 28, [go.id], status=PostStatus.DRAFT, tags=["go"])
    misc_post = post("misc-thoughts", "Misc Thoughts", 5, [misc.id])
    other_post = Post(
        id="two-post",
        web_log_id=two.id,
        author_id=alan.id,
        status=PostStatus.PUBLISHED,
        title="Elsewhere",
        permalink="2024/go-generics.html",
        published_on=when(15),
        updated_on=when(15),
        category_ids=[other_tech.id],
        tags=["go"],
    )

    about = Page(
        id="page-about",
        web_log_id=one.id,
        author_id=ada.id,
        title="About Us",
        permalink="about-us",
        prior_permalinks=["about"],
        published_on=when(1),
        updated_on=when(2),
        show_in_page_list=True,
        text="<p>About</p>",
        metadata=[MetaItem(name="description", value="Who we are")],
        revisions=[Revision(as_of=when(2), text="<p>About</p>")],
    )
    contact = Page(
        id="page-contact",
        web_log_id=one.id,
        author_id=ada.id,
        title="contact",
        permalink="contact/",
        published_on=when(1),
        updated_on=when(1),
        show_in_page_list=True,
        text="<p>Contact</p>",
    )
    secret = Page(
        id="page-secret",
        web_log_id=one.id,
        author_id=ada.id,
        title="Zeta Secret",
        permalink="secret",
        published_on=when(1),
        updated_on=when(1),
        text="<p>Shh</p>",
    )
    other_about = Page(
        id="page-two-about",
        web_log_id=two.id,
        author_id=alan.id,
        title="About",
        permalink="about",
        published_on=when(1),
        updated_on=when(1),
    )

    go_tag = TagMap(id="tag-go", web_log_id=one.id, tag="go", url_value="golang")
    other_go_tag = TagMap(id="tag-two-go", web_log_id=two.id, tag="go", url_value="golang")

    logo = Upload(id="upload-logo", web_log_id=one.id, path="2024/01/logo.png", updated_on=when(3), data=b"\x89PNG")
    other_logo = Upload(
        id="upload-two-logo", web_log_id=two.id, path="2024/01/logo.png", updated_on=when(3), data=b"GIF8"
    )

    theme = Theme(
        id="tech-theme",
        name="Tech Theme",
        version="1.0",
        templates=[ThemeTemplate(name="index", text="{{ posts }}"), ThemeTemplate(name="layout", text="<html>")],
    )
    admin_theme = Theme(id="admin", name="Admin", version="2.1.1")
    style = ThemeAsset(id=ThemeAssetId(theme_id=theme.id, path="css/style.css"), updated_on=when(4), data=b"body{}")

    return SimpleNamespace(
        one=one,
        two=two,
        ada=ada,
        grace=grace,
        alan=alan,
        tech=tech,
        go=go,
        python=python,
        misc=misc,
        other_tech=other_tech,
        generics=generics,
        modules=modules,
        typing=typing,
        draft=draft,
        misc_post=misc_post,
        other_post=other_post,
        about=about,
        contact=contact,
        secret=secret,
        other_about=other_about,
        go_tag=go_tag,
        other_go_tag=other_go_tag,
        logo=logo,
        other_logo=other_logo,
        theme=theme,
        admin_theme=admin_theme,
        style=style,
    )


@pytest_asyncio.fixture
async def sample(data):
    s = build_sample()
    await data.theme.save(s.theme)
    await data.theme.save(s.admin_theme)
    await data.theme_asset.save(s.style)
    for web_log in (s.one, s.two):
        await data.web_log.add(web_log)
    for user in (s.ada, s.grace, s.alan):
        await data.web_log_user.add(user)
    for category in (s.tech, s.go, s.python, s.misc, s.other_tech):
        await data.category.add(category)
    for post in (s.generics, s.modules, s.typing, s.draft, s.misc_post, s.other_post):
        await data.post.add(post)
    for page in (s.about, s.contact, s.secret, s.other_about):
        await data.page.add(page)
    for tag_map in (s.go_tag, s.other_go_tag):
        await data.tag_map.save(tag_map)
    for upload in (s.logo, s.other_logo):
        await data.upload.add(upload)
    return s
