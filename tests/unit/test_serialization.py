from datetime import datetime, timezone
from typing import List

from myweblog.data.serialization import DocumentSerializer
from myweblog.models.weblog_models import MetaItem, Post, RedirectRule, RssOptions, Upload

NOW = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)


def test_to_document_renames_id_and_keeps_native_values():
    upload = Upload(id="u1", web_log_id="wl", path="a.png", updated_on=NOW, data=b"\x00\x01")

    document = DocumentSerializer().to_document(upload)

    assert document["_id"] == "u1"
    assert "id" not in document
    assert document["updated_on"] == NOW
    assert document["data"] == b"\x00\x01"


def test_to_document_exclude():
    post = Post(id="p", web_log_id="wl", author_id="a", title="T", permalink="t", updated_on=NOW, text="long")
    document = DocumentSerializer().to_document(post, exclude={"text"})
    assert "text" not in document


def test_from_document_restores_utc_and_ignores_unknown_fields():
    document = {
        "_id": "u1",
        "web_log_id": "wl",
        "path": "a.png",
        "updated_on": datetime(2024, 3, 1, 8, 30),
        "legacy_field": True,
    }

    upload = DocumentSerializer().from_document(Upload, document)

    assert upload.id == "u1"
    assert upload.updated_on == NOW
    assert upload.updated_on.tzinfo is not None


def test_custom_id_field():
    serializer = DocumentSerializer(id_field="key")
    document = serializer.to_document(MetaItem(name="n", value="v"))
    assert document == {"name": "n", "value": "v"}


def test_json_values():
    serializer = DocumentSerializer()
    rules = [RedirectRule(from_url="/a", to_url="/b")]

    stored = serializer.to_json_value(rules)

    assert stored == [{"from_url": "/a", "to_url": "/b", "is_regex": False}]
    assert serializer.from_json_value(List[RedirectRule], stored) == rules
    assert serializer.to_json_value(None) is None
    assert serializer.from_json_value(RssOptions, None) is None
    assert serializer.from_json_value(RssOptions, {"feed_name": "rss.xml"}).feed_name == "rss.xml"
