from myweblog.data.hierarchy import build_hierarchy, subtree_ids, with_post_counts
from myweblog.models.weblog_models import Category


def category(category_id, name, parent_id=None, slug=None):
    return Category(id=category_id, web_log_id="wl", name=name, slug=slug or name.lower(), parent_id=parent_id)


CATEGORIES = [
    category("travel", "Travel"),
    category("rust", "Rust", "tech"),
    category("tech", "Tech"),
    category("generics", "Generics", "go"),
    category("go", "Go", "tech"),
]


def test_depth_first_order_with_full_slugs():
    ordered = build_hierarchy(CATEGORIES)

    assert [(item.id, item.slug, item.parent_names) for item in ordered] == [
        ("tech", "tech", []),
        ("go", "tech/go", ["Tech"]),
        ("generics", "tech/go/generics", ["Tech", "Go"]),
        ("rust", "tech/rust", ["Tech"]),
        ("travel", "travel", []),
    ]
    assert all(item.post_count == 0 for item in ordered)


def test_siblings_sort_case_insensitively_then_by_id():
    ordered = build_hierarchy(
        [category("b", "beta"), category("a2", "Alpha"), category("a1", "Alpha"), category("c", "Gamma")]
    )
    assert [item.id for item in ordered] == ["a1", "a2", "b", "c"]


def test_orphans_and_cycles_are_left_out():
    ordered = build_hierarchy(
        [category("root", "Root"), category("orphan", "Orphan", "gone"), category("x", "X", "y"), category("y", "Y", "x")]
    )
    assert [item.id for item in ordered] == ["root"]


def test_subtree_ids():
    assert subtree_ids(CATEGORIES, "tech") == {"tech", "go", "generics", "rust"}
    assert subtree_ids(CATEGORIES, "generics") == {"generics"}
    assert subtree_ids(CATEGORIES, "unknown") == {"unknown"}


def test_with_post_counts_copies():
    ordered = build_hierarchy(CATEGORIES)
    counted = with_post_counts(ordered, {"tech": 3, "go": 2})

    assert [item.post_count for item in counted] == [3, 2, 0, 0, 0]
    assert ordered[0].post_count == 0
