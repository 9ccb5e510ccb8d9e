"""
# Category Hierarchy

Builds the read-time view of a web log's category forest. Both backends use these
functions; only the post counting differs between them.

## Ordering

Roots first, depth-first. Siblings are visited in case-insensitive name order, with ties
broken by name and then id so the order never depends on the order rows come back in.

```
Tech            tech                parent_names=[]
  Go            tech/go             parent_names=["Tech"]
    Generics    tech/go/generics    parent_names=["Tech", "Go"]
  Rust          tech/rust           parent_names=["Tech"]
Travel          travel              parent_names=[]
```

## Post Counts

A category's post count covers its whole subtree: the number of distinct published posts
that reference the category itself or any of its descendants. `subtree_ids()` gives the
id set the backends count against.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Set

from myweblog.models.view_models import DisplayCategory
from myweblog.models.weblog_models import Category


def _sort_key(category: Category):
    return (category.name.lower(), category.name, category.id)


def build_hierarchy(categories: Iterable[Category]) -> List[DisplayCategory]:
    """
    Order categories depth-first and compute each one's full slug and ancestor names.

    Categories whose parent is not among `categories` cannot be reached from a root and
    are left out.

    Args:
        categories: All categories of one web log.

    Returns:
        List[DisplayCategory]: The categories in display order, with `post_count` of 0.
    """
    children: Dict[Optional[str], List[Category]] = defaultdict(list)
    for category in categories:
        children[category.parent_id].append(category)
    for siblings in children.values():
        siblings.sort(key=_sort_key)

    ordered: List[DisplayCategory] = []
    visited: Set[str] = set()

    def visit(parent_id: Optional[str], slugs: List[str], names: List[str]) -> None:
        for category in children.get(parent_id, []):
            if category.id in visited:
                continue
            visited.add(category.id)
            ordered.append(
                DisplayCategory(
                    id=category.id,
                    slug="/".join(slugs + [category.slug]),
                    name=category.name,
                    description=category.description,
                    parent_names=list(names),
                )
            )
            visit(category.id, slugs + [category.slug], names + [category.name])

    visit(None, [], [])
    return ordered


def subtree_ids(categories: Iterable[Category], category_id: str) -> Set[str]:
    """Return `category_id` and the ids of all of its descendants."""
    children: Dict[Optional[str], List[str]] = defaultdict(list)
    for category in categories:
        children[category.parent_id].append(category.id)

    found: Set[str] = set()
    pending = [category_id]
    while pending:
        current = pending.pop()
        if current in found:
            continue
        found.add(current)
        pending.extend(children.get(current, []))
    return found


def with_post_counts(ordered: List[DisplayCategory], counts: Mapping[str, int]) -> List[DisplayCategory]:
    """Copy of `ordered` with `post_count` taken from `counts` (missing ids count 0)."""
    return [category.model_copy(update={"post_count": counts.get(category.id, 0)}) for category in ordered]
