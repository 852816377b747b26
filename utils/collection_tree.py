"""Request definitions of a Postman collection, modelled as a tree.

A collection's `item` array mixes requests and folders; a folder is any
node carrying its own `item` array. `parse_items` turns that JSON into
`RequestItem` / `FolderItem` nodes and `find_request` walks them.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional, Union


@dataclass(frozen=True)
class Header:
    key: str
    value: str


@dataclass(frozen=True)
class RequestItem:
    name: str
    method: str = "GET"
    headers: tuple[Header, ...] = ()
    url: str = ""
    body: Optional[str] = None


@dataclass(frozen=True)
class FolderItem:
    name: str
    children: tuple["CollectionItem", ...] = field(default_factory=tuple)


CollectionItem = Union[RequestItem, FolderItem]


def _raw_url(url: Any) -> str:
    if isinstance(url, str):
        return url
    if isinstance(url, dict):
        return url.get("raw") or ""
    return ""


def _raw_body(body: Any) -> Optional[str]:
    if isinstance(body, dict):
        return body.get("raw")
    return None


def parse_item(raw: dict[str, Any]) -> CollectionItem:
    name = raw.get("name", "")
    if isinstance(raw.get("item"), list):
        return FolderItem(name=name, children=tuple(parse_items(raw["item"])))

    request = raw.get("request") or {}
    if isinstance(request, str):
        # shorthand form: the request is just a URL
        return RequestItem(name=name, url=request)

    headers = tuple(
        Header(key=str(h.get("key", "")), value=str(h.get("value", "")))
        for h in request.get("header") or []
        if isinstance(h, dict)
    )
    return RequestItem(
        name=name,
        method=request.get("method") or "GET",
        headers=headers,
        url=_raw_url(request.get("url")),
        body=_raw_body(request.get("body")),
    )


def parse_items(raw_items: Iterable[dict[str, Any]]) -> list[CollectionItem]:
    return [parse_item(raw) for raw in raw_items if isinstance(raw, dict)]


def walk(items: Iterable[CollectionItem]) -> Iterator[CollectionItem]:
    """Yield nodes depth-first, each node before its children."""
    for item in items:
        yield item
        if isinstance(item, FolderItem):
            yield from walk(item.children)


def find_request(items: Iterable[CollectionItem], name: str) -> Optional[RequestItem]:
    """Return the first request named `name` in pre-order, or None."""
    for item in walk(items):
        if isinstance(item, RequestItem) and item.name == name:
            return item
    return None
