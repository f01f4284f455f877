"""Resolve a login form's action attribute against the login page URL."""

from typing import Optional
from urllib.parse import urlsplit


def origin_of(url: str) -> str:
    """scheme://host[:port]"""
    parts = urlsplit(url)
    return f"{parts.scheme}://{parts.netloc}"


def directory_of(url: str) -> str:
    """URL up to and including the last '/' of its path, without query or fragment"""
    parts = urlsplit(url)
    path = parts.path
    directory = path[:path.rindex("/") + 1] if "/" in path else "/"
    return f"{parts.scheme}://{parts.netloc}{directory}"


def resolve_action_url(login_url: str, action: Optional[str]) -> str:
    """
    Resolve a form action against the login URL.

    Handles an absent action, an absolute one, an origin-relative action
    ("/do-login") and a path-relative one ("do-login"). ".." segments and
    protocol-relative actions are not resolved.
    """
    if not action:
        return login_url
    if urlsplit(action).scheme in ("http", "https"):
        return action
    if action.startswith("/"):
        return origin_of(login_url) + action
    return directory_of(login_url) + action
