"""Author identity policies applied while aggregating."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Iterable, Union

from ..models import Author


class IdentityPolicy(str, Enum):
    """How commit authors are folded into people.

    EXACT: name and email must both match.
    EMAIL: same email, ignoring case.
    NAME: same name, ignoring case.
    ALIAS: same name OR same email, ignoring case, applied transitively.

    Merged identities are reported under the smallest member in natural
    order, so results do not depend on commit order.
    """

    EXACT = "exact"
    EMAIL = "email"
    NAME = "name"
    ALIAS = "alias"


IdentityResolver = Callable[[Author], Author]
Identity = Union[IdentityPolicy, str, IdentityResolver]


def build_resolver(identity: Identity, authors: Iterable[Author]) -> IdentityResolver:
    """Return a mapping from every observed author to its canonical identity."""
    if callable(identity) and not isinstance(identity, IdentityPolicy):
        return identity
    policy = IdentityPolicy(identity)
    if policy is IdentityPolicy.EXACT:
        return lambda author: author

    seen = sorted(set(authors))
    parent = {author: author for author in seen}

    def find(author: Author) -> Author:
        while parent[author] != author:
            parent[author] = parent[parent[author]]
            author = parent[author]
        return author

    def union(a: Author, b: Author) -> None:
        root_a, root_b = find(a), find(b)
        if root_a != root_b:
            # smallest author stays the root
            if root_b < root_a:
                root_a, root_b = root_b, root_a
            parent[root_b] = root_a

    by_token: dict[tuple[str, str], Author] = {}
    for author in seen:
        for token in _tokens(author, policy):
            first = by_token.setdefault(token, author)
            if first != author:
                union(first, author)

    canonical = {author: find(author) for author in seen}
    return lambda author: canonical.get(author, author)


def _tokens(author: Author, policy: IdentityPolicy) -> list[tuple[str, str]]:
    tokens = []
    if policy in (IdentityPolicy.EMAIL, IdentityPolicy.ALIAS) and author.email:
        tokens.append(("email", author.email.casefold()))
    if policy in (IdentityPolicy.NAME, IdentityPolicy.ALIAS) and author.name:
        tokens.append(("name", author.name.casefold()))
    return tokens
