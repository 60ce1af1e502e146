"""
auth/similarity.py -- Near-duplicate username detection.

Two usernames are "similar" when their case-folded forms are identical or one
edit apart (insert, delete or substitute a single character). "John" and
"john" are similar; so are "john" and "johnn". Similarity is chained into
groups, so "ab", "abc" and "abcd" land in one group even though "ab" and
"abcd" are two edits apart.

Pure functions, no I/O. Used to warn about near-collisions at registration.
"""

from __future__ import annotations


def within_one_edit(a: str, b: str) -> bool:
    """Return True if a and b differ by at most one single-character edit."""
    if a == b:
        return True
    if abs(len(a) - len(b)) > 1:
        return False
    if len(a) > len(b):
        a, b = b, a
    # a is now the shorter (or equal length) string
    i = j = 0
    edited = False
    while i < len(a) and j < len(b):
        if a[i] == b[j]:
            i += 1
            j += 1
            continue
        if edited:
            return False
        edited = True
        if len(a) == len(b):
            i += 1
        j += 1
    return True


def are_similar(a: str, b: str) -> bool:
    return within_one_edit(a.casefold(), b.casefold())


def group_similar(usernames: list[str]) -> list[list[str]]:
    """Cluster usernames into groups of two or more similar names.

    Each group is sorted; groups are ordered by their first member.
    Usernames with no similar partner are left out.
    """
    parent = list(range(len(usernames)))

    def find(i: int) -> int:
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    for i in range(len(usernames)):
        for j in range(i + 1, len(usernames)):
            if are_similar(usernames[i], usernames[j]):
                parent[find(j)] = find(i)

    clusters: dict[int, list[str]] = {}
    for i, name in enumerate(usernames):
        clusters.setdefault(find(i), []).append(name)

    groups = [sorted(members) for members in clusters.values() if len(members) > 1]
    return sorted(groups, key=lambda g: g[0])


def similar_to(candidate: str, usernames: list[str]) -> list[str]:
    """Return the usernames similar to candidate, sorted."""
    return sorted(name for name in usernames if are_similar(candidate, name))
