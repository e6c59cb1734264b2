# linkdupes/core.py
#
# DESIGN RATIONALE:
# Files that share a basename somewhere in a tree are often copies of each other
# (backups, vendored assets, exported reports). This module finds the ones that
# are byte-for-byte identical and collapses them into hardlinks of one file.
#
# Key design decisions:
# - Candidates are grouped by basename only; content is never hashed.
# - Identity is decided by direct byte comparison, with a size check first.
# - The first path discovered is always the one kept on disk.
# - Read-side failures degrade to "not identical" / "not linked".
# - Delete and link failures propagate; each copy is deleted then relinked on its own,
#   so an interrupted run can simply be run again.

import filecmp
import os
import stat
from pathlib import Path


def is_regular_file(path):
    """True if path is a regular file and not a symlink."""
    try:
        return stat.S_ISREG(os.lstat(path).st_mode)
    except OSError:
        return False


def group_by_filename(root, verbose=False):
    """
    Walk root and group regular files by basename.
    Keys and list members are in discovery order. Unreadable subtrees are left out.
    """
    root = Path(root)
    groups = {}
    if not root.is_dir():
        return groups

    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        for name in sorted(filenames):
            path = Path(dirpath) / name
            if not is_regular_file(path):
                if verbose:
                    print(f"  - Skipping non-regular file {path}")
                continue
            groups.setdefault(name, []).append(path)
    return groups


def all_mutually_linked(paths):
    """
    True if every path has exactly len(paths) hardlinks.

    Assumes the paths already hold identical content. This does not check that the
    links point at each other rather than at files outside the group, so matching
    counts can wrongly report a group as linked. Accepted approximation.
    """
    expected = len(paths)
    try:
        return all(os.stat(p).st_nlink == expected for p in paths)
    except OSError:
        return False


def byte_identical(a, b, verbose=False):
    """Compare two regular files byte for byte. Unreadable files compare unequal."""
    if not is_regular_file(a) or not is_regular_file(b):
        return False
    try:
        # size mismatch short-circuits inside cmp before any content is read
        return filecmp.cmp(a, b, shallow=False)
    except OSError as e:
        if verbose:
            print(f"[WARN] Could not compare {a} and {b}: {e}")
        return False


def partition_by_identity(files, verbose=False):
    """
    Split a same-name group into subgroups of byte-identical files.

    The first remaining file is the pivot; everything identical to it joins its
    subgroup. Subgroups of one are dropped. The input list is left untouched.
    """
    remaining = list(files)
    subgroups = []
    while len(remaining) > 1:
        pivot = remaining[0]
        identical = [pivot]
        rest = []
        for candidate in remaining[1:]:
            if byte_identical(pivot, candidate, verbose=verbose):
                identical.append(candidate)
            else:
                rest.append(candidate)
        if len(identical) > 1:
            subgroups.append(identical)
        remaining = rest
    return subgroups


def convert_to_hardlinks(subgroup):
    """
    Replace every copy after the first with a hardlink to the first.
    Returns the paths that were relinked. OSError from unlink/link propagates.
    """
    if len(subgroup) < 2:
        return []

    survivor = subgroup[0]
    if not is_regular_file(survivor):
        print(f"[WARN] Keeper {survivor} is no longer a regular file, leaving group alone")
        return []

    linked = []
    for copy in subgroup[1:]:
        try:
            os.unlink(copy)
        except FileNotFoundError:
            # already gone, the link below restores the path
            pass
        if os.path.lexists(copy):
            print(f"[WARN] {copy} reappeared after delete, not linking")
            continue
        os.link(survivor, copy)
        linked.append(copy)
    return linked


def reclaimable_bytes(copies):
    """Bytes freed by linking copies[1:] to copies[0]. Copies already sharing its inode free nothing."""
    try:
        keep = os.stat(copies[0])
    except OSError:
        return 0
    total = 0
    for copy in copies[1:]:
        try:
            st = os.stat(copy)
        except OSError:
            continue
        if not os.path.samestat(keep, st):
            total += st.st_size
    return total


def replace_copies_by_hardlinks(root, verbose=False):
    """
    Hardlink every set of same-named, byte-identical files under root.
    Returns (groups_replaced, links_created, bytes_reclaimed).
    """
    groups_replaced = 0
    links_created = 0
    reclaimed = 0

    for name, group in group_by_filename(root, verbose=verbose).items():
        if len(group) < 2:
            continue
        if all_mutually_linked(group):
            if verbose:
                print(f"[INFO] Already linked: {name} ({len(group)} paths)")
            continue

        for copies in partition_by_identity(group, verbose=verbose):
            print("Replacing copies by hardlinks:")
            for path in copies:
                print(path)

            freed = reclaimable_bytes(copies)
            linked = convert_to_hardlinks(copies)
            if linked:
                groups_replaced += 1
                links_created += len(linked)
                reclaimed += freed

    return groups_replaced, links_created, reclaimed


def human_readable_size(size):
    """Convert byte size to human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024:
            return f"{size:.2f} {unit}"
        size /= 1024
    return f"{size:.2f} PB"
