"""
linkdupes.cli
CLI entrypoint for the linkdupes hardlink tool.
Scans a tree (the current directory by default) and replaces same-named identical copies by hardlinks.
"""

import argparse
from pathlib import Path
from .core import replace_copies_by_hardlinks, human_readable_size


def main():
    """Parse CLI arguments and replace duplicate copies by hardlinks."""
    parser = argparse.ArgumentParser(description="Replace same-named identical files by hardlinks.")
    parser.add_argument("root", type=Path, nargs="?", default=None, help="Directory to scan (default: current directory)")
    parser.add_argument("--verbose", action="store_true", help="Report skipped files and already linked groups")
    args = parser.parse_args()

    root = args.root if args.root else Path.cwd()

    print("[CONFIG]")
    print(f"- Root: {root}")
    print(f"- Verbose: {'ON' if args.verbose else 'OFF'}")

    print(f"[INFO] Scanning {root}...")
    groups, links, reclaimed = replace_copies_by_hardlinks(root, verbose=args.verbose)

    print(f"[DONE] {groups} duplicate groups replaced, {links} hardlinks created. Reclaimed: {human_readable_size(reclaimed)}")


if __name__ == "__main__":
    main()
