import os

from scanlens_core.config import is_excluded

SOURCE_EXTENSIONS = {
    ".js",
    ".jsx",
    ".mjs",
    ".cjs",
    ".ts",
    ".tsx",
}


def is_source_file(file_name: str) -> bool:
    return any(file_name.lower().endswith(ext) for ext in SOURCE_EXTENSIONS) and not file_name.lower().endswith(
        ".d.ts"
    )


def discover_files(root: str, exclude_patterns: list[str] | None = None) -> list[str]:
    """Return every source file under root, sorted, skipping excluded directories."""
    patterns = exclude_patterns or []
    found = []
    for dirpath, dirnames, filenames in os.walk(root):
        # Prune in place so os.walk never descends into node_modules and friends.
        dirnames[:] = sorted(d for d in dirnames if not is_excluded(os.path.join(dirpath, d) + "/", patterns, root))
        for name in sorted(filenames):
            if is_source_file(name):
                found.append(os.path.join(dirpath, name))
    return found
