import copy
import logging
import os
import re
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG: dict = {
    "enabled": True,
    "rules": {"security": True, "performance": True, "style": True},
    "custom_rules": [],  # regular expressions, each reported as a "custom-rule" finding
    "exclude_patterns": ["**/node_modules/**", "**/dist/**", "**/build/**", "**/.git/**"],
    "max_file_size": 500,  # KB
    "auto_analyze_on_save": True,
    "retention_days": 30,
    "store": "json",  # "json" | "gist" | "none"
    "store_path": ".scanlens/review-history.json",
    "gist_id": None,
    "linter": {"enabled": False, "command": ["eslint"], "timeout": 30},
    "root": ".",  # exclude patterns are matched relative to this directory
}

# Keys accepted from the editor-style JSON config format.
_ALIASES = {
    "customRules": "custom_rules",
    "excludePatterns": "exclude_patterns",
    "maxFileSize": "max_file_size",
    "autoAnalyzeOnSave": "auto_analyze_on_save",
    "retentionDays": "retention_days",
    "storePath": "store_path",
    "gistId": "gist_id",
}

_STORE_TYPES = ("json", "gist", "none", "noop")


def load_config(config_path: str = ".scanlens.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .scanlens.yml in the current directory
      3. CLI argument overrides

    Malformed values never abort loading: each bad field falls back to its
    default and a warning is logged.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read %s, using defaults: %s", config_path, e)
            file_config = {}
        if not isinstance(file_config, dict):
            logger.warning("Ignoring %s: expected a mapping at the top level.", config_path)
            file_config = {}
        for key, value in file_config.items():
            config[_ALIASES.get(key, key)] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config = validate_config(config)

    # Resolve credentials from environment variables
    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def validate_config(config: dict) -> dict:
    """Replace every malformed field with its default value."""
    result = dict(config)

    for key in ("enabled", "auto_analyze_on_save"):
        if not isinstance(result.get(key), bool):
            result[key] = _fallback(key, result.get(key))

    for key in ("max_file_size", "retention_days"):
        value = result.get(key)
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            result[key] = _fallback(key, value)

    for key in ("custom_rules", "exclude_patterns"):
        value = result.get(key)
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            result[key] = _fallback(key, value)

    rules = result.get("rules")
    merged_rules = dict(DEFAULT_CONFIG["rules"])
    if isinstance(rules, dict):
        for category, enabled in rules.items():
            if category in merged_rules and isinstance(enabled, bool):
                merged_rules[category] = enabled
            else:
                logger.warning("Ignoring malformed rules.%s: %r", category, enabled)
    elif rules is not None:
        logger.warning("Ignoring malformed rules: %r", rules)
    result["rules"] = merged_rules

    linter = result.get("linter")
    merged_linter = copy.deepcopy(DEFAULT_CONFIG["linter"])
    if isinstance(linter, dict):
        if isinstance(linter.get("enabled"), bool):
            merged_linter["enabled"] = linter["enabled"]
        command = linter.get("command")
        if isinstance(command, str):
            merged_linter["command"] = command.split()
        elif isinstance(command, list) and command and all(isinstance(c, str) for c in command):
            merged_linter["command"] = list(command)
        if isinstance(linter.get("timeout"), (int, float)) and not isinstance(linter.get("timeout"), bool):
            merged_linter["timeout"] = linter["timeout"]
    elif linter is not None:
        logger.warning("Ignoring malformed linter settings: %r", linter)
    result["linter"] = merged_linter

    if result.get("store") not in _STORE_TYPES:
        result["store"] = _fallback("store", result.get("store"))
    for key in ("store_path", "root"):
        if not isinstance(result.get(key), str) or not result.get(key):
            result[key] = _fallback(key, result.get(key))

    return result


def _fallback(key: str, value):
    default = copy.deepcopy(DEFAULT_CONFIG[key])
    logger.warning("Invalid value for %r (%r); using default %r.", key, value, default)
    return default


def enabled_categories(config: dict) -> list[str]:
    rules = config.get("rules", DEFAULT_CONFIG["rules"])
    return [category for category in ("security", "performance", "style") if rules.get(category, True)]


def relative_path(file_path: str, root: str = ".") -> str:
    """Return ``file_path`` relative to ``root`` with forward slashes.

    Paths outside ``root`` are returned unchanged.
    """
    try:
        rel = os.path.relpath(os.path.abspath(file_path), os.path.abspath(root))
    except ValueError:
        rel = file_path
    if rel.startswith(".."):
        rel = file_path
    rel = rel.replace(os.sep, "/").replace("\\", "/")
    return rel[2:] if rel.startswith("./") else rel


def _glob_to_regex(pattern: str) -> re.Pattern:
    """Translate a glob into an anchored regex.

    ``**/`` matches zero or more directories, a trailing ``/**`` matches
    everything below a directory, ``*`` and ``?`` never cross a slash.
    """
    i, out = 0, []
    while i < len(pattern):
        if pattern.startswith("**/", i):
            out.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("/**", i) and i + 3 == len(pattern):
            out.append("(?:/.*)?")
            i += 3
        elif pattern.startswith("**", i):
            out.append(".*")
            i += 2
        elif pattern[i] == "*":
            out.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            out.append("[^/]")
            i += 1
        else:
            out.append(re.escape(pattern[i]))
            i += 1
    return re.compile("".join(out) + r"\Z")


def is_excluded(file_path: str, patterns: list[str], root: str = ".") -> bool:
    """Return True if file_path matches any exclude pattern.

    Supports:
    - globs on the path relative to root: "**/node_modules/**", "src/generated/*.js"
    - globs on the basename for slash-free patterns: "*.min.js"
    - Directory names/prefixes: "vendor/", "fixtures" (matches any file within that tree)
    """
    rel = relative_path(file_path, root)
    basename = rel.rsplit("/", 1)[-1]
    for pattern in patterns:
        if _glob_to_regex(pattern).match(rel):
            return True
        if "/" not in pattern and _glob_to_regex(pattern).match(basename):
            return True
        # Directory prefix: "vendor" or "vendor/" matches "lib/vendor/jquery.js"
        prefix = pattern.rstrip("/") + "/"
        if "*" not in prefix and (rel.startswith(prefix) or ("/" + prefix) in rel):
            return True
    return False


def is_too_large(size_bytes: int, max_file_size_kb: float) -> bool:
    return size_bytes / 1024 > max_file_size_kb
