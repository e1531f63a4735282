# track_core/common/spectacular_hooks.py
from __future__ import annotations


def preprocess_exclude_legacy_api(endpoints):
    """
    ROOT_URLCONF includes both /api/v1/ (primary) and /api/ (legacy alias).
    Without this hook drf-spectacular documents every operation twice.
    """
    filtered = []
    for path, path_regex, method, callback in endpoints:
        if path.startswith("/api/") and not path.startswith("/api/v1/"):
            continue
        filtered.append((path, path_regex, method, callback))
    return filtered
