# a1_core/common/spectacular_hooks.py
from __future__ import annotations

PRIMARY_PREFIX = "/api/v1/"


def preprocess_exclude_legacy_api(endpoints):
    """
    Document each operation once, under /api/v1/. The /api/ alias routes to
    the same views and would otherwise produce retrieve2, list2, ... ids.
    """
    return [endpoint for endpoint in endpoints if endpoint[0].startswith(PRIMARY_PREFIX)]
