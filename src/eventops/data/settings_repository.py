"""Scheduling settings loader with database-first approach and file fallback."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.settings import SchedulingConfig, normalize_scheduling_config

logger = logging.getLogger(__name__)

SETTINGS_TABLE = "app_settings"
SETTINGS_ROW_ID = "default"


def _load_document_from_database() -> Optional[dict]:
    """Load the settings document from Supabase. Returns None if unavailable."""
    supabase = get_supabase_client()
    if not supabase:
        return None

    try:
        response = supabase.table(SETTINGS_TABLE).select("data").eq("id", SETTINGS_ROW_ID).limit(1).execute()
        if not response.data:
            return None
        document = response.data[0].get("data")
        return document if isinstance(document, dict) else None
    except Exception as e:
        logger.debug(f"Settings query failed, falling back to file: {e}")
        return None


def _load_document_from_file(source: Path) -> Optional[dict]:
    if not source.exists():
        logger.info(f"Settings file not found, using defaults: {source}")
        return None
    try:
        with source.open("r", encoding="utf-8") as handle:
            document = json.load(handle)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read settings file {source}: {e}")
        return None
    return document if isinstance(document, dict) else None


def load_scheduling_config(source: Path | None = None) -> SchedulingConfig:
    """Resolve the scheduling config for one request.

    Order of precedence: the ``app_settings`` table, the settings JSON file,
    then built-in defaults. Missing or invalid keys fall back per key.
    """

    document = _load_document_from_database() if source is None else None
    if document is None:
        document = _load_document_from_file(source or settings.settings_file)
    return normalize_scheduling_config(document)
