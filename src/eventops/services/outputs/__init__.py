"""Output serializers for schedule runs."""

from .schedule_formatter import day_report_to_csv, day_report_to_json, persist_day_report, scheduling_config_to_json

__all__ = ["day_report_to_csv", "day_report_to_json", "persist_day_report", "scheduling_config_to_json"]
