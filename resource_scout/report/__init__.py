"""resource_scout.report: сохранение отчётов анализа (JSON), используется CLI и тестами."""

from resource_scout.report.json_report import render_json

__all__ = ["render_json"]
