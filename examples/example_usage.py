"""Using the service layer without Flask.

Prints the Q1 late-submission statistics and the manager dashboard for the
seeded demo cycle (``python scripts/init_db.py --seed`` first).
"""

import importlib
import json

from config import get_settings_module

from src.review_cycle.review_cycle.common.datetime_utils import today_local
from src.review_cycle.review_cycle.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    today = today_local()

    report = container.compliance_service.get_late_submission_stats(1, 1, "self-review", today=today)
    print(json.dumps(report.to_dict(), indent=2))

    dashboard = container.dashboard.get_manager_dashboard(2, 1, today=today)
    print(json.dumps(dashboard.to_dict(), indent=2))


if __name__ == "__main__":
    main()
