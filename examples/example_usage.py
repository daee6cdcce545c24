"""Example: drive the payroll service layer directly, without Flask.

Controllers are thin; everything below is what the HTTP routes call.
"""

import importlib

from config import get_settings_module

from src.farm_payroll.farm_payroll.container import build_container
from src.farm_payroll.farm_payroll.database.bootstrap import apply_schema, ensure_demo_owner


def main():
    settings = importlib.import_module(get_settings_module())
    apply_schema(settings.DB_CONFIG)
    owner_id = ensure_demo_owner(settings.DB_CONFIG)

    container = build_container(
        db_config=settings.DB_CONFIG,
        secret_key=settings.SECRET_KEY,
        payment_day=getattr(settings, "PAYMENT_DAY", "Sunday"),
    )

    summary = container.payroll_service.weekly_summary(owner_id)
    print(f"Pay week {summary.week.start} .. {summary.week.end} (payment day {summary.payment_day.value})")
    for row in summary.rows:
        status = "paid" if row.payment_made else "unpaid"
        print(f"  {row.worker_name:<12} days={row.days_worked} wages={row.total_week_wages} advance={row.advance} {status}")


if __name__ == "__main__":
    main()
