import io
import json
import logging
from datetime import date
from decimal import Decimal

from src.farm_payroll.farm_payroll.logging_config import configure_logging, get_logger


def test_logger_names_are_shortened_under_one_namespace():
    assert get_logger("src.farm_payroll.farm_payroll.payroll.service").name == "farm_payroll.payroll.service"
    assert get_logger("farm_payroll.advances.service").name == "farm_payroll.advances.service"


def test_structured_lines_carry_extra_fields():
    stream = io.StringIO()
    configure_logging(level=logging.INFO, stream=stream)
    # idempotent: a second call must not add another handler
    configure_logging(level=logging.INFO, stream=stream)

    get_logger("farm_payroll.payroll.service").info(
        "weekly payment recorded",
        extra={"worker_id": 3, "net_payment": Decimal("1000.00"), "week_start": date(2024, 6, 9)},
    )

    lines = stream.getvalue().splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["message"] == "weekly payment recorded"
    assert record["level"] == "INFO"
    assert record["worker_id"] == 3
    assert record["net_payment"] == "1000.00"
    assert record["week_start"] == "2024-06-09"
