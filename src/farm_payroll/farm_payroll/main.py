from __future__ import annotations

import importlib
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .advances.controller import register as register_advances
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .container import Container, build_container
from .core.constants import DEFAULT_PAYMENT_DAY, DEFAULT_TOKEN_TTL_HOURS
from .database.bootstrap import apply_schema, ensure_demo_owner, list_tables
from .expenses.controller import register as register_expenses
from .logging_config import configure_logging, get_logger
from .payroll.controller import register as register_payroll
from .payroll.week import resolve_payment_day
from .users.controller import register as register_users
from .workers.controller import register as register_workers

logger = get_logger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    When ``container`` is given (tests), the database bootstrap is skipped and the
    supplied services are used as-is.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    configure_logging(
        level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(),
        json_output=bool(getattr(settings, "LOG_JSON", True)),
    )

    payment_day = resolve_payment_day(getattr(settings, "PAYMENT_DAY", DEFAULT_PAYMENT_DAY))
    app.config["PAYMENT_DAY"] = payment_day.value

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "starting",
            extra={
                "settings": settings_module,
                "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
                "payment_day": payment_day.value,
            },
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config)
            logger.info("schema ready", extra={"tables": len(list_tables(db_config))})
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_owner(db_config)

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            payment_day=payment_day,
            token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", DEFAULT_TOKEN_TTL_HOURS)),
        )

    app.extensions["farm_payroll"] = container

    register_error_handlers(app)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"status": "ok", "paymentDay": app.config["PAYMENT_DAY"]})

    register_users(app, container)
    register_workers(app, container)
    register_attendance(app, container)
    register_payroll(app, container)
    register_advances(app, container)
    register_expenses(app, container)

    return app
