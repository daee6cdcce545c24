from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import api_view, json_body, make_token_required
from ..container import Container
from .schemas import HistoryQuery, SettleWeekCommand, StatsQuery


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/labor/stats", methods=["GET"], endpoint="labor_stats")
    @api_view
    @token_required
    def labor_stats():
        query = StatsQuery.from_args(request.args)
        return jsonify(container.stats_service.get_stats(g.owner_id, as_of=query.as_of))

    @app.route("/api/labor/weekly-wages-summary", methods=["GET"], endpoint="weekly_wages_summary")
    @api_view
    @token_required
    def weekly_wages_summary():
        summary = container.payroll_service.weekly_summary(
            g.owner_id, payment_day=request.args.get("paymentDay") or None
        )
        return jsonify(summary.to_dict())

    @app.route("/api/labor/<int:worker_id>/weekly-payment", methods=["POST"], endpoint="settle_week")
    @api_view
    @token_required
    def settle_week(worker_id: int):
        cmd = SettleWeekCommand.from_payload(json_body())
        result = container.payroll_service.settle_week(g.owner_id, worker_id, cmd)
        return jsonify(result.to_dict())

    @app.route("/api/labor/<int:worker_id>/payment-history", methods=["GET"], endpoint="payment_history")
    @api_view
    @token_required
    def payment_history(worker_id: int):
        query = HistoryQuery.from_args(request.args)
        return jsonify(
            container.payroll_service.payment_history(g.owner_id, worker_id, start=query.start, end=query.end)
        )
