from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import api_view, json_body, make_token_required
from ..container import Container
from .schemas import AttendanceReportQuery, MarkAttendanceCommand


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/labor/<int:worker_id>/attendance", methods=["POST"], endpoint="mark_attendance")
    @api_view
    @token_required
    def mark_attendance(worker_id: int):
        cmd = MarkAttendanceCommand.from_payload(json_body())
        worker = container.attendance_service.mark_attendance(g.owner_id, worker_id, cmd)
        return jsonify(worker.to_dict())

    @app.route("/api/labor/attendance-report", methods=["GET"], endpoint="attendance_report")
    @api_view
    @token_required
    def attendance_report():
        query = AttendanceReportQuery.from_args(request.args)
        return jsonify(container.attendance_service.attendance_report(g.owner_id, query))
