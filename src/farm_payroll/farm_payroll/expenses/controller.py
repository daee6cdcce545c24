from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import api_view, make_token_required
from ..container import Container
from .service import ExpenseQuery


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/expenses", methods=["GET"], endpoint="list_expenses")
    @api_view
    @token_required
    def list_expenses():
        query = ExpenseQuery.from_args(request.args)
        return jsonify(container.expense_service.list_expenses(g.owner_id, query))

    @app.route("/api/expenses/<int:expense_id>", methods=["GET"], endpoint="get_expense")
    @api_view
    @token_required
    def get_expense(expense_id: int):
        return jsonify(container.expense_service.get_expense(g.owner_id, expense_id).to_dict())
