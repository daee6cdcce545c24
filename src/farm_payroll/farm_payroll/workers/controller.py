from __future__ import annotations

from flask import Flask, g, jsonify, request

from ..common.http import api_view, json_body, make_token_required
from ..container import Container
from .schemas import WorkerListQuery, profile_from_payload


def register(app: Flask, container: Container) -> None:
    token_required = make_token_required(container.auth_service)

    @app.route("/api/labor", methods=["GET"], endpoint="list_workers")
    @api_view
    @token_required
    def list_workers():
        query = WorkerListQuery.from_args(request.args)
        return jsonify(container.worker_service.list_workers(g.owner_id, query))

    @app.route("/api/labor", methods=["POST"], endpoint="add_worker")
    @api_view
    @token_required
    def add_worker():
        worker = container.worker_service.add_worker(g.owner_id, profile_from_payload(json_body()))
        return jsonify(worker.to_dict()), 201

    @app.route("/api/labor/<int:worker_id>", methods=["PUT"], endpoint="update_worker")
    @api_view
    @token_required
    def update_worker(worker_id: int):
        profile = profile_from_payload(json_body())
        return jsonify(container.worker_service.update_worker(g.owner_id, worker_id, profile).to_dict())

    @app.route("/api/labor/<int:worker_id>", methods=["DELETE"], endpoint="delete_worker")
    @api_view
    @token_required
    def delete_worker(worker_id: int):
        container.worker_service.delete_worker(g.owner_id, worker_id)
        return jsonify({"message": "Labor record deleted successfully"})

    @app.route("/api/labor/worker-names", methods=["GET"], endpoint="worker_names")
    @api_view
    @token_required
    def worker_names():
        return jsonify({"workers": container.worker_service.worker_names(g.owner_id)})
