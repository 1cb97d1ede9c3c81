from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError


def _csv_from_request() -> str:
    """CSV text from a multipart upload, a JSON body, or the raw body."""

    upload = request.files.get("file")
    if upload is not None:
        return upload.read().decode("utf-8-sig")

    if request.is_json:
        body = request.get_json(silent=True) or {}
        text = body.get("csv") or body.get("data") or ""
    else:
        text = request.get_data(as_text=True)

    if not text or not text.strip():
        raise ValidationError("No CSV data provided")
    return text


def register(app: Flask, container: Container) -> None:
    service = container.client_service

    @app.route("/api/clients", methods=["GET"], endpoint="list_clients")
    def list_clients():
        return jsonify([service.to_payload(c) for c in service.list_clients()])

    @app.route("/api/clients", methods=["POST"], endpoint="create_client")
    def create_client():
        client = service.create_client(request.get_json(silent=True) or {})
        return jsonify(service.to_payload(client)), 201

    @app.route("/api/clients/expiring", methods=["GET"], endpoint="expiring_clients")
    def expiring_clients():
        return jsonify([service.to_payload(c) for c in service.list_expiring()])

    @app.route("/api/clients/fix-ids", methods=["POST"], endpoint="fix_client_ids")
    def fix_client_ids():
        fixed = service.renumber()
        if not fixed:
            return jsonify({"message": "No clients with invalid IDs found", "fixed": 0})
        return jsonify(
            {
                "message": f"Fixed {len(fixed)} client(s) with invalid IDs",
                "fixed": len(fixed),
                "details": [
                    {"name": e.label, "old_id": e.old_value, "new_id": e.new_value} for e in fixed
                ],
            }
        )

    @app.route("/api/clients/import", methods=["POST"], endpoint="import_clients")
    def import_clients():
        result = container.client_importer.import_csv(_csv_from_request())
        return jsonify(result.to_payload())

    @app.route("/api/clients/<client_id>", methods=["GET"], endpoint="get_client")
    def get_client(client_id: str):
        return jsonify(service.to_payload(service.get_client(client_id)))

    @app.route("/api/clients/<client_id>", methods=["PUT"], endpoint="update_client")
    def update_client(client_id: str):
        client = service.update_client(client_id, request.get_json(silent=True) or {})
        return jsonify(service.to_payload(client))

    @app.route("/api/clients/<client_id>", methods=["DELETE"], endpoint="delete_client")
    def delete_client(client_id: str):
        service.delete_client(client_id)
        return jsonify({"message": "Client deleted successfully"})
