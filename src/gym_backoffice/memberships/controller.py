from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.validators import parse_bool
from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.membership_service

    @app.route("/api/memberships", methods=["GET"], endpoint="list_memberships")
    def list_memberships():
        include_inactive = parse_bool(request.args.get("include_inactive"))
        plans = service.list_plans(include_inactive=include_inactive)
        return jsonify([service.to_payload(p) for p in plans])

    @app.route("/api/memberships", methods=["POST"], endpoint="create_membership")
    def create_membership():
        plan = service.create_plan(request.get_json(silent=True) or {})
        return jsonify(service.to_payload(plan)), 201

    @app.route("/api/memberships/<plan_id>", methods=["GET"], endpoint="get_membership")
    def get_membership(plan_id: str):
        return jsonify(service.to_payload(service.get_plan(plan_id)))

    @app.route("/api/memberships/<plan_id>", methods=["PUT"], endpoint="update_membership")
    def update_membership(plan_id: str):
        plan = service.update_plan(plan_id, request.get_json(silent=True) or {})
        return jsonify(service.to_payload(plan))

    @app.route("/api/memberships/<plan_id>", methods=["DELETE"], endpoint="delete_membership")
    def delete_membership(plan_id: str):
        service.delete_plan(plan_id)
        return jsonify({"message": "Membership deleted successfully"})

    @app.route("/api/memberships/fix-ids", methods=["POST"], endpoint="fix_membership_ids")
    def fix_membership_ids():
        fixed = service.renumber()
        if not fixed:
            return jsonify({"message": "No memberships with invalid IDs found", "fixed": 0})
        return jsonify(
            {
                "message": f"Fixed {len(fixed)} membership(s) with invalid IDs",
                "fixed": len(fixed),
                "details": [
                    {"name": e.label, "old_id": e.old_value, "new_id": e.new_value} for e in fixed
                ],
            }
        )
