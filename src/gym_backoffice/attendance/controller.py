from __future__ import annotations

from flask import Flask, jsonify, request

from ..container import Container


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance", methods=["GET"], endpoint="list_attendance")
    def list_attendance():
        records = service.list_attendance(
            attendance_date=request.args.get("date"),
            client_id=request.args.get("client_id"),
        )
        return jsonify([service.to_payload(r) for r in records])

    @app.route("/api/attendance", methods=["POST"], endpoint="record_attendance")
    def record_attendance():
        body = request.get_json(silent=True) or {}
        record = service.record_check_in(
            body.get("client_id"),
            body.get("attendance_date"),
            body.get("attendance_time"),
        )
        return jsonify(service.to_payload(record)), 201

    @app.route("/api/attendance/<attendance_id>", methods=["DELETE"], endpoint="delete_attendance")
    def delete_attendance(attendance_id: str):
        service.delete_attendance(attendance_id)
        return jsonify({"message": "Attendance deleted successfully"})

    @app.route("/api/attendance/auto-checkout", methods=["GET", "POST"], endpoint="auto_checkout")
    def auto_checkout():
        count, cutoff = service.force_checkout(request.args.get("end_time"))
        return jsonify(
            {
                "success": True,
                "message": f"Auto-checkout completed. {count} client(s) checked out.",
                "checked_out_count": count,
                "end_time": cutoff.strftime("%H:%M:%S"),
                "timestamp": container.clock.now().isoformat(),
            }
        )
