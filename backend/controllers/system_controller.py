from flask import Blueprint, Response, jsonify, request

from infra import health_service, metrics_manager

system_bp = Blueprint("system", __name__)


@system_bp.get("/")
def home():
    return jsonify({"status": "ok"}), 200


@system_bp.get("/metrics")
def metrics():
    if request.args.get("format") == "text":
        return Response(metrics_manager.get_metrics_text(), mimetype="text/plain")
    return jsonify(metrics_manager.get_metrics_json())


@system_bp.get("/health")
def health():
    summary, healthy = health_service.build_health_summary(metrics_manager.SERVER_START_TIME)
    return jsonify(summary), 200 if healthy else 503
