from flask import Blueprint, jsonify, request

from services import entries_service
from validation import validate_list_query

entries_bp = Blueprint("entries", __name__, url_prefix="/lifestyle/entries")


@entries_bp.post("")
def create_entry():
    payload = request.get_json()
    result = entries_service.create_entry(payload)
    return jsonify(result), 201


@entries_bp.get("")
def get_entries():
    query = validate_list_query(request.args.to_dict())
    entries = entries_service.list_entries_by_user(
        query.userId,
        entry_type=query.type,
        start=query.start_at,
        end=query.end_at,
    )
    return jsonify(entries)


@entries_bp.get("/<int:entry_id>")
def get_entry(entry_id: int):
    return jsonify(entries_service.get_entry_by_id(entry_id))
