"""JSON envelope shared by every endpoint.

Single objects: ``{success, message, object, errors}``.
Lists add ``pageNumber, pageSize, totalSize, totalPages``.
"""
from flask import jsonify


def success(obj, message="successful", status=200):
    return jsonify({
        "success": True,
        "message": message,
        "object": obj,
        "errors": None,
    }), status


def paginated(items, page, page_size, total, pages, message="Data retrieved successfully"):
    return jsonify({
        "success": True,
        "message": message,
        "object": items,
        "pageNumber": page,
        "pageSize": page_size,
        "totalSize": total,
        "totalPages": pages or 0,
        "errors": None,
    }), 200


def failure(message="An error occurred", errors=None, status=500):
    return jsonify({
        "success": False,
        "message": message,
        "object": None,
        "errors": list(errors or []),
    }), status
