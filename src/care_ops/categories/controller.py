from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_actor, login_required, request_json, roles_required
from ..container import Container
from ..core.enums import Role
from .model import category_as_dict, threshold_as_dict

CATEGORY_FIELDS = ("category_name", "severity_level", "default_points", "description", "display_order", "is_active")


def register(app: Flask, container: Container) -> None:
    service = container.category_service

    @app.route("/api/violation-categories", methods=["GET"], endpoint="list_violation_categories")
    @login_required
    def list_violation_categories():
        data = service.list_categories()
        return jsonify(
            {
                "categories": [category_as_dict(c) for c in data["categories"]],
                "grouped": {k: [category_as_dict(c) for c in v] for k, v in data["grouped"].items()},
            }
        )

    @app.route("/api/violation-categories", methods=["POST"], endpoint="create_violation_category")
    @roles_required(Role.ADMIN)
    def create_violation_category():
        data = request_json()
        category_id = service.create_category(
            actor=current_actor(),
            category_name=data.get("category_name"),
            severity_level=data.get("severity_level"),
            default_points=data.get("default_points"),
            description=data.get("description"),
            display_order=data.get("display_order", 0),
        )
        return jsonify(category_as_dict(service.get_category(category_id))), 201

    @app.route("/api/violation-categories/seed", methods=["GET"], endpoint="violation_categories_seed_status")
    @login_required
    def violation_categories_seed_status():
        return jsonify(service.seed_status())

    @app.route("/api/violation-categories/seed", methods=["POST"], endpoint="seed_violation_categories")
    @roles_required(Role.ADMIN)
    def seed_violation_categories():
        result = service.seed_defaults(actor=current_actor())
        return (
            jsonify(
                {
                    "message": "Violation categories seeded",
                    "categories_created": result.categories_created,
                    "thresholds_created": result.thresholds_created,
                }
            ),
            201,
        )

    @app.route("/api/violation-categories/<int:category_id>", methods=["GET"], endpoint="get_violation_category")
    @login_required
    def get_violation_category(category_id: int):
        return jsonify(category_as_dict(service.get_category(category_id)))

    @app.route("/api/violation-categories/<int:category_id>", methods=["PUT"], endpoint="update_violation_category")
    @roles_required(Role.ADMIN)
    def update_violation_category(category_id: int):
        data = request_json()
        changes = {k: data[k] for k in CATEGORY_FIELDS if k in data}
        category = service.update_category(actor=current_actor(), category_id=category_id, changes=changes)
        return jsonify(category_as_dict(category))

    @app.route(
        "/api/violation-categories/<int:category_id>",
        methods=["DELETE"],
        endpoint="delete_violation_category",
    )
    @roles_required(Role.ADMIN)
    def delete_violation_category(category_id: int):
        soft = service.delete_category(actor=current_actor(), category_id=category_id)
        if soft:
            return jsonify({"message": "Category is in use and was deactivated", "soft_delete": True})
        return jsonify({"message": "Category deleted", "soft_delete": False})

    @app.route("/api/discipline-thresholds", methods=["GET"], endpoint="list_discipline_thresholds")
    @login_required
    def list_discipline_thresholds():
        return jsonify({"thresholds": [threshold_as_dict(t) for t in service.list_thresholds()]})

    @app.route("/api/discipline-thresholds", methods=["PUT"], endpoint="update_discipline_thresholds")
    @roles_required(Role.ADMIN)
    def update_discipline_thresholds():
        data = request_json()
        updated = service.update_thresholds(actor=current_actor(), thresholds=data.get("thresholds"))
        return jsonify({"thresholds": [threshold_as_dict(t) for t in updated]})
