from __future__ import annotations

from io import BytesIO

from flask import Flask, current_app, jsonify, request, send_file

from ..common.datetime_utils import parse_optional_date
from ..common.http import client_meta, current_actor, login_required, request_json
from ..common.validators import optional_int
from ..container import Container
from ..core.constants import DEFAULT_ACTION_LIST_LIMIT
from ..core.enums import CorrectiveActionStatus, SeverityLevel
from ..core.exceptions import ValidationError
from ..reports.corrective_action_pdf import corrective_action_filename, render_corrective_action_pdf
from .model import ActionFilter
from .serializers import (
    action_detail_to_dict,
    action_list_to_dict,
    action_to_dict,
    create_result_to_dict,
    employee_discipline_to_dict,
    history_to_dict,
    points_summary_to_dict,
    signature_status_to_dict,
)

# Request keys accepted by PUT /api/corrective-actions/<id>.
EDITABLE_FIELDS = (
    "incident_description",
    "mitigating_circumstances",
    "points_adjusted",
    "adjustment_reason",
    "corrective_expectations",
    "consequences_text",
    "pip_scheduled",
    "pip_date",
)


def _enum_arg(enum_cls, value, label: str):
    if not value:
        return None
    try:
        return enum_cls(value.strip().upper())
    except ValueError:
        raise ValidationError(f"Invalid {label}: {value}")


def action_filter_from_args(args) -> ActionFilter:
    limit = optional_int(args.get("limit"), "Limit") or DEFAULT_ACTION_LIST_LIMIT
    return ActionFilter(
        employee_id=optional_int(args.get("employee_id"), "Employee id"),
        house_id=optional_int(args.get("house_id"), "House id"),
        status=_enum_arg(CorrectiveActionStatus, args.get("status"), "status"),
        severity_level=_enum_arg(SeverityLevel, args.get("severity"), "severity"),
        start_date=parse_optional_date(args.get("start_date")),
        end_date=parse_optional_date(args.get("end_date")),
        limit=max(1, limit),
    )


def register(app: Flask, container: Container) -> None:
    service = container.discipline_service

    @app.route("/api/corrective-actions", methods=["GET"], endpoint="list_corrective_actions")
    @login_required
    def list_corrective_actions():
        result = service.list_actions(actor=current_actor(), filters=action_filter_from_args(request.args))
        return jsonify(action_list_to_dict(result))

    @app.route("/api/corrective-actions", methods=["POST"], endpoint="create_corrective_action")
    @login_required
    def create_corrective_action():
        data = request_json()
        ip, device = client_meta()
        result = service.create_action(
            actor=current_actor(),
            employee_id=data.get("employee_id"),
            category_id=data.get("category_id"),
            violation_date=data.get("violation_date"),
            incident_description=data.get("incident_description"),
            house_id=data.get("house_id"),
            violation_time=data.get("violation_time"),
            mitigating_circumstances=data.get("mitigating_circumstances"),
            points_assigned=data.get("points_assigned"),
            points_adjusted=data.get("points_adjusted"),
            adjustment_reason=data.get("adjustment_reason"),
            corrective_expectations=data.get("corrective_expectations"),
            consequences_text=data.get("consequences_text"),
            pip_scheduled=bool(data.get("pip_scheduled")),
            pip_date=data.get("pip_date"),
            supervisor_signature=data.get("supervisor_signature"),
            witness_signature=data.get("witness_signature"),
            witness_id=data.get("witness_id"),
            ip_address=ip,
            device_info=device,
        )
        return jsonify(create_result_to_dict(result)), 201

    @app.route("/api/corrective-actions/<int:action_id>", methods=["GET"], endpoint="get_corrective_action")
    @login_required
    def get_corrective_action(action_id: int):
        detail = service.get_action(actor=current_actor(), action_id=action_id)
        return jsonify(action_detail_to_dict(detail))

    @app.route("/api/corrective-actions/<int:action_id>", methods=["PUT"], endpoint="update_corrective_action")
    @login_required
    def update_corrective_action(action_id: int):
        data = request_json()
        changes = {k: data[k] for k in EDITABLE_FIELDS if k in data}
        action = service.update_action(actor=current_actor(), action_id=action_id, changes=changes)
        return jsonify(action_to_dict(action))

    @app.route("/api/corrective-actions/<int:action_id>/sign", methods=["GET"], endpoint="signature_status")
    @login_required
    def signature_status(action_id: int):
        status = service.signature_status(actor=current_actor(), action_id=action_id)
        return jsonify(signature_status_to_dict(status))

    @app.route("/api/corrective-actions/<int:action_id>/sign", methods=["POST"], endpoint="sign_corrective_action")
    @login_required
    def sign_corrective_action(action_id: int):
        data = request_json()
        ip, device = client_meta()
        action = service.sign_action(
            actor=current_actor(),
            action_id=action_id,
            signer_type=data.get("signer_type"),
            signature_data=data.get("signature_data"),
            acknowledged=data.get("acknowledged", True) is not False,
            employee_comments=data.get("employee_comments"),
            ip_address=ip,
            device_info=device,
        )
        return jsonify(action_to_dict(action))

    @app.route("/api/corrective-actions/<int:action_id>/void", methods=["POST"], endpoint="void_corrective_action")
    @login_required
    def void_corrective_action(action_id: int):
        data = request_json()
        action = service.void_action(actor=current_actor(), action_id=action_id, reason=data.get("reason"))
        return jsonify(action_to_dict(action))

    @app.route("/api/corrective-actions/<int:action_id>/pdf", methods=["GET"], endpoint="corrective_action_pdf")
    @login_required
    def corrective_action_pdf(action_id: int):
        detail = service.get_action(actor=current_actor(), action_id=action_id)
        pdf = render_corrective_action_pdf(
            detail.action,
            detail.current_points,
            current_app.config.get("ORGANIZATION_NAME", "Care Operations"),
        )
        return send_file(
            BytesIO(pdf),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=corrective_action_filename(detail.action),
        )

    @app.route("/api/employees/<int:employee_id>/points", methods=["GET"], endpoint="employee_points")
    @login_required
    def employee_points(employee_id: int):
        return jsonify(points_summary_to_dict(service.points_summary(employee_id)))

    @app.route(
        "/api/employees/<int:employee_id>/discipline-history",
        methods=["GET"],
        endpoint="employee_discipline_history",
    )
    @login_required
    def employee_discipline_history(employee_id: int):
        include_voided = request.args.get("include_voided", "false").lower() == "true"
        limit = optional_int(request.args.get("limit"), "Limit")
        kwargs = {"include_voided": include_voided}
        if limit:
            kwargs["limit"] = limit
        return jsonify(history_to_dict(service.history(employee_id, **kwargs)))

    @app.route("/api/employees/<int:employee_id>/discipline", methods=["GET"], endpoint="employee_discipline")
    @login_required
    def employee_discipline(employee_id: int):
        return jsonify(employee_discipline_to_dict(service.employee_discipline(employee_id)))
