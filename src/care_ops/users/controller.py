from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, jsonify, session

from ..common.http import login_required, request_json
from ..container import Container
from ..core.constants import DEFAULT_SESSION_DAYS

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/login", methods=["POST"], endpoint="login")
    def login():
        data = request_json()
        s_user = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))

        session.clear()
        session.permanent = bool(data.get("remember_me"))
        app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

        session["user_id"] = s_user.user_id
        session["name"] = s_user.name
        session["role"] = s_user.role.value

        logger.info("User %s logged in", s_user.user_id)
        return jsonify({"user": {"id": s_user.user_id, "name": s_user.name, "role": s_user.role.value}})

    @app.route("/api/auth/logout", methods=["POST"], endpoint="logout")
    @login_required
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})
