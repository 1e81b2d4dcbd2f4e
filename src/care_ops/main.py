from __future__ import annotations

import importlib
import logging
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .categories.controller import register as register_categories
from .common.http import register_error_handlers
from .common.logging_setup import configure_logging
from .container import Container, build_container
from .database.bootstrap import SCHEMA_PATH, apply_schema, ensure_demo_users, list_tables, seed_discipline_catalogue
from .discipline.controller import register as register_discipline
from .settings import get_settings_module
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["ORGANIZATION_NAME"] = getattr(settings, "ORGANIZATION_NAME", "Care Operations")
    db_config = getattr(settings, "DB_CONFIG")

    if container is None:
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)
            seed_discipline_catalogue(db_config)
        container = build_container(db_config=db_config)

    app.extensions["care_ops.container"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_discipline(app, container)
    register_categories(app, container)

    return app
