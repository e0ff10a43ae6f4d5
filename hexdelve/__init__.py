"""
project: Hexdelve
module: __init__.py
License: MIT

Flask application and core extensions setup.

Wires the Flask app to SQLAlchemy and registers the world API. The only
persisted state is the seed of each world instance; terrain, portals and
spawns are regenerated from it. Configuration is sourced from environment
variables (optionally loaded from .env) with development defaults, and a
local `instance/` directory holds the SQLite database and the log file.
"""

import logging
import os
import uuid
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

from hexdelve.mapgen.errors import MapgenError

# Load .env if present so `SECRET_KEY`, `DATABASE_URL`, HEXDELVE_* etc. can be
# supplied without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only installs still work with an explicit DATABASE_URL.
    pass

secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")
database_url = os.getenv("DATABASE_URL")
if not database_url:
    db_path = Path(app.instance_path) / "hexdelve.db"
    # POSIX path for SQLAlchemy URI compatibility across OS
    database_url = f"sqlite:///{db_path.as_posix()}"

app.config.update(
    SECRET_KEY=secret_key,
    SQLALCHEMY_DATABASE_URI=database_url,
    SQLALCHEMY_TRACK_MODIFICATIONS=False,
)

engine_opts = {}
if database_url.startswith("sqlite:///"):
    engine_opts["connect_args"] = {
        "timeout": 10,  # busy timeout (seconds) for sqlite
        "check_same_thread": False,
    }
db = SQLAlchemy(app, session_options={"expire_on_commit": False}, engine_options=engine_opts)


from hexdelve.routes.world_api import bp_world  # noqa: E402

app.register_blueprint(bp_world)


def create_app():
    """Return the Flask app instance with its tables created."""
    from hexdelve import models  # noqa: F401

    with app.app_context():
        db.create_all()
    return app


@app.errorhandler(MapgenError)
def mapgen_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.getLogger(__name__).exception("World generation failed (id=%s)", error_id)
    return jsonify({"error": "world generation failed", "detail": str(e), "error_id": error_id}), 500
