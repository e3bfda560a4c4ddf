"""
Session identity for API routes.

Sign-in happens upstream; this module only resolves the Flask-Login
session to a User and answers unauthenticated API calls with JSON.
"""
from flask import jsonify
from docbridge import db, login_manager
from docbridge.models import User


def init_auth(app):
    """Initialize authentication"""
    login_manager.init_app(app)


@login_manager.user_loader
def load_user(user_id):
    """Load user by ID"""
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({"error": "Authentication required"}), 401
