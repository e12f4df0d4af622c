from flask import Blueprint, current_app, jsonify, redirect, url_for
from flask_login import login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from werkzeug.security import check_password_hash

from dashboard import limiter
from dashboard.forms import LoginForm
from dashboard.models import User

auth = Blueprint("auth", __name__)

INVALID_CREDENTIALS = "Invalid credentials."


@auth.route("/login", methods=["GET", "POST"])
@limiter.limit("5 per minute", methods=["POST"])
def login():
    """Authenticate a user and start their session."""
    form = LoginForm()
    if form.is_submitted():
        if not form.validate():
            return jsonify({"message": INVALID_CREDENTIALS}), 401

        user = User.query.filter_by(email=form.email.data).first()
        if not user or not check_password_hash(user.password, form.password.data):
            return jsonify({"message": INVALID_CREDENTIALS}), 401
        if not user.active:
            return (
                jsonify(
                    {"message": "Please contact system admin to activate account."}
                ),
                403,
            )

        login_user(user)
        current_app.logger.info("User %s logged in", user.id)
        return redirect(url_for("main.home"))

    return jsonify({"csrf_token": generate_csrf()})


@auth.route("/logout")
@login_required
def logout():
    """Log the current user out."""
    logout_user()
    return redirect(url_for("auth.login"))
