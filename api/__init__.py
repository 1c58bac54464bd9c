##########################################
# External Modules
##########################################

from flask import Flask
from flask_cors import CORS
from flask_talisman import Talisman

from common.log import get_logger
from common.utils import safe_get_env_var

logger = get_logger("api")


def create_app():
    ##########################################
    # Environment Variables
    ##########################################
    client_origin_url = safe_get_env_var("CLIENT_ORIGIN_URL")
    logger.info("Client Origin URL: " + client_origin_url)

    ##########################################
    # Flask App Instance
    ##########################################

    app = Flask(__name__, instance_relative_config=True)
    logger.info("Started Flask")

    ##########################################
    # HTTP Security Headers
    ##########################################

    csp = {
        'default-src': ['\'self\''],
        'frame-ancestors': ['\'none\'']
    }

    Talisman(
        app,
        force_https=False,
        frame_options='DENY',
        content_security_policy=csp,
        referrer_policy='no-referrer',
        x_xss_protection=False,
        x_content_type_options=True
    )

    @app.after_request
    def add_headers(response):
        response.headers['X-XSS-Protection'] = '0'
        response.headers['Cache-Control'] = 'no-store, max-age=0, must-revalidate'
        response.headers['Pragma'] = 'no-cache'
        response.headers['Expires'] = '0'
        response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'
        return response

    ##########################################
    # CORS
    ##########################################

    if "," in client_origin_url:
        client_origin_url = client_origin_url.split(",")

    if client_origin_url == "*":
        logger.debug(
            "Using wildcard for CORS client_origin_url - pretty dangerous, just for development purposes only")
        CORS(app)
    else:
        logger.debug(
            f"Using {client_origin_url} for CORS client_origin_url")
        CORS(
            app,
            resources={r"/api/*": {"origins": client_origin_url}},
            allow_headers=["Authorization", "Content-Type", "x-webpush-secret", "x-admin-code"],
            methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            supports_credentials=True,
            max_age=86400
        )

    ##########################################
    # Blueprint Registration
    ##########################################

    from api import exception_views
    from api.auth import auth_views
    from api.members import members_views
    from api.projects import projects_views
    from api.events import events_views
    from api.sessions import sessions_views
    from api.dashboard import dashboard_views
    from api.notifications import notifications_views
    from api.webpush import webpush_views
    from api.hackathon import hackathon_views
    from api.slack import slack_views

    app.register_blueprint(exception_views.bp)
    app.register_blueprint(auth_views.bp)
    app.register_blueprint(members_views.bp)
    app.register_blueprint(projects_views.bp)
    app.register_blueprint(events_views.bp)
    app.register_blueprint(sessions_views.bp)
    app.register_blueprint(dashboard_views.bp)
    app.register_blueprint(notifications_views.bp)
    app.register_blueprint(webpush_views.bp)
    app.register_blueprint(hackathon_views.bp)
    app.register_blueprint(slack_views.bp)

    return app
