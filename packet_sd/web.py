from flask import Flask, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest


def create_app(metrics):
    app = Flask(__name__)

    @app.route("/", methods=["GET"])
    def home():
        return "OK"

    @app.route("/metrics")
    def expose_metrics():
        return Response(generate_latest(metrics.registry), content_type=CONTENT_TYPE_LATEST)

    return app
