from flask import request

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
}


def init_cors(app):
    """Open the bootstrap endpoints listed in CORS_PATHS to any origin.

    Flask answers OPTIONS itself with an empty 200; this only decorates the
    response with the CORS headers.
    """
    paths = tuple(app.config.get("CORS_PATHS") or ())

    @app.after_request
    def _add_cors_headers(response):
        if request.path.rstrip("/") in paths:
            response.headers.update(CORS_HEADERS)
        return response
