import logging
import uuid
from flask import g, has_request_context, request


class RequestIdFilter(logging.Filter):
    """Expose the current request id to log formatters as ``%(request_id)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = getattr(g, "request_id", "-") if has_request_context() else "-"
        return True


def init_request_id(app):
    request_filter = RequestIdFilter()
    for handler in app.logger.handlers:
        handler.addFilter(request_filter)
    app.logger.addFilter(request_filter)

    @app.before_request
    def _assign_request_id():
        rid = request.headers.get("X-Request-Id") or str(uuid.uuid4())
        g.request_id = rid

    @app.after_request
    def _add_request_id_header(response):
        if hasattr(g, "request_id"):
            response.headers["X-Request-Id"] = g.request_id
        return response
