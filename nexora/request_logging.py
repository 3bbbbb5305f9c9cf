# nexora/request_logging.py
import logging

logger = logging.getLogger(__name__)

class RequestLoggingMiddleware:
    """
    Logs every request handled by the registration API with its response status
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        response = self.get_response(request)

        # Log concise info
        logger.info(f"[REQUEST] {request.method:4} {request.path} -> {response.status_code}")

        return response
