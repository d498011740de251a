# app/errors.py
"""
Erros esperados do relay de webhooks.

Cada erro sabe o status HTTP e a mensagem que devem chegar ao chamador.
Uma resposta não-2xx do destino não é um erro: é um resultado registrado no log.
"""


class RelayError(Exception):
    status_code = 500
    message = 'Internal server error'

    def __init__(self, message=None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.message}


class Unauthorized(RelayError):
    status_code = 401
    message = 'Authorization required'


class BadRequest(RelayError):
    status_code = 400
    message = 'Bad request'


class InvalidJson(BadRequest):
    message = 'Invalid JSON in request body'


class PayloadError(BadRequest):
    message = 'Invalid payload'


class PayloadNotObject(PayloadError):
    message = 'Payload must be a valid object'


class PayloadTooLarge(PayloadError):
    message = 'Payload size exceeds maximum limit of 100KB'


class UnsafeDestination(BadRequest):
    message = ('Invalid webhook URL configuration. URLs pointing to localhost, '
               'private networks, or metadata endpoints are not allowed.')


class NotFound(RelayError):
    status_code = 404
    message = 'Not found'


class NoActiveConfig(NotFound):
    message = 'No active webhook configuration found. Please configure your webhook in Settings.'


class MethodNotAllowed(RelayError):
    status_code = 405

    def __init__(self, method, allowed=('POST', 'GET', 'PUT', 'DELETE')):
        permitidos = ', '.join(allowed[:-1]) + f', or {allowed[-1]}' if len(allowed) > 1 else allowed[0]
        super().__init__(f"Method {method} not allowed. Use {permitidos}")
        self.allowed = allowed


class UpstreamTimeout(RelayError):
    status_code = 504

    def __init__(self, seconds):
        super().__init__(f"Webhook request timed out after {seconds} seconds")
        self.seconds = seconds
