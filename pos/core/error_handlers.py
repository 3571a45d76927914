from flask import jsonify

class ApiError(Exception):
    """Base exception for API errors"""
    def __init__(self, message, status_code=400, payload=None):
        self.message = message
        self.status_code = status_code
        self.payload = payload
        super().__init__(self.message)

    def to_dict(self):
        rv = dict(self.payload or ())
        rv['status'] = 'error'
        rv['message'] = self.message
        rv['code'] = self.status_code
        return rv

def error_response(message, code):
    return jsonify({
        'status': 'error',
        'message': message,
        'code': code
    }), code

def register_handlers(app):
    """Register error handlers with the Flask app"""

    @app.errorhandler(400)
    def bad_request_error(error):
        """Handle 400 Bad Request errors"""
        return error_response('Bad request', 400)

    @app.errorhandler(401)
    def unauthorized_error(error):
        """Handle 401 Unauthorized errors"""
        return error_response('Authentication required', 401)

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 Forbidden errors"""
        return error_response('Access forbidden', 403)

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 Not Found errors"""
        return error_response('Resource not found', 404)

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 Internal Server Error"""
        app.logger.error(f'Server Error: {error}')
        return error_response('Internal server error', 500)

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        """Handle custom API errors"""
        response = jsonify(error.to_dict())
        response.status_code = error.status_code
        return response
