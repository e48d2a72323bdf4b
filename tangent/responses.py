# tangent/responses.py
from flask import jsonify

# Every failure is reported with the same status; callers tell error kinds
# apart by the shape of `message`.
ERROR_STATUS = 404


def send_response(result, message):
    return jsonify({
        'success': True,
        'data': result,
        'message': message,
    }), 200


def send_error(error, error_messages=None, code=ERROR_STATUS):
    response = {
        'success': False,
        'message': error,
    }
    if error_messages:
        response['data'] = error_messages
    return jsonify(response), code
