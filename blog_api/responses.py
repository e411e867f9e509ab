"""
JSON response envelopes.

Successful responses look like ``{"success": true, "message": ..., "data": ...}``
and errors like ``{"success": false, "statusCode": ..., "message": ...}``.
"""
from django.http import JsonResponse


def api_response(data=None, message=None, status=200):
    body = {"success": True}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    return JsonResponse(body, status=status)


def error_response(status, message, errors=None, stack=None, **extra):
    body = {"success": False, "statusCode": status, "message": message}
    if errors:
        body["errors"] = errors
    body.update(extra)
    if stack:
        body["stack"] = stack
    return JsonResponse(body, status=status)
