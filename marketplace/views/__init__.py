"""JSON API views, one module per area of the marketplace."""

from rest_framework import status
from rest_framework.response import Response


def form_errors(form) -> Response:
    errors = {
        field: [error["message"] for error in field_errors]
        for field, field_errors in form.errors.get_json_data().items()
    }
    return Response({"errors": errors}, status=status.HTTP_400_BAD_REQUEST)
