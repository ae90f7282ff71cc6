from rest_framework.response import Response
from rest_framework import status


def error_response(exc):
    """Render a TaskHiveError the way every handler reports failures."""
    body = {'error': exc.message}
    if getattr(exc, 'required_role', None):
        body['required_role'] = exc.required_role
    return Response(body, status=exc.status_code)


def first_error(serializer):
    """Answer 400 with the first validation message of an invalid serializer."""
    _, errors = next(iter(serializer.errors.items()))
    return Response({'error': str(errors[0])}, status=status.HTTP_400_BAD_REQUEST)
