from django.db import connection, DatabaseError
from django.http import JsonResponse


def health_check(request):
    """Report service and database availability."""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
    except DatabaseError as e:
        return JsonResponse({'ok': False, 'db': 'down', 'error': str(e)}, status=503)
    return JsonResponse({'ok': True, 'db': 'up'})


def error_404(request, exception):
    return JsonResponse({'error': 'Resource not found'}, status=404)


def error_500(request):
    """JSON body for unhandled errors, same shape as service errors."""
    return JsonResponse({'error': 'Unexpected server error'}, status=500)
