from django.conf import settings
from django.http.request import split_domain_port


class AdminHostMiddleware:
    """Serve the back office at the root of ``ADMIN_HOST`` when that host is requested."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        admin_host = settings.ADMIN_HOST
        if admin_host:
            domain, _ = split_domain_port(request.get_host())
            if domain.lower() == admin_host:
                request.urlconf = settings.ADMIN_URLCONF
        return self.get_response(request)
