# propella_project/urls.py

from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path

from marketplace.admin import back_office

urlpatterns = [
    path('admin/', back_office.urls),
    # Everything else is the marketplace JSON API
    path('', include('marketplace.urls')),
]

if settings.DEBUG:
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
