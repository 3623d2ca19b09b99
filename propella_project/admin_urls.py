# propella_project/admin_urls.py
# URLconf used when the request arrives on the dedicated admin host.

from django.urls import path

from marketplace.admin import back_office

urlpatterns = [
    path('', back_office.urls),
]
