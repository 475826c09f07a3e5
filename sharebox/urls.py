"""Main URL mapping configuration file.

Include other URLConfs from external apps using method `include()`.
"""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path('admin/', admin.site.urls),
    path('file/', include('sharebox.apps.files.urls')),
    path('file/', include('sharebox.apps.sharing.urls')),
]
