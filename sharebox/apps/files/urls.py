"""URL routes for personal directory access."""

from django.urls import path

from sharebox.apps.files import views

app_name = 'files'

urlpatterns = [
    path('p', views.personal_directory, name='personal_root'),
    path('p/', views.personal_directory, name='personal_root_slash'),
    path('p/<path:path>', views.personal_directory, name='personal_path'),
    path('f/<path:path>', views.personal_file, name='personal_file'),
]
