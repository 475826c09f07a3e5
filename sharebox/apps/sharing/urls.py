"""URL routes for shares and direct links."""

from django.urls import path

from sharebox.apps.sharing import views

app_name = 'sharing'

urlpatterns = [
    path('s', views.shares, name='shares'),
    path('s/<uuid:share_uri>', views.share_detail, name='share_detail'),
    path(
        's/<uuid:share_uri>/download',
        views.share_download,
        name='share_download',
    ),
    path('d/<uuid:share_uri>', views.direct_link, name='direct_link'),
]
