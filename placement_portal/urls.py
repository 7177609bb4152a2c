from django.contrib import admin
from django.urls import path

admin.site.site_header = 'Placement Portal'
admin.site.site_title = 'Placement Portal'

urlpatterns = [
    path('admin/', admin.site.urls),
]
