"""
URL configuration for media app.

Media - Upload:
    POST /upload-url/         - Request an upload target
    PUT  /uploads/{token}/    - Upload blob bytes (local backend)
"""

from django.urls import path

from media.views import BlobUploadView, UploadTargetView

app_name = "media"

urlpatterns = [
    path("upload-url/", UploadTargetView.as_view(), name="upload-url"),
    path("uploads/<str:token>/", BlobUploadView.as_view(), name="blob-upload"),
]
