from django.urls import include, path

urlpatterns = [
    path('', include('regex_pipeline.urls')),
]
