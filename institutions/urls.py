from django.urls import path
from .views import RegisterInstituteView, ListInstitutesView, ListDepartmentsView, UploadDepartmentsView, PreviewDepartmentsView

urlpatterns = [
    path('register/', RegisterInstituteView.as_view(), name='register_institute'),
    path('institutes/', ListInstitutesView.as_view(), name='list_institutes'),
    path('departments/', ListDepartmentsView.as_view(), name='list_departments'),
    path('departments/preview/', PreviewDepartmentsView.as_view(), name='preview_departments'),
    path('upload/<int:institute_id>/', UploadDepartmentsView.as_view(), name='upload_departments'),
]
