from rest_framework import status
from rest_framework.generics import GenericAPIView
from rest_framework.parsers import FormParser, JSONParser, MultiPartParser
from rest_framework.response import Response

from utils.department_csv import split_department_names

from .drafts import RegistrationDraft
from .serializers import (
    DepartmentFileSerializer,
    DepartmentListQuerySerializer,
    DepartmentPreviewSerializer,
    DepartmentSerializer,
    InstituteSerializer,
    RegisterInstituteSerializer,
)
from .services import get_gateway


class GatewayMixin:
    """gives every view the same registration gateway factory"""

    def get_gateway(self):
        return get_gateway()


class RegisterInstituteView(GatewayMixin, GenericAPIView):
    """
    Public Endpoint: registers a new institute.
    URL: /register/
    """
    permission_classes = []
    serializer_class = RegisterInstituteSerializer
    parser_classes = [JSONParser, FormParser, MultiPartParser]

    def post(self, request):
        # 1. Validate required fields
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        # 2. Build the draft and store it
        draft = RegistrationDraft.from_data(serializer.validated_data)
        institute = self.get_gateway().create_institute(draft)

        return Response(InstituteSerializer(institute).data, status=status.HTTP_201_CREATED)


class ListInstitutesView(GatewayMixin, GenericAPIView):
    """
    Public Endpoint: lists all institutes.
    URL: /institutes/
    """
    permission_classes = []
    serializer_class = InstituteSerializer
    pagination_class = None

    def get(self, request):
        institutes = self.get_gateway().list_institutes()
        return Response(self.get_serializer(institutes, many=True).data)


class ListDepartmentsView(GatewayMixin, GenericAPIView):
    """
    Public Endpoint: lists the departments of one institute.
    URL: /departments/?institute_id=<id>
    """
    permission_classes = []
    serializer_class = DepartmentSerializer
    pagination_class = None

    def get(self, request):
        query = DepartmentListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        departments = self.get_gateway().list_departments(query.validated_data['institute_id'])
        return Response(self.get_serializer(departments, many=True).data)


class UploadDepartmentsView(GatewayMixin, GenericAPIView):
    """
    Accepts a department CSV for an institute, stores the raw file and
    inserts one department per row.
    URL: /upload/<institute_id>/
    """
    permission_classes = []
    serializer_class = DepartmentFileSerializer
    parser_classes = [MultiPartParser, FormParser] # Required for file upload

    def post(self, request, institute_id):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        upload = serializer.validated_data['file']
        result = self.get_gateway().ingest_departments(institute_id, upload.read(), upload.name)

        return Response(result, status=status.HTTP_201_CREATED)


class PreviewDepartmentsView(GenericAPIView):
    """
    Reads department names out of a CSV without storing anything, so the
    registration form can show what will be uploaded.
    URL: /departments/preview/
    """
    permission_classes = []
    serializer_class = DepartmentPreviewSerializer
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        names = split_department_names(serializer.validated_data['file'].read())
        return Response({"count": len(names), "departments": names})
