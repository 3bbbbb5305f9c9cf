from rest_framework import serializers

from .models import Institute, Department


class RegisterInstituteSerializer(serializers.Serializer):
    """
    Serializer to validate input for registering a new institute.
    Only presence and the category are checked; the record store has the final word.
    """
    name = serializers.CharField(max_length=200)
    email = serializers.CharField(max_length=254)
    category = serializers.ChoiceField(choices=Institute.Category.choices)


class InstituteSerializer(serializers.ModelSerializer):
    requires_departments = serializers.BooleanField(read_only=True)

    class Meta:
        model = Institute
        fields = ['id', 'name', 'email', 'category', 'requires_departments', 'created_at']


class DepartmentSerializer(serializers.ModelSerializer):
    institute_id = serializers.IntegerField(read_only=True)

    class Meta:
        model = Department
        fields = ['id', 'institute_id', 'name', 'metadata', 'created_at']


class DepartmentListQuerySerializer(serializers.Serializer):
    institute_id = serializers.IntegerField(min_value=1)


class DepartmentFileSerializer(serializers.Serializer):
    """
    Describes the multipart upload body (the CSV file), not a DB model.
    """
    file = serializers.FileField(
        required=True,
        allow_empty_file=True,
        help_text="CSV with one department per row, optionally under a 'Department' header."
    )


class DepartmentPreviewSerializer(DepartmentFileSerializer):

    def validate_file(self, value):
        if not value.name.lower().endswith('.csv'):
            raise serializers.ValidationError("Please upload a CSV file.")
        return value
