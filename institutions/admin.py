from django.contrib import admin
from institutions.models import Institute, Department


@admin.register(Institute)
class InstituteAdmin(admin.ModelAdmin):
    list_display = ["name", "email", "category", "created_at"]
    list_filter = ["category"]
    search_fields = ["name", "email"]


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ["name", "institute", "created_at"]
    list_filter = ["institute"]
    search_fields = ["name", "institute__name"]
    raw_id_fields = ["institute"]
