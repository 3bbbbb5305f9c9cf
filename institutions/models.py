from django.db import models


def requires_departments(category):
    # every category except school registers its departments
    return bool(category) and category != Institute.Category.SCHOOL


class Institute(models.Model):
    """An institute registered through the landing page form."""

    class Category(models.TextChoices):
        SCHOOL = 'school', 'School'
        COLLEGE = 'college', 'College'
        UNIVERSITY = 'university', 'University'
        TRAINING_CENTER = 'training_center', 'Training Center'

    name=models.CharField(max_length=200)
    email=models.CharField(max_length=254)
    category=models.CharField(max_length=20, choices=Category.choices)
    created_at=models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering=['id']

    @property
    def requires_departments(self):
        return requires_departments(self.category)

    def __str__(self):
        return self.name


class Department(models.Model):
    institute=models.ForeignKey(Institute, on_delete=models.CASCADE, related_name='departments')
    name=models.TextField()
    # the full source row, keyed by CSV column name
    metadata=models.JSONField(default=dict, blank=True)
    created_at=models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering=['id']

    def __str__(self):
        return f"{self.name}-{self.institute.name}"
