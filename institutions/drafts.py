from dataclasses import dataclass, replace

from .models import requires_departments


@dataclass(frozen=True)
class RegistrationDraft:
    """
    An institute registration that has not been submitted yet.

    Drafts are never edited in place: every field change builds a new draft
    with ``with_field``. Whether the institute has to upload departments is
    computed from the category, not stored.
    """
    name: str = ""
    email: str = ""
    category: str = ""

    REQUIRED_FIELDS = ("name", "email", "category")

    def with_field(self, field_name, value):
        if field_name not in self.REQUIRED_FIELDS:
            raise KeyError(f"Unknown registration field: {field_name}")
        return replace(self, **{field_name: (value or "").strip()})

    @classmethod
    def from_data(cls, data):
        draft = cls()
        for field_name in cls.REQUIRED_FIELDS:
            draft = draft.with_field(field_name, data.get(field_name))
        return draft

    @property
    def requires_departments(self):
        return requires_departments(self.category)

    def as_dict(self):
        return {"name": self.name, "email": self.email, "category": self.category}
