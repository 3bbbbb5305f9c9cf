"""
Registration gateway.

The gateway runs the four registration operations on top of a
``RegistrationBackend``, which bundles the record store (institutes and
departments) and the object store (raw CSV uploads). Views get the Django
backed gateway from ``get_gateway``; tests hand the gateway an in-memory
backend instead.
"""

import logging
from abc import ABC, abstractmethod

from django.core.files.base import ContentFile
from django.core.files.storage import storages
from django.db import DatabaseError, IntegrityError, transaction

from common.exceptions import NotFoundError, PersistenceError, StorageError, ValidationError
from utils.department_csv import DepartmentRecord, normalize_departments

from .drafts import RegistrationDraft
from .models import Department, Institute

logger = logging.getLogger(__name__)

CSV_STORAGE_ALIAS = "csv_uploads"


class RegistrationBackend(ABC):
    """Record store and object store used by the gateway."""

    @abstractmethod
    def create_institute(self, draft: RegistrationDraft):
        """Stores a new institute. Raises ValidationError if the write is rejected."""

    @abstractmethod
    def list_institutes(self):
        ...

    @abstractmethod
    def list_departments(self, institute_id):
        ...

    @abstractmethod
    def bulk_insert_departments(self, institute_id, records: list[DepartmentRecord]) -> int:
        """
        Inserts all records or none of them.

        Raises:
            NotFoundError: If the institute does not exist.
            PersistenceError: If the insert fails.
        """

    @abstractmethod
    def put_raw_file(self, filename: str, content: bytes) -> str:
        """Writes the file under ``filename``, replacing any existing object. Raises StorageError."""


class DjangoRegistrationBackend(RegistrationBackend):
    """Backend on the Django ORM and the ``csv_uploads`` storage."""

    def __init__(self, storage=None):
        self.storage = storage if storage is not None else storages[CSV_STORAGE_ALIAS]

    def create_institute(self, draft):
        try:
            with transaction.atomic():
                return Institute.objects.create(**draft.as_dict())
        except IntegrityError as e:
            raise ValidationError(f"Institute could not be saved: {e}") from e
        except DatabaseError as e:
            raise PersistenceError(f"Institute could not be saved: {e}") from e

    def list_institutes(self):
        try:
            return list(Institute.objects.all())
        except DatabaseError as e:
            raise PersistenceError(f"Failed to list institutes: {e}") from e

    def list_departments(self, institute_id):
        try:
            return list(Department.objects.filter(institute_id=institute_id))
        except DatabaseError as e:
            raise PersistenceError(f"Failed to list departments: {e}") from e

    def bulk_insert_departments(self, institute_id, records):
        try:
            with transaction.atomic():
                if not Institute.objects.filter(pk=institute_id).exists():
                    raise NotFoundError(f"Institute {institute_id} does not exist.")
                created = Department.objects.bulk_create(
                    Department(
                        institute_id=institute_id,
                        name=record.name,
                        metadata=record.metadata,
                    )
                    for record in records
                )
        except DatabaseError as e:
            raise PersistenceError(f"Failed to insert departments: {e}") from e
        return len(created)

    def put_raw_file(self, filename, content):
        try:
            # storages that overwrite in place (S3 file_overwrite, FileSystemStorage
            # allow_overwrite) take a single write; others need the old object gone
            overwrites = getattr(self.storage, "file_overwrite", False) or getattr(self.storage, "allow_overwrite", False)
            if not overwrites and self.storage.exists(filename):
                self.storage.delete(filename)
            return self.storage.save(filename, ContentFile(content))
        except Exception as e:
            raise StorageError(f"Failed to store '{filename}': {e}") from e


class RegistrationGateway:
    """The registration operations. Holds nothing but its backend."""

    def __init__(self, backend: RegistrationBackend):
        self.backend = backend

    def create_institute(self, draft: RegistrationDraft):
        institute = self.backend.create_institute(draft)
        logger.info(f"Registered institute '{draft.name}' ({draft.category})")
        return institute

    def list_institutes(self):
        return self.backend.list_institutes()

    def list_departments(self, institute_id):
        return self.backend.list_departments(institute_id)

    def ingest_departments(self, institute_id, content: bytes, filename: str) -> dict:
        """
        Stores the raw CSV, then inserts one department per data row.

        The raw file is written first and is kept even if the insert fails.
        Uploading the same filename again replaces the stored file but adds
        a new batch of departments next to the previous one.
        """
        # 1. Keep the file exactly as uploaded
        stored_name = self.backend.put_raw_file(filename, content)
        logger.info(f"Stored '{stored_name}' ({len(content)} bytes) for institute {institute_id}")

        # 2. Parse rows into department records
        records = normalize_departments(content, institute_id)

        # 3. Insert the batch
        inserted = self.backend.bulk_insert_departments(institute_id, records)
        logger.info(f"Inserted {inserted} departments for institute {institute_id}")

        return {"message": "ok"}


def get_gateway() -> RegistrationGateway:
    return RegistrationGateway(DjangoRegistrationBackend())
