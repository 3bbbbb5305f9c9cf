from itertools import count
from tempfile import TemporaryDirectory
from unittest.mock import patch

from django.core.files.storage import FileSystemStorage, InMemoryStorage
from django.test import SimpleTestCase, TestCase

from common.exceptions import NotFoundError, PersistenceError, StorageError, ValidationError
from institutions.drafts import RegistrationDraft
from institutions.models import Department, Institute
from institutions.services import DjangoRegistrationBackend, RegistrationBackend, RegistrationGateway


class InMemoryBackend(RegistrationBackend):
    """Keeps institutes, departments and files in dicts."""

    def __init__(self):
        self.ids = count(1)
        self.institutes = {}
        self.departments = []
        self.files = {}
        self.calls = []

    def create_institute(self, draft):
        self.calls.append("create_institute")
        institute = {"id": next(self.ids), **draft.as_dict()}
        self.institutes[institute["id"]] = institute
        return institute

    def list_institutes(self):
        return list(self.institutes.values())

    def list_departments(self, institute_id):
        return [d for d in self.departments if d["institute_id"] == institute_id]

    def bulk_insert_departments(self, institute_id, records):
        self.calls.append("bulk_insert_departments")
        if institute_id not in self.institutes:
            raise NotFoundError()
        self.departments.extend(
            {"institute_id": r.institute_id, "name": r.name, "metadata": r.metadata}
            for r in records
        )
        return len(records)

    def put_raw_file(self, filename, content):
        self.calls.append("put_raw_file")
        self.files[filename] = content
        return filename


class FailingStorageBackend(InMemoryBackend):
    def put_raw_file(self, filename, content):
        raise StorageError("bucket unavailable")


class FailingInsertBackend(InMemoryBackend):
    def bulk_insert_departments(self, institute_id, records):
        raise PersistenceError("insert rejected")


CSV = b"Department\nComputer Science\nMechanical Engineering\n"


class RegistrationGatewayTests(SimpleTestCase):

    def setUp(self):
        self.backend = InMemoryBackend()
        self.gateway = RegistrationGateway(self.backend)
        self.institute = self.gateway.create_institute(
            RegistrationDraft(name="Acme", email="a@b.com", category="college")
        )

    def test_create_then_list_institutes(self):
        institutes = self.gateway.list_institutes()
        self.assertEqual(len(institutes), 1)
        self.assertEqual(institutes[0], {"id": 1, "name": "Acme", "email": "a@b.com", "category": "college"})

    def test_list_departments_without_ingestion_is_empty(self):
        self.assertEqual(self.gateway.list_departments(self.institute["id"]), [])
        self.assertEqual(self.gateway.list_departments(999), [])

    def test_ingest_stores_file_then_inserts_rows(self):
        result = self.gateway.ingest_departments(self.institute["id"], CSV, "depts.csv")

        self.assertEqual(result, {"message": "ok"})
        self.assertEqual(self.backend.files, {"depts.csv": CSV})
        self.assertEqual(self.backend.calls[-2:], ["put_raw_file", "bulk_insert_departments"])
        self.assertEqual(
            [d["name"] for d in self.gateway.list_departments(self.institute["id"])],
            ["Computer Science", "Mechanical Engineering"],
        )

    def test_ingest_empty_file_succeeds(self):
        self.assertEqual(self.gateway.ingest_departments(self.institute["id"], b"", "empty.csv"), {"message": "ok"})
        self.assertEqual(self.gateway.list_departments(self.institute["id"]), [])
        self.assertIn("empty.csv", self.backend.files)

    def test_reingest_overwrites_file_and_appends_rows(self):
        self.gateway.ingest_departments(self.institute["id"], CSV, "depts.csv")
        self.gateway.ingest_departments(self.institute["id"], b"Department\nCivil\n", "depts.csv")

        self.assertEqual(self.backend.files, {"depts.csv": b"Department\nCivil\n"})
        self.assertEqual(
            [d["name"] for d in self.gateway.list_departments(self.institute["id"])],
            ["Computer Science", "Mechanical Engineering", "Civil"],
        )

    def test_storage_failure_aborts_before_insert(self):
        backend = FailingStorageBackend()
        gateway = RegistrationGateway(backend)
        institute = gateway.create_institute(RegistrationDraft("Acme", "a@b.com", "college"))

        with self.assertRaises(StorageError):
            gateway.ingest_departments(institute["id"], CSV, "depts.csv")
        self.assertNotIn("bulk_insert_departments", backend.calls)
        self.assertEqual(backend.departments, [])

    def test_insert_failure_keeps_stored_file(self):
        backend = FailingInsertBackend()
        gateway = RegistrationGateway(backend)
        institute = gateway.create_institute(RegistrationDraft("Acme", "a@b.com", "college"))

        with self.assertRaises(PersistenceError):
            gateway.ingest_departments(institute["id"], CSV, "depts.csv")
        self.assertEqual(backend.files, {"depts.csv": CSV})


class DjangoRegistrationBackendTests(TestCase):

    def setUp(self):
        self.storage = InMemoryStorage()
        self.backend = DjangoRegistrationBackend(storage=self.storage)
        self.gateway = RegistrationGateway(self.backend)

    def test_create_institute_assigns_id(self):
        institute = self.gateway.create_institute(RegistrationDraft("Acme", "a@b.com", "college"))
        self.assertIsNotNone(institute.pk)
        self.assertEqual(list(Institute.objects.values_list("name", "email", "category")),
                         [("Acme", "a@b.com", "college")])

    def test_rejected_write_is_a_validation_error(self):
        # NOT NULL constraint on name
        draft = RegistrationDraft(name=None, email="a@b.com", category="college")
        with self.assertRaises(ValidationError):
            self.backend.create_institute(draft)

    def test_ingest_preserves_row_order_and_metadata(self):
        institute = Institute.objects.create(name="Acme", email="a@b.com", category="university")
        self.gateway.ingest_departments(institute.pk, b"Department,Code\nPhysics,PHY\nBiology,BIO\n", "d.csv")

        departments = self.gateway.list_departments(institute.pk)
        self.assertEqual([d.name for d in departments], ["Physics", "Biology"])
        self.assertEqual(departments[0].metadata, {"Department": "Physics", "Code": "PHY"})
        self.assertTrue(all(d.institute_id == institute.pk for d in departments))

    def test_reingest_overwrites_raw_file(self):
        institute = Institute.objects.create(name="Acme", email="a@b.com", category="college")
        self.gateway.ingest_departments(institute.pk, CSV, "depts.csv")
        self.gateway.ingest_departments(institute.pk, b"Department\nCivil\n", "depts.csv")

        self.assertEqual(self.storage.listdir("")[1], ["depts.csv"])
        with self.storage.open("depts.csv") as stored:
            self.assertEqual(stored.read(), b"Department\nCivil\n")
        self.assertEqual(Department.objects.filter(institute=institute).count(), 3)

    def test_ingest_for_missing_institute(self):
        with self.assertRaises(NotFoundError):
            self.gateway.ingest_departments(404, CSV, "depts.csv")
        self.assertFalse(Department.objects.exists())
        # the raw file write is not rolled back
        self.assertTrue(self.storage.exists("depts.csv"))

    def test_storage_errors_are_wrapped(self):
        class BrokenStorage(InMemoryStorage):
            def save(self, name, content, max_length=None):
                raise OSError("disk full")

        backend = DjangoRegistrationBackend(storage=BrokenStorage())
        with self.assertRaises(StorageError):
            backend.put_raw_file("depts.csv", CSV)

    def test_overwriting_storage_replaces_in_a_single_write(self):
        with TemporaryDirectory() as tmpdir:
            storage = FileSystemStorage(location=tmpdir, allow_overwrite=True)
            backend = DjangoRegistrationBackend(storage=storage)

            with patch.object(storage, "delete") as delete:
                first = backend.put_raw_file("depts.csv", CSV)
                second = backend.put_raw_file("depts.csv", b"Department\nCivil\n")

            delete.assert_not_called()
            self.assertEqual((first, second), ("depts.csv", "depts.csv"))
            self.assertEqual(storage.listdir("")[1], ["depts.csv"])
            with storage.open("depts.csv") as stored:
                self.assertEqual(stored.read(), b"Department\nCivil\n")
