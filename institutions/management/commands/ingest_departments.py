from pathlib import Path

from django.core.management.base import BaseCommand, CommandError
from rest_framework.exceptions import APIException

from institutions.services import get_gateway


class Command(BaseCommand):
    help = 'Uploads a department CSV for an institute, the same way the upload endpoint does'

    def add_arguments(self, parser):
        parser.add_argument('institute_id', type=int, help='Institute that owns the departments')
        parser.add_argument('path', type=Path, help='CSV file to ingest')

    def handle(self, *args, **options):
        path = options['path']
        institute_id = options['institute_id']

        if not path.is_file():
            raise CommandError(f"File not found: {path}")

        gateway = get_gateway()
        try:
            gateway.ingest_departments(institute_id, path.read_bytes(), path.name)
        except APIException as e:
            raise CommandError(str(e.detail)) from e

        count = len(gateway.list_departments(institute_id))
        self.stdout.write(self.style.SUCCESS(
            f"Ingested '{path.name}' for institute {institute_id} ({count} departments on record)."
        ))
