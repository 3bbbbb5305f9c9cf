from django.conf import settings
from django.contrib.staticfiles.management.commands.runserver import Command as RunserverCommand


class Command(RunserverCommand):
    help = 'Starts the development server on the configured PORT unless an address is given'

    default_port = settings.PORT
