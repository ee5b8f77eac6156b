from datetime import datetime, time

from django.utils import timezone


def at(day, hour, minute=0):
    return timezone.make_aware(datetime.combine(day, time(hour, minute)))
