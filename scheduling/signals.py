"""
Signals sent by the scheduling services.

``scheduled_class_removed`` fires after a class is removed so that booking,
waitlist and capacity handling elsewhere can release whatever the class held.
Receivers get ``sender=ScheduledClass`` and ``instance``.
"""

from django.dispatch import Signal

scheduled_class_removed = Signal()
