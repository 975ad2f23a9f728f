"""
Custom managers and querysets for scheduling models.

QuerySets define chainable query methods.
Managers use QuerySets to enable method chaining.
No business logic should be here - only query operations.
"""

from django.db import models


class ScheduledClassQuerySet(models.QuerySet):
    """Custom queryset for ScheduledClass model with chainable methods."""

    def active(self):
        """Get classes that have not been removed."""
        return self.filter(is_active=True)

    def for_club(self, club_id):
        """
        Get classes of one club.

        Args:
            club_id: club identifier
        """
        return self.filter(club_id=club_id)

    def for_court(self, court_number):
        """
        Get classes held on a specific court.

        Args:
            court_number: int
        """
        return self.filter(court_number=court_number)

    def in_range(self, start_date, end_date):
        """
        Get classes whose date range overlaps ``[start_date, end_date]``.

        Args:
            start_date: date object
            end_date: date object
        """
        return self.filter(start_date__lte=end_date, end_date__gte=start_date)

    def once(self):
        """Get single-occurrence classes."""
        return self.filter(recurrence_type='once')

    def weekly(self):
        """Get weekly recurring classes."""
        return self.filter(recurrence_type='weekly')


class ScheduledClassManager(models.Manager):
    """Custom manager for ScheduledClass model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return ScheduledClassQuerySet(self.model, using=self._db)

    def active(self):
        """Get classes that have not been removed."""
        return self.get_queryset().active()

    def for_club(self, club_id):
        """
        Get classes of one club.

        Args:
            club_id: club identifier
        """
        return self.get_queryset().for_club(club_id)

    def in_range(self, start_date, end_date):
        """
        Get classes whose date range overlaps ``[start_date, end_date]``.

        Args:
            start_date: date object
            end_date: date object
        """
        return self.get_queryset().in_range(start_date, end_date)

    def once(self):
        """Get single-occurrence classes."""
        return self.get_queryset().once()

    def weekly(self):
        """Get weekly recurring classes."""
        return self.get_queryset().weekly()
