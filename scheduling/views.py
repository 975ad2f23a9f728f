"""Views for the class scheduling API."""

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import generator, services
from .grid import SlotGrid
from .models import ScheduledClass
from .serializers import (
    CalendarQuerySerializer,
    CommitFailureSerializer,
    CommitRequestSerializer,
    CommitSuccessSerializer,
    DateRangeQuerySerializer,
    DayLayoutSerializer,
    GeneratedClassSerializer,
    GenerateRequestSerializer,
    MonthDaySerializer,
    RelocateSerializer,
    ScheduledClassReadSerializer,
    TimeSlotSerializer,
    to_base_config,
    to_generated_class,
)
from .types import RelocationRequest


class GenerateClassesView(APIView):
    """
    Preview the classes a configuration expands to. Nothing is stored.

    POST /api/schedule/generate/
    """

    def post(self, request):
        """Generate classes and validate time slot intervals."""
        serializer = GenerateRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        config, pools, spec = serializer.to_inputs()
        classes = generator.generate(config, pools, spec)
        validation = generator.validate_time_slots(config.duration_minutes, spec.time_slots)

        return Response({
            'classes': GeneratedClassSerializer(classes, many=True).data,
            'count': len(classes),
            'validation': {
                'is_valid': validation.is_valid,
                'incompatible_slots': TimeSlotSerializer(validation.incompatible_slots, many=True).data,
            },
        })


class CommitClassesView(APIView):
    """
    Store the selected generated classes.

    POST /api/schedule/commit/

    Responds 201 when every class was stored, 207 when some failed and 400
    when all of them failed.
    """

    def post(self, request):
        """Commit generated classes for a club."""
        serializer = CommitRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = serializer.validated_data
        config = to_base_config(data['base_config'])
        instances = [to_generated_class(item) for item in data['classes']]

        result = services.commit_generated_classes(instances, config, data['club_id'])

        if result.is_total_failure:
            response_status = status.HTTP_400_BAD_REQUEST
        elif result.is_partial_failure:
            response_status = status.HTTP_207_MULTI_STATUS
        else:
            response_status = status.HTTP_201_CREATED

        return Response({
            'success': result.is_success,
            'message': result.summary(),
            'summary': {
                'total_requested': result.total,
                'created_successfully': result.succeeded_count,
                'failed': result.failed_count,
            },
            'successful_classes': CommitSuccessSerializer(result.successful, many=True).data,
            'failed_classes': CommitFailureSerializer(result.failed, many=True).data,
        }, status=response_status)


class ScheduledClassListView(APIView):
    """
    List stored classes active within a date range.

    GET /api/classes/?start=X&end=Y[&club_id=Z]
    """

    def get(self, request):
        """List classes within a date range."""
        query_serializer = DateRangeQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        data = query_serializer.validated_data
        classes = services.get_classes_in_range(data['start'], data['end'], data.get('club_id'))

        serializer = ScheduledClassReadSerializer(classes, many=True)
        return Response(serializer.data)


class ScheduledClassDetailView(APIView):
    """
    Retrieve or remove a stored class.

    GET /api/classes/{id}/ - Retrieve class
    DELETE /api/classes/{id}/ - Remove class
    """

    def get(self, request, pk):
        """Retrieve a class."""
        scheduled_class = get_object_or_404(ScheduledClass, pk=pk)
        serializer = ScheduledClassReadSerializer(scheduled_class)
        return Response(serializer.data)

    def delete(self, request, pk):
        """Remove a class from the schedule."""
        scheduled_class = get_object_or_404(ScheduledClass.objects.active(), pk=pk)

        services.remove_class(scheduled_class)

        return Response({
            'message': f'Class "{scheduled_class.name}" has been removed.'
        }, status=status.HTTP_200_OK)


class RelocateClassView(APIView):
    """
    Move a class to another calendar cell (drag and drop).

    POST /api/classes/{id}/relocate/
    """

    def post(self, request, pk):
        """Relocate a class if the destination cell is free."""
        scheduled_class = get_object_or_404(ScheduledClass.objects.active(), pk=pk)
        serializer = RelocateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        relocation = RelocationRequest(
            instance_id=scheduled_class.pk,
            day=serializer.validated_data['day'],
            time_slot=serializer.validated_data['time'],
        )
        result = services.relocate(relocation, club_id=scheduled_class.club_id)

        body = {
            'accepted': result.accepted,
            'reason': result.reason,
            'message': result.message,
        }
        if not result.accepted:
            return Response(body, status=status.HTTP_409_CONFLICT)

        scheduled_class.refresh_from_db()
        body['class'] = ScheduledClassReadSerializer(scheduled_class).data
        return Response(body, status=status.HTTP_200_OK)


class CalendarView(APIView):
    """
    Calendar layout for a day, week or month.

    GET /api/calendar/?view=week&date=2024-06-03[&club_id=Z][&time_from=&time_to=]
        [&search=][&level_from=&level_to=][&weekdays=lunes&weekdays=friday]
        [&min_participants=&max_participants=]
    """

    def get(self, request):
        """Lay out classes on the calendar grid."""
        query_serializer = CalendarQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        data = query_serializer.validated_data
        view = data['view']

        grid = SlotGrid.from_settings()
        if 'time_from' in data or 'time_to' in data:
            grid = grid.filtered(data.get('time_from', grid.start), data.get('time_to', grid.end))

        days = services.build_calendar(
            view, data['date'], data.get('club_id'), grid,
            calendar_filter=query_serializer.to_filter(),
        )

        if view == 'month':
            payload = MonthDaySerializer(days, many=True).data
        else:
            payload = DayLayoutSerializer(days, many=True).data

        return Response({
            'view': view,
            'slots': grid.labels if view != 'month' else [],
            'days': payload,
        })
