"""
Management command to generate classes from a JSON description.

The file uses the same fields as the generate endpoint: base_config, courts,
trainers, days_of_week and time_slots.
"""

import json

from django.core.management.base import BaseCommand, CommandError

from scheduling import generator, services
from scheduling.serializers import GenerateRequestSerializer


class Command(BaseCommand):
    help = 'Generate classes from a JSON configuration file, optionally storing them'

    def add_arguments(self, parser):
        parser.add_argument(
            'path',
            help='Path to the JSON configuration file'
        )
        parser.add_argument(
            '--club',
            default='',
            help='Club identifier the classes belong to (required with --commit)'
        )
        parser.add_argument(
            '--commit',
            action='store_true',
            help='Store the generated classes instead of only counting them'
        )

    def handle(self, *args, **options):
        try:
            with open(options['path'], encoding='utf-8') as handle:
                payload = json.load(handle)
        except (OSError, ValueError) as exc:
            raise CommandError(f"Cannot read {options['path']}: {exc}")

        serializer = GenerateRequestSerializer(data=payload)
        if not serializer.is_valid():
            raise CommandError(f"Invalid configuration: {serializer.errors}")

        config, pools, spec = serializer.to_inputs()
        classes = generator.generate(config, pools, spec)
        validation = generator.validate_time_slots(config.duration_minutes, spec.time_slots)

        self.stdout.write(f'Generated {len(classes)} class(es) for "{config.name}"')
        for slot in validation.incompatible_slots:
            self.stdout.write(self.style.WARNING(
                f'Time slot {slot} is incompatible with a {config.duration_minutes} minute class'
            ))

        if not options['commit']:
            return

        if not options['club']:
            raise CommandError('--club is required with --commit')

        result = services.commit_generated_classes(classes, config, options['club'])
        if result.is_total_failure:
            raise CommandError(f'No classes were stored: {result.summary()}')

        style = self.style.WARNING if result.failed else self.style.SUCCESS
        self.stdout.write(style(f'Stored classes: {result.summary()}'))
