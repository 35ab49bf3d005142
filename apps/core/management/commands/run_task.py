from django.core.management.base import BaseCommand, CommandError

from apps.core.auditing import auditing
from apps.core.registry import get_task, registered_tasks
from apps.core.runner import run


def _parse_arg(raw):
    key, sep, value = raw.partition('=')
    if not sep or not key:
        raise CommandError(f"Invalid --arg '{raw}', expected key=value")
    return key, value


class Command(BaseCommand):
    help = 'Runs a registered admin task and prints its result.'

    def add_arguments(self, parser):
        parser.add_argument('task_name', nargs='?', help='Registered task name (e.g. account.create)')
        parser.add_argument(
            '--arg',
            action='append',
            default=[],
            dest='task_args',
            metavar='KEY=VALUE',
            help='Keyword argument passed to the task; repeatable',
        )
        parser.add_argument(
            '--no-audit',
            action='store_true',
            help='Do not record the outcome in the audit log',
        )
        parser.add_argument(
            '--list',
            action='store_true',
            help='List registered tasks and exit',
        )

    def handle(self, *args, **options):
        if options['list']:
            for entry in registered_tasks():
                audit = f" [audit: {entry.audit}]" if entry.audit else ''
                self.stdout.write(f"{entry.name}{audit}  {entry.description}")
            return

        task_name = options['task_name']
        if not task_name:
            raise CommandError('A task name is required (use --list to see them)')

        try:
            entry = get_task(task_name)
        except LookupError as e:
            raise CommandError(str(e))

        payload = dict(_parse_arg(raw) for raw in options['task_args'])
        task = entry.build(**payload)
        if entry.audit and not options['no_audit']:
            task = auditing(entry.audit, task, stderr=self.stderr)

        exit_code = run(task, stdout=self.stdout, stderr=self.stderr)
        if exit_code:
            raise SystemExit(exit_code)
