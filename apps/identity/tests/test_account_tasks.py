"""
Tests for the account admin tasks.

Covers:
1. account.create / account.promote / account.set_password via run_task
2. Problems (duplicates, unknown accounts) exit 1 with a terse message
3. Every audited run leaves exactly one audit record
"""
import io

from django.contrib.auth import get_user_model
from django.core.management import call_command
from django.test import TestCase

from apps.core import crypto
from apps.core.runner import EXIT_FAILURE, EXIT_OK, run
from apps.governance.audit_service import AuditAction
from apps.governance.models import AuditLog
from apps.identity.admin_tasks import create_user, promote_user


User = get_user_model()


def make_user(email='existing@example.com', password='old-password'):
    return User.objects.create_user(username=email, email=email, password=password)


class AccountTaskTestCase(TestCase):

    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()

    def run_command(self, *args):
        """Run run_task; returns the exit status the process would have."""
        try:
            call_command('run_task', *args, stdout=self.stdout, stderr=self.stderr)
        except SystemExit as e:
            return e.code
        return EXIT_OK


class CreateUserTest(AccountTaskTestCase):

    def test_create_user(self):
        exit_code = self.run_command(
            AuditAction.CREATE_USER, '--arg', 'email=new@example.com', '--arg', 'password=s3cret-pass'
        )

        self.assertEqual(exit_code, EXIT_OK)
        user = User.objects.get(email='new@example.com')
        self.assertTrue(user.check_password('s3cret-pass'))
        self.assertFalse(user.is_superuser)
        self.assertIn("'email': 'new@example.com'", self.stdout.getvalue())
        self.assertEqual(self.stdout.getvalue().count('\n'), 1)

    def test_create_user_is_audited(self):
        self.run_command(AuditAction.CREATE_USER, '--arg', 'email=new@example.com', '--arg', 'password=pw')

        log = AuditLog.objects.get(action=AuditAction.CREATE_USER)
        self.assertTrue(log.success)
        self.assertIsNone(log.actor)
        self.assertEqual(log.details['email'], 'new@example.com')
        self.assertNotIn('password', log.details)

    def test_duplicate_email_is_a_problem(self):
        make_user('taken@example.com')

        exit_code = self.run_command(
            AuditAction.CREATE_USER, '--arg', 'email=TAKEN@example.com', '--arg', 'password=pw'
        )

        self.assertEqual(exit_code, EXIT_FAILURE)
        self.assertIn('already exists', self.stderr.getvalue())
        self.assertNotIn('Traceback', self.stderr.getvalue())
        self.assertEqual(self.stdout.getvalue(), '')

        log = AuditLog.objects.get(action=AuditAction.CREATE_USER)
        self.assertFalse(log.success)
        self.assertEqual(log.details['code'], 409)

    def test_invalid_email_is_a_problem(self):
        exit_code = self.run_command(AuditAction.CREATE_USER, '--arg', 'email=nope', '--arg', 'password=pw')

        self.assertEqual(exit_code, EXIT_FAILURE)
        self.assertTrue(self.stderr.getvalue().startswith('Invalid email address: nope'))
        self.assertFalse(User.objects.exists())

    def test_missing_argument_is_an_internal_error(self):
        exit_code = self.run_command(AuditAction.CREATE_USER, '--arg', 'email=new@example.com')

        self.assertEqual(exit_code, EXIT_FAILURE)
        self.assertIn('TypeError', self.stderr.getvalue())

        log = AuditLog.objects.get(action=AuditAction.CREATE_USER)
        self.assertFalse(log.success)
        self.assertEqual(log.details['type'], 'TypeError')
        self.assertIn('password', log.details['message'])
        self.assertNotIn('code', log.details)

    def test_no_audit_flag(self):
        self.run_command(
            AuditAction.CREATE_USER, '--no-audit', '--arg', 'email=new@example.com', '--arg', 'password=pw'
        )

        self.assertTrue(User.objects.filter(email='new@example.com').exists())
        self.assertFalse(AuditLog.objects.exists())

    def test_run_without_command(self):
        exit_code = run(create_user('direct@example.com', 'pw'), stdout=self.stdout, stderr=self.stderr)

        self.assertEqual(exit_code, EXIT_OK)
        self.assertTrue(User.objects.filter(email='direct@example.com').exists())
        self.assertFalse(AuditLog.objects.exists())


class PromoteUserTest(AccountTaskTestCase):

    def test_promote_user(self):
        user = make_user()

        exit_code = self.run_command(AuditAction.PROMOTE_USER, '--arg', f'email={user.email}')

        self.assertEqual(exit_code, EXIT_OK)
        user.refresh_from_db()
        self.assertTrue(user.is_staff)
        self.assertTrue(user.is_superuser)
        self.assertIn("'is_superuser': True", self.stdout.getvalue())

    def test_unknown_account(self):
        exit_code = run(promote_user('ghost@example.com'), stdout=self.stdout, stderr=self.stderr)

        self.assertEqual(exit_code, EXIT_FAILURE)
        lines = self.stderr.getvalue().splitlines()
        self.assertEqual(lines[0], 'No account found with email ghost@example.com')
        self.assertEqual(lines[1], "{'email': 'ghost@example.com'}")


class SetUserPasswordTest(AccountTaskTestCase):

    def test_set_password(self):
        user = make_user()

        exit_code = self.run_command(
            AuditAction.SET_USER_PASSWORD, '--arg', f'email={user.email}', '--arg', 'password=brand-new'
        )

        self.assertEqual(exit_code, EXIT_OK)
        user.refresh_from_db()
        self.assertTrue(crypto.verify_password("brand-new", user.password))
        self.assertFalse(crypto.verify_password("old-password", user.password))
        self.assertNotIn('brand-new', self.stdout.getvalue())

        log = AuditLog.objects.get(action=AuditAction.SET_USER_PASSWORD)
        self.assertNotIn('brand-new', str(log.details))

    def test_empty_password_is_rejected(self):
        user = make_user()

        exit_code = self.run_command(
            AuditAction.SET_USER_PASSWORD, '--arg', f'email={user.email}', '--arg', 'password='
        )

        self.assertEqual(exit_code, EXIT_FAILURE)
        self.assertEqual(self.stderr.getvalue(), 'A new password is required\n')
        user.refresh_from_db()
        self.assertTrue(user.check_password('old-password'))
