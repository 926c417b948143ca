# violations/tests/test_violation_lifecycle.py

from django.test import SimpleTestCase

from violations.models import RentalViolation
from violations.services.violation_lifecycle import TERMINAL_STATES, can_transition

PENDING = RentalViolation.STATUS_PENDING
ACCEPTED = RentalViolation.STATUS_CUSTOMER_ACCEPTED
REJECTED = RentalViolation.STATUS_CUSTOMER_REJECTED
ESCALATED = RentalViolation.STATUS_ESCALATED
RESOLVED = RentalViolation.STATUS_RESOLVED


class ViolationLifecycleTests(SimpleTestCase):
    def test_allowed_paths(self):
        for from_status, to_status in [
            (PENDING, ACCEPTED),
            (PENDING, REJECTED),
            (REJECTED, PENDING),
            (REJECTED, ESCALATED),
            (ESCALATED, RESOLVED),
        ]:
            with self.subTest(from_status=from_status, to_status=to_status):
                self.assertTrue(can_transition(from_status=from_status, to_status=to_status))

    def test_forbidden_paths(self):
        for from_status, to_status in [
            (PENDING, ESCALATED),
            (PENDING, RESOLVED),
            (REJECTED, ACCEPTED),
            (REJECTED, RESOLVED),
            (ESCALATED, PENDING),
            (ACCEPTED, REJECTED),
            (RESOLVED, PENDING),
        ]:
            with self.subTest(from_status=from_status, to_status=to_status):
                self.assertFalse(can_transition(from_status=from_status, to_status=to_status))

    def test_terminal_states(self):
        self.assertEqual(TERMINAL_STATES, {ACCEPTED, RESOLVED})
