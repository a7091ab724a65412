from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from quotation_backend.core.enums import QuotationAction, QuotationStatus
from quotation_backend.services.quotation_status_service import (
    allowed_actions,
    can_approve,
    can_convert,
    can_delete,
    can_edit,
    can_reject,
    can_send,
    can_transition,
    effective_status,
    is_expired,
    is_usable,
)

pytestmark = pytest.mark.status

NOW = datetime(2026, 10, 17, 12, 0, tzinfo=timezone.utc)
FUTURE = NOW + timedelta(days=10)
PAST = NOW - timedelta(seconds=1)


def make_quotation(status="draft", total_amount=100, valid_until=FUTURE, converted_order_id=None):
    return SimpleNamespace(
        status=status,
        total_amount=total_amount,
        valid_until=valid_until,
        converted_order_id=converted_order_id,
    )


class TestSend:

    def test_draft_with_total_can_be_sent(self):
        q = make_quotation()
        assert can_send(q, NOW)
        assert can_transition(q, QuotationStatus.SENT, NOW)

    def test_draft_with_zero_total_cannot_be_sent(self):
        q = make_quotation(total_amount=0)
        assert not can_send(q, NOW)
        assert not can_transition(q, "sent", NOW)

    def test_sending_ignores_validity(self):
        assert can_send(make_quotation(valid_until=PAST), NOW)

    def test_only_drafts_are_editable(self):
        for status in QuotationStatus:
            q = make_quotation(status=status.value)
            assert can_edit(q, NOW) == (status == QuotationStatus.DRAFT)
            assert can_delete(q, NOW) == (status == QuotationStatus.DRAFT)


class TestApproveReject:

    def test_sent_within_validity(self):
        q = make_quotation(status="sent")
        assert can_approve(q, NOW)
        assert can_reject(q, NOW)

    def test_valid_until_boundary_is_inclusive(self):
        q = make_quotation(status="sent", valid_until=NOW)
        assert can_approve(q, NOW)

    def test_sent_past_validity(self):
        q = make_quotation(status="sent", valid_until=PAST)
        assert not can_approve(q, NOW)
        assert not can_reject(q, NOW)
        assert not can_transition(q, QuotationStatus.APPROVED, NOW)
        assert not can_transition(q, QuotationStatus.REJECTED, NOW)

    def test_draft_cannot_be_approved(self):
        assert not can_transition(make_quotation(), QuotationStatus.APPROVED, NOW)


class TestConvert:

    def test_approved_can_be_converted(self):
        q = make_quotation(status="approved")
        assert can_convert(q, NOW)
        assert can_transition(q, QuotationStatus.CONVERTED, NOW)

    def test_no_double_conversion(self):
        q = make_quotation(status="approved", converted_order_id=42)
        assert not can_convert(q, NOW)
        assert not can_transition(q, QuotationStatus.CONVERTED, NOW)

    def test_expired_approval_cannot_be_converted(self):
        assert not can_convert(make_quotation(status="approved", valid_until=PAST), NOW)

    def test_sent_cannot_skip_approval(self):
        assert not can_transition(make_quotation(status="sent"), QuotationStatus.CONVERTED, NOW)


class TestExpiration:

    @pytest.mark.parametrize("status", ["sent", "approved"])
    def test_past_validity_counts_as_expired(self, status):
        q = make_quotation(status=status, valid_until=PAST)
        assert is_expired(q, NOW)
        assert not is_usable(q, NOW)
        assert effective_status(q, NOW) == QuotationStatus.EXPIRED
        assert can_transition(q, QuotationStatus.EXPIRED, NOW)

    @pytest.mark.parametrize("status", ["draft", "rejected", "converted"])
    def test_other_statuses_do_not_expire(self, status):
        q = make_quotation(status=status, valid_until=PAST)
        assert not is_expired(q, NOW)
        assert effective_status(q, NOW) == QuotationStatus(status)

    def test_cannot_expire_before_validity_ends(self):
        q = make_quotation(status="sent")
        assert is_usable(q, NOW)
        assert not can_transition(q, QuotationStatus.EXPIRED, NOW)

    def test_naive_datetimes_are_treated_as_utc(self):
        naive_past = (NOW - timedelta(hours=1)).replace(tzinfo=None)
        assert is_expired(make_quotation(status="sent", valid_until=naive_past), NOW)

    def test_iso_string_validity(self):
        q = make_quotation(status="sent", valid_until="2026-10-18T00:00:00+00:00")
        assert can_approve(q, NOW)


class TestTerminalStates:

    @pytest.mark.parametrize("status", ["rejected", "converted", "expired"])
    def test_no_transitions_out(self, status):
        q = make_quotation(status=status)
        for target in QuotationStatus:
            assert not can_transition(q, target, NOW)

    def test_unknown_target(self):
        assert not can_transition(make_quotation(), "archived", NOW)

    def test_unknown_current_status(self):
        assert not can_transition(make_quotation(status="pending"), QuotationStatus.SENT, NOW)


class TestAllowedActions:

    def test_draft(self):
        assert allowed_actions(make_quotation(), NOW) == [
            QuotationAction.EDIT, QuotationAction.SEND, QuotationAction.DELETE, QuotationAction.DUPLICATE,
        ]

    def test_empty_draft_cannot_be_sent(self):
        assert QuotationAction.SEND not in allowed_actions(make_quotation(total_amount=0), NOW)

    def test_sent(self):
        assert allowed_actions(make_quotation(status="sent"), NOW) == [
            QuotationAction.APPROVE, QuotationAction.REJECT, QuotationAction.DUPLICATE,
        ]

    def test_approved(self):
        assert allowed_actions(make_quotation(status="approved"), NOW) == [
            QuotationAction.CONVERT, QuotationAction.DUPLICATE,
        ]

    def test_stale_sent_only_allows_duplicate(self):
        assert allowed_actions(make_quotation(status="sent", valid_until=PAST), NOW) == [QuotationAction.DUPLICATE]

    def test_sales_user_is_not_offered_admin_actions(self):
        sales = SimpleNamespace(role="sales")
        assert allowed_actions(make_quotation(), NOW, user=sales) == [
            QuotationAction.EDIT, QuotationAction.SEND, QuotationAction.DUPLICATE,
        ]
        assert allowed_actions(make_quotation(status="sent"), NOW, user=sales) == [QuotationAction.DUPLICATE]
        assert allowed_actions(make_quotation(status="approved"), NOW, user=sales) == [QuotationAction.DUPLICATE]

    def test_admin_user_gets_every_action(self):
        admin = SimpleNamespace(role="admin")
        assert allowed_actions(make_quotation(status="sent"), NOW, user=admin) == [
            QuotationAction.APPROVE, QuotationAction.REJECT, QuotationAction.DUPLICATE,
        ]
        assert QuotationAction.DELETE in allowed_actions(make_quotation(), NOW, user=admin)


class TestValidityParsing:

    def test_malformed_string_counts_as_lapsed(self):
        q = make_quotation(status="sent", valid_until="next tuesday")
        assert not can_approve(q, NOW)
        assert is_expired(q, NOW)
        assert effective_status(q, NOW) == QuotationStatus.EXPIRED
