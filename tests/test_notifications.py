"""Tests for the notice broadcaster and error descriptions."""

import httpx

from coliving.exceptions import ApiError, ColivingError, ColivingErrorCodes
from coliving.notifications import Notifier, describe_error


# ── Notifier ────────────────────────────────────────────────────────


class TestNotifier:
    def test_notify_without_subscribers(self):
        n = Notifier()
        n.info("Logged out!")
        assert len(n.event_log) == 1

    def test_notice_shape(self):
        n = Notifier()
        q = n.subscribe()
        n.success("Booking Submitted", "Your booking request has been successfully submitted.")

        notice = q.get_nowait()
        assert notice["level"] == "success"
        assert notice["title"] == "Booking Submitted"
        assert notice["message"].startswith("Your booking")
        assert "timestamp" in notice

    def test_multiple_subscribers(self):
        n = Notifier()
        q1, q2 = n.subscribe(), n.subscribe()
        n.error("Payment Failed")
        assert q1.get_nowait()["title"] == q2.get_nowait()["title"] == "Payment Failed"

    def test_unsubscribe(self):
        n = Notifier()
        q = n.subscribe()
        n.unsubscribe(q)
        n.unsubscribe(q)
        n.info("x")
        assert q.empty()
        assert n.subscriber_count == 0

    def test_full_queue_drops_oldest(self):
        n = Notifier(maxsize=2)
        q = n.subscribe()
        for title in ("one", "two", "three"):
            n.info(title)
        assert [q.get_nowait()["title"] for _ in range(q.qsize())] == ["two", "three"]
        assert len(n.event_log) == 3

    def test_event_log_is_a_copy(self):
        n = Notifier()
        n.info("x")
        n.event_log.clear()
        assert len(n.event_log) == 1


# ── describe_error ──────────────────────────────────────────────────


class TestDescribeError:
    def test_backend_message_wins(self):
        exc = ApiError(ColivingErrorCodes.HTTP_ERROR, "Room full", 409, errors=["ignored"])
        assert describe_error(exc) == "Room full"

    def test_errors_joined_when_no_message(self):
        exc = ApiError(ColivingErrorCodes.HTTP_ERROR, "", 422, errors=["a", "b"])
        assert describe_error(exc) == "a; b"

    def test_network(self):
        exc = ColivingError(ColivingErrorCodes.NETWORK_ERROR, "GET /x: ConnectError")
        assert describe_error(exc) == "Network error. Check your connection and try again."
        assert describe_error(httpx.ConnectError("down")).startswith("Network error")

    def test_fallback(self):
        assert describe_error(RuntimeError("boom"), "Couldn't send OTP") == "Couldn't send OTP"
        assert describe_error(ApiError(ColivingErrorCodes.HTTP_ERROR, "", 500)) == "Something went wrong."
