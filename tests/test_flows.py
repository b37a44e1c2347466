"""Tests for the screen flows: booking wizard, login and cancel scopes."""

import asyncio
from datetime import date, timedelta

import httpx
import pytest
import respx

from conftest import BASE_URL, make_token
from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.flows import BookingStep, BookingWizard, CancelScope, LoginFlow, validate_email
from coliving.models.booking import BookingResult
from coliving.models.property import Property
from coliving.pricing import BookingMode

PROPERTY = Property.model_validate({
    "id": 7,
    "name": "Coco Indiranagar",
    "rateCard": [{"id": 31, "roomType": "Double sharing", "rent": 9500}],
})
CHECK_IN = date.today() + timedelta(days=10)


def _reviewed_wizard(backend, notifier, mode=BookingMode.PRE_BOOK, **kw):
    wizard = BookingWizard(backend, notifier, **kw)
    wizard.select_room(PROPERTY, PROPERTY.rate_card[0])
    wizard.choose_stay(CHECK_IN, "6 Months")
    wizard.review(mode)
    return wizard


# ── CancelScope ─────────────────────────────────────────────────────


class TestCancelScope:
    async def test_run_returns_result(self):
        async def answer():
            return 42

        assert await CancelScope().run(answer()) == 42

    async def test_closed_scope_rejects_new_work(self):
        scope = CancelScope("screen")
        scope.close()

        async def never():
            raise AssertionError("should not run")

        with pytest.raises(ColivingError) as exc_info:
            await scope.run(never())
        assert exc_info.value.code == ColivingErrorCodes.CANCELLED

    async def test_close_cancels_in_flight(self):
        scope = CancelScope()
        started = asyncio.Event()

        async def slow():
            started.set()
            await asyncio.sleep(60)

        task = asyncio.create_task(scope.run(slow()))
        await started.wait()
        assert scope.pending == 1
        scope.close()

        with pytest.raises(ColivingError) as exc_info:
            await task
        assert exc_info.value.code == ColivingErrorCodes.CANCELLED
        assert scope.closed

    async def test_late_result_is_dropped(self):
        scope = CancelScope()

        async def closes_then_answers():
            scope.close()
            return "stale"

        with pytest.raises(ColivingError) as exc_info:
            await scope.run(closes_then_answers())
        assert exc_info.value.code == ColivingErrorCodes.CANCELLED

    async def test_context_manager_closes(self):
        async with CancelScope() as scope:
            pass
        assert scope.closed


# ── BookingWizard ───────────────────────────────────────────────────


class TestBookingWizardSteps:
    def test_steps_in_order(self, backend, notifier):
        wizard = BookingWizard(backend, notifier)
        assert wizard.step is BookingStep.SELECT_ROOM
        wizard.select_room(PROPERTY, PROPERTY.rate_card[0])
        assert wizard.step is BookingStep.CHOOSE_STAY
        wizard.choose_stay(CHECK_IN, 6)
        assert wizard.step is BookingStep.REVIEW

        quote = wizard.review(BookingMode.FULL_BOOK)
        assert quote.net_payable == 9500 * 8
        quote = wizard.review("PreBook")
        assert quote.amount_due_now == 7600

    def test_review_before_stay_is_rejected(self, backend, notifier):
        wizard = BookingWizard(backend, notifier)
        wizard.select_room(PROPERTY, PROPERTY.rate_card[0])
        with pytest.raises(ColivingError):
            wizard.review(BookingMode.FULL_BOOK)

    def test_past_check_in_rejected(self, backend, notifier):
        wizard = BookingWizard(backend, notifier)
        wizard.select_room(PROPERTY, PROPERTY.rate_card[0])
        with pytest.raises(ColivingError):
            wizard.choose_stay(date.today() - timedelta(days=1), 6)

    @pytest.mark.parametrize("duration", [4, "1 Month", "Monthly"])
    def test_unsupported_duration(self, backend, notifier, duration):
        wizard = BookingWizard(backend, notifier)
        wizard.select_room(PROPERTY, PROPERTY.rate_card[0])
        with pytest.raises(ColivingError):
            wizard.choose_stay(CHECK_IN, duration)
        assert wizard.step is BookingStep.CHOOSE_STAY

    async def test_submit_without_review(self, backend, notifier, logged_in):
        wizard = BookingWizard(backend, notifier)
        with pytest.raises(ColivingError):
            await wizard.submit()

    async def test_submit_requires_login(self, backend, notifier):
        wizard = _reviewed_wizard(backend, notifier)
        assert await wizard.submit() is None
        assert notifier.event_log[-1]["title"] == "Booking Failed"

    async def test_submit_with_incomplete_stay(self, backend, notifier, logged_in):
        wizard = _reviewed_wizard(backend, notifier)
        wizard._check_in = None
        with pytest.raises(ColivingError) as exc_info:
            await wizard.submit()
        assert exc_info.value.code == ColivingErrorCodes.VALIDATION_ERROR
        assert wizard.loading is False


class TestBookingWizardSubmit:
    @respx.mock
    async def test_submit_to_payment_success(self, backend, notifier, logged_in):
        route = respx.post(f"{BASE_URL}/api/book-room/add").mock(
            return_value=httpx.Response(201, json={
                "success": True, "message": "Booked", "bookingId": 5,
                "orderId": "O1", "redirectUrl": "https://gateway.test/pay/O1",
            })
        )
        respx.get(f"{BASE_URL}/api/payments/status/O1").mock(
            return_value=httpx.Response(200, json={"paymentStatus": "SUCCESS"})
        )
        wizard = _reviewed_wizard(backend, notifier)

        result = await wizard.submit()
        assert result.order_id == "O1"
        assert wizard.step is BookingStep.PAYING
        assert wizard.redirect_url == "https://gateway.test/pay/O1"
        assert wizard.quote is None
        assert route.calls.last.request.headers["Authorization"] == f"Bearer {logged_in.token}"

        assert await wizard.on_navigation("https://gateway.test/pay/O1/otp") is None
        outcome = await wizard.on_navigation(f"{BASE_URL}/payment/redirect?status=done")
        assert outcome.succeeded
        assert wizard.step is BookingStep.DONE
        assert [n["title"] for n in notifier.event_log] == ["Booking Submitted", "Payment Successful"]

    @respx.mock
    async def test_payment_failure_notice(self, backend, notifier, logged_in):
        respx.post(f"{BASE_URL}/api/book-room/add").mock(
            return_value=httpx.Response(201, json={"orderId": "O2", "redirectUrl": "https://gateway.test/pay"})
        )
        respx.get(f"{BASE_URL}/api/payments/status/O2").mock(return_value=httpx.Response(401))
        wizard = _reviewed_wizard(backend, notifier)
        await wizard.submit()

        outcome = await wizard.on_navigation(f"{BASE_URL}/payment/redirect")
        assert not outcome.succeeded
        notice = notifier.event_log[-1]
        assert notice["title"] == "Payment Failed"
        assert notice["message"] == "Failed to verify payment status. Session expired."

    @respx.mock
    async def test_submit_without_payment_goes_done(self, backend, notifier, logged_in):
        respx.post(f"{BASE_URL}/api/book-room/add").mock(
            return_value=httpx.Response(201, json={"success": True})
        )
        wizard = _reviewed_wizard(backend, notifier, mode=BookingMode.FULL_BOOK)
        await wizard.submit()
        assert wizard.step is BookingStep.DONE
        assert notifier.event_log[-1]["message"] == "Your booking request has been successfully submitted."

    @respx.mock
    async def test_backend_failure_discards_quote(self, backend, notifier, logged_in):
        respx.post(f"{BASE_URL}/api/book-room/add").mock(
            return_value=httpx.Response(409, json={"message": "Room no longer available"})
        )
        wizard = _reviewed_wizard(backend, notifier)

        assert await wizard.submit() is None
        assert wizard.quote is None
        assert wizard.loading is False
        assert wizard.step is BookingStep.REVIEW
        assert notifier.event_log[-1]["message"] == "Room no longer available"

        # The user can re-review and retry
        assert wizard.review(BookingMode.PRE_BOOK).pre_book_amount == 7600

    async def test_close_mid_submit_drops_result(self, backend, notifier, logged_in, monkeypatch):
        release = asyncio.Event()

        async def slow_create(request):
            await release.wait()
            return BookingResult(order_id="O3", redirect_url="https://gateway.test/pay")

        monkeypatch.setattr(backend.bookings, "create_booking", slow_create)
        wizard = _reviewed_wizard(backend, notifier)
        task = asyncio.create_task(wizard.submit())
        await asyncio.sleep(0)
        assert wizard.loading

        wizard.close()
        assert await task is None
        assert wizard.step is BookingStep.REVIEW
        assert wizard.result is None
        assert notifier.event_log == []


# ── LoginFlow ───────────────────────────────────────────────────────


class TestValidateEmail:
    @pytest.mark.parametrize("value,error", [
        ("", "Email is required"),
        ("   ", "Email is required"),
        ("asha", "Enter valid email"),
        ("asha@example", "Enter valid email"),
        ("asha@example.com", ""),
    ])
    def test_messages(self, value, error):
        assert validate_email(value) == error


class TestLoginFlow:
    async def test_invalid_email_sends_nothing(self, backend, notifier):
        flow = LoginFlow(backend, notifier)
        assert await flow.send_otp("not-an-email") is False
        assert flow.errors == {"email": "Enter valid email"}
        assert notifier.event_log == []

    @respx.mock
    async def test_unknown_account_suggests_signup(self, backend, notifier):
        respx.post(f"{BASE_URL}/api/common/login/request-otp").mock(
            return_value=httpx.Response(404, json={"message": "Email not found"})
        )
        flow = LoginFlow(backend, notifier)
        assert await flow.send_otp("new@example.com") is False
        assert flow.needs_signup
        assert notifier.event_log[-1]["level"] == "info"

    async def test_verify_before_send(self, backend, notifier):
        flow = LoginFlow(backend, notifier)
        assert await flow.verify_otp("123456") is None
        assert flow.errors == {"otp": "Request an OTP first"}

    @respx.mock
    async def test_full_login(self, backend, notifier, sessions):
        respx.post(f"{BASE_URL}/api/common/login/request-otp").mock(
            return_value=httpx.Response(200, json={"success": True, "message": "OTP sent"})
        )
        respx.post(f"{BASE_URL}/api/common/login/verify-otp").mock(
            return_value=httpx.Response(200, json={
                "success": True, "token": make_token(),
                "account": {"id": 42, "fullName": "Asha Rao", "userType": "student"},
            })
        )
        flow = LoginFlow(backend, notifier)
        assert await flow.send_otp(" asha@example.com ")
        assert flow.email == "asha@example.com"

        assert await flow.verify_otp("") is None
        assert flow.errors == {"otp": "OTP is required"}

        session = await flow.verify_otp("123456")
        assert session.full_name == "Asha Rao"
        assert sessions.current == session
        assert [n["title"] for n in notifier.event_log] == ["OTP sent to your email", "Login successful"]

    @respx.mock
    async def test_wrong_otp(self, backend, notifier, sessions):
        respx.post(f"{BASE_URL}/api/common/login/request-otp").mock(
            return_value=httpx.Response(200, json={"success": True})
        )
        respx.post(f"{BASE_URL}/api/common/login/verify-otp").mock(
            return_value=httpx.Response(400, json={"message": "OTP expired"})
        )
        flow = LoginFlow(backend, notifier)
        await flow.send_otp("asha@example.com")
        assert await flow.verify_otp("000000") is None
        assert notifier.event_log[-1]["title"] == "OTP expired"
        assert sessions.current is None

    @respx.mock
    async def test_corrupt_response_becomes_notice(self, backend, notifier):
        respx.post(f"{BASE_URL}/api/common/login/request-otp").mock(
            side_effect=httpx.DecodingError("bad gzip")
        )
        flow = LoginFlow(backend, notifier)
        assert await flow.send_otp("asha@example.com") is False
        assert flow.sending is False
        assert notifier.event_log[-1]["level"] == "error"
        assert notifier.event_log[-1]["title"].startswith("Network error")
