"""Tests for bearer token expiry decoding."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from conftest import make_token
from coliving.exceptions import ColivingError, ColivingErrorCodes
from coliving.tokens import decode_expiry, is_expired


class TestDecodeExpiry:
    def test_reads_exp_claim(self):
        token = jwt.encode({"exp": 1_900_000_000}, "k" * 32, algorithm="HS256")
        assert decode_expiry(token) == datetime.fromtimestamp(1_900_000_000, tz=timezone.utc)

    def test_signature_is_not_checked(self):
        token = jwt.encode({"exp": 1_900_000_000}, "some-other-key-of-32-bytes-long!", algorithm="HS256")
        assert decode_expiry(token).year == 2030

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token(self, token):
        with pytest.raises(ColivingError) as exc_info:
            decode_expiry(token)
        assert exc_info.value.code == ColivingErrorCodes.DECODE_ERROR

    @pytest.mark.parametrize("claims", [{"sub": "42"}, {"exp": "tomorrow"}, {"exp": True}])
    def test_missing_or_non_numeric_exp(self, claims):
        token = jwt.encode(claims, "k" * 32, algorithm="HS256")
        with pytest.raises(ColivingError):
            decode_expiry(token)


class TestIsExpired:
    def test_future_token_is_valid(self):
        assert is_expired(make_token(expires_in=timedelta(minutes=5))) is False

    def test_past_token_is_expired(self):
        assert is_expired(make_token(expires_in=timedelta(seconds=-1))) is True

    def test_expiry_boundary_counts_as_expired(self):
        token = jwt.encode({"exp": 1_900_000_000}, "k" * 32, algorithm="HS256")
        at_exp = datetime.fromtimestamp(1_900_000_000, tz=timezone.utc)
        assert is_expired(token, now=at_exp) is True
        assert is_expired(token, now=at_exp - timedelta(seconds=1)) is False

    def test_naive_now_is_treated_as_utc(self):
        token = jwt.encode({"exp": 1_900_000_000}, "k" * 32, algorithm="HS256")
        naive = datetime.fromtimestamp(1_900_000_000, tz=timezone.utc).replace(tzinfo=None)
        assert is_expired(token, now=naive - timedelta(seconds=1)) is False
        assert is_expired(token, now=naive) is True


class TestOutOfRangeExpiry:
    @pytest.mark.parametrize("exp", [10**30, 1e300, -(10**30)])
    def test_unrepresentable_exp_is_decode_error(self, exp):
        token = jwt.encode({"exp": exp}, "k" * 32, algorithm="HS256")
        with pytest.raises(ColivingError) as exc_info:
            decode_expiry(token)
        assert exc_info.value.code == ColivingErrorCodes.DECODE_ERROR
