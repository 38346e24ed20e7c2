import pytest

from tuitionhub.core.exceptions import Conflict, InvalidState, NotFound
from tuitionhub.models.payment import PLATFORM_FEE_RATE, split_amount


def test_platform_fee_is_ten_percent():
    assert PLATFORM_FEE_RATE == 0.10
    assert split_amount(5000) == (500, 4500)
    assert split_amount(1000) == (100, 900)


@pytest.mark.parametrize("amount", [1, 7, 15, 99, 1234, 5005, 99999])
def test_fee_and_payout_always_sum_to_amount(amount):
    platform_fee, tutor_receives = split_amount(amount)
    assert platform_fee + tutor_receives == amount
    assert platform_fee == round(amount * 0.10)


def test_error_envelope_shape():
    body = Conflict("Already applied").to_dict()
    assert body == {"success": False, "message": "Already applied", "error": "conflict"}
    assert Conflict.status_code == 409
    assert InvalidState.status_code == 400
    assert NotFound("x", extra={"id": "1"}).to_dict()["id"] == "1"
