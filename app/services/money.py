from decimal import Decimal, ROUND_HALF_UP

_CENT = Decimal("0.01")


# 모든 금액은 소수점 2자리(센타부 단위)로 정규화
def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)
