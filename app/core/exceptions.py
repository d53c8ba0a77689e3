"""
exceptions.py

과금(Billing) 도메인 예외 정의.

서비스 계층은 HTTP를 모르는 상태로 아래 예외만 발생시키고,
라우터는 status_code를 그대로 HTTPException으로 변환한다.

- 404 : 대상 없음 (템플릿 / 청구 / 입주자)
- 409 : 상태 충돌 (비활성 템플릿, 참조 중 삭제, 중복 청구, 종료 상태 변경)
- 400 : 입력 값 오류 (대상 입주자 없음, 금액 오류, 초과 납부)

"""


class BillingError(Exception):
    status_code = 400


class TemplateNotFoundError(BillingError):
    status_code = 404

    def __init__(self, template_id=None):
        super().__init__("fee template not found")
        self.template_id = template_id


class TemplateInactiveError(BillingError):
    status_code = 409

    def __init__(self, template_id=None):
        super().__init__("fee template is inactive")
        self.template_id = template_id


class EmptyPopulationError(BillingError):
    status_code = 400

    def __init__(self):
        super().__init__("no residents to bill")


class ConflictError(BillingError):
    status_code = 409


class TerminalStateError(BillingError):
    status_code = 409

    def __init__(self, status):
        super().__init__(f"charge is already {status.value}")
        self.status = status


class InvalidAmountError(BillingError):
    status_code = 400

    def __init__(self, message: str = "amount must be greater than zero"):
        super().__init__(message)


class OverpaymentError(BillingError):
    status_code = 400

    def __init__(self, outstanding):
        super().__init__(f"payment exceeds outstanding amount ({outstanding})")
        self.outstanding = outstanding


class ChargeNotFoundError(BillingError):
    status_code = 404

    def __init__(self, charge_id=None):
        super().__init__("charge not found")
        self.charge_id = charge_id


class ResidentNotFoundError(BillingError):
    status_code = 404

    def __init__(self, resident_id=None):
        super().__init__("resident not found")
        self.resident_id = resident_id
