"""
Email verification endpoints.

Handles sending (and resending) and verifying 6-digit confirmation codes
before signup.
"""

from fastapi import APIRouter, Depends, status

from connect.core.deps import get_verification_service
from connect.schemas.verification import (
    SendCodeRequest,
    SendCodeResponse,
    VerificationData,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from connect.services.verification_service import VerificationService

router = APIRouter(prefix="/users/auth/email", tags=["Email Verification"])


@router.post("/sendconfirmationcode", status_code=status.HTTP_201_CREATED, response_model=SendCodeResponse)
def send_confirmation_code(
    request: SendCodeRequest,
    verification: VerificationService = Depends(get_verification_service)
):
    """
    Email a confirmation code.

    Calling this again for the same email resends the same code and restores
    the attempt counter.

    Raises:
        409: Email already belongs to an account
    """
    verification.request_code(request.email)
    return SendCodeResponse()


@router.post("/verifyconfirmationcode", status_code=status.HTTP_201_CREATED, response_model=VerifyCodeResponse)
def verify_confirmation_code(
    request: VerifyCodeRequest,
    verification: VerificationService = Depends(get_verification_service)
):
    """
    Verify a confirmation code.

    Returns the record id and code, which the client passes to signup.

    Raises:
        400 CODE_MISMATCH: Wrong code, retry allowed
        400 ATTEMPTS_EXHAUSTED: No attempts left, request a new code
        404: No code requested for this email
    """
    snapshot = verification.verify_code(request.email, request.code)
    return VerifyCodeResponse(
        data=VerificationData(
            id=snapshot.id,
            email=snapshot.email,
            code=snapshot.code,
            is_verified=snapshot.is_verified,
        )
    )
