"""
Placement Consent Routes (students and placement representatives)

GET  /placement-consent/policy      - Placement policy text
POST /placement-consent/consent     - Agree to the policy with a signed upload
POST /placement-consent/verify-otp  - Verify the emailed OTP
POST /placement-consent/resend-otp  - Send a fresh OTP
GET  /placement-consent/status      - Profile / consent / OTP flags

Handlers are plain `def`: OTP mail goes out over blocking SMTP, so they
run in the threadpool like the job drive routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from placement_portal.core.auth import get_current_candidate
from placement_portal.core.clock import utcnow
from placement_portal.core.config import get_settings
from placement_portal.core.errors import PlacementError
from placement_portal.models.user import User
from placement_portal.schemas.schemas import (
    ConsentResponse, ConsentStatusResponse, PolicyResponse, ResendOtpResponse,
    VerifyOtpRequest, VerifyOtpResponse,
)
from placement_portal.services.consent_service import ConsentService, get_consent_service, mask_email
from placement_portal.services.profile_normalizer import is_profile_complete
from placement_portal.utils.file_upload import discard_signature, save_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/placement-consent", tags=["Placement Consent"])

POLICY_TITLE = "Government College of Technology - Placement Policy"
POLICY_CONTENT = """PLACEMENT POLICY AND CONDITIONS

1. GENERAL CONDITIONS
- Students must maintain minimum CGPA requirements throughout the placement process
- Students are expected to attend all placement activities punctually
- Professional behavior is mandatory during all interactions with recruiters

2. ELIGIBILITY CRITERIA
- Minimum CGPA as specified by individual companies
- No current backlogs (unless specified otherwise by company)
- Completion of all academic requirements

3. PLACEMENT PROCESS
- Students can apply to multiple companies based on eligibility
- Once selected by a company, students must honor the commitment
- Students cannot withdraw after accepting an offer without valid reasons

4. RESPONSIBILITIES
- Maintain confidentiality of company information
- Represent the college with dignity and professionalism
- Follow all guidelines provided by the placement cell

5. COMPLIANCE
- Violation of any policy may result in disqualification from placement activities
- The placement cell reserves the right to modify policies as needed
- Students must keep their profiles updated with accurate information

By agreeing to this policy, you confirm that you understand and will comply with all the above conditions."""


@router.get("/policy", response_model=PolicyResponse)
def get_policy(user: User = Depends(get_current_candidate)):
    return PolicyResponse(title=POLICY_TITLE, content=POLICY_CONTENT, last_updated=utcnow())


@router.post("/consent", response_model=ConsentResponse)
def submit_consent(
    request: Request,
    has_agreed: bool = Form(...),
    signature: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_candidate),
    service: ConsentService = Depends(get_consent_service),
):
    """
    Record agreement to the placement policy.

    The signature file is stored first; the consent record keeps its
    filename, and the file is removed again if the record is not saved.
    An OTP is then emailed for verification.
    """
    settings = get_settings()
    signature_ref = None
    if has_agreed and is_profile_complete(user.profile):
        signature_ref = save_signature(signature, user.id, settings)

    try:
        updated = service.record_consent(
            user.id,
            has_agreed,
            signature_ref,
            ip_address=request.client.host if request.client else None,
            user_agent=request.headers.get("user-agent"),
        )
    except PlacementError:
        if signature_ref:
            discard_signature(signature_ref, settings)
        raise
    return ConsentResponse(
        message="Consent recorded. Please verify the OTP sent to your email.",
        email=mask_email(updated.email),
    )


@router.post("/verify-otp", response_model=VerifyOtpResponse)
def verify_otp(
    payload: VerifyOtpRequest,
    user: User = Depends(get_current_candidate),
    service: ConsentService = Depends(get_consent_service),
):
    service.verify_otp(user.id, payload.otp_code.strip())
    logger.info("Placement OTP verified for %s", user.id)
    return VerifyOtpResponse(message="OTP verified successfully", verified=True)


@router.post("/resend-otp", response_model=ResendOtpResponse)
def resend_otp(
    user: User = Depends(get_current_candidate),
    service: ConsentService = Depends(get_consent_service),
):
    remaining = service.resend_otp(user.id)
    return ResendOtpResponse(
        message="OTP resent successfully", email=mask_email(user.email), remaining_resends=remaining
    )


@router.get("/status", response_model=ConsentStatusResponse)
def consent_status(
    user: User = Depends(get_current_candidate),
    service: ConsentService = Depends(get_consent_service),
):
    return ConsentStatusResponse(**service.status(user.id))
