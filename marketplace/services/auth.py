from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta

from django.contrib.auth import login, logout
from django.core.cache import cache
from django.core.mail import send_mail
from django.db import transaction
from django.utils import timezone

from ..exceptions import AuthError, RateLimited
from ..forms import CodeForm, PasswordResetForm, SignUpForm
from ..models import Profile, VerificationCode
from .profile import ProfileSnapshot, fetch_profile

logger = logging.getLogger(__name__)

MAX_FAILED_ATTEMPTS = 5
FAILED_ATTEMPT_WINDOW = 15 * 60
CODE_TTL = timedelta(minutes=15)
MODEL_BACKEND = "django.contrib.auth.backends.ModelBackend"

INVALID_CREDENTIALS = "Invalid email or password. Please check your credentials and try again."
EMAIL_NOT_CONFIRMED = (
    "Please verify your email address before signing in. Check your inbox for a verification email."
)
TOO_MANY_ATTEMPTS = "Too many login attempts. Please wait a few minutes before trying again."
INVALID_CODE = "Invalid or expired verification code."
TOO_MANY_CODE_ATTEMPTS = "Too many invalid codes. Please wait a few minutes and request a new code."

CODE_SUBJECTS = {
    "signup": "Confirm your Propella account",
    "recovery": "Reset your Propella password",
}


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def landing_path(role: str) -> str:
    return "/agent" if role in Profile.AGENT_ROLES else "/user"


@dataclass(frozen=True)
class SignInResult:
    profile: ProfileSnapshot
    redirect_to: str


class AuthService:
    """Email/password authentication and one-time code flows."""

    def __init__(self, request=None):
        self.request = request

    # Sign in / out -----------------------------------------------------
    @staticmethod
    def _attempts_key(email: str, scope: str = "sign-in") -> str:
        return f"auth-failures:{scope}:{email}"

    def _record_failure(self, email: str, scope: str = "sign-in") -> None:
        key = self._attempts_key(email, scope)
        cache.add(key, 0, FAILED_ATTEMPT_WINDOW)
        try:
            cache.incr(key)
        except ValueError:
            cache.set(key, 1, FAILED_ATTEMPT_WINDOW)

    def sign_in(self, email: str, password: str) -> SignInResult:
        email = normalize_email(email)
        if cache.get(self._attempts_key(email), 0) >= MAX_FAILED_ATTEMPTS:
            logger.warning("Sign-in rate limited for %s", email)
            raise RateLimited(TOO_MANY_ATTEMPTS)

        user = Profile.objects.filter(email=email).first()
        if user is None or not user.is_active or not user.check_password(password or ""):
            self._record_failure(email)
            logger.info("Failed sign-in for %s", email)
            raise AuthError(INVALID_CREDENTIALS)
        if not user.email_verified and not user.is_superuser:
            raise AuthError(EMAIL_NOT_CONFIRMED, status_code=403)

        cache.delete(self._attempts_key(email))
        if self.request is not None:
            login(self.request, user, backend=MODEL_BACKEND)
        snapshot = fetch_profile(user.pk, force_refresh=True)
        return SignInResult(profile=snapshot, redirect_to=landing_path(user.role))

    def sign_out(self) -> None:
        if self.request is not None:
            logout(self.request)

    # Sign up -------------------------------------------------------------
    def sign_up(self, data) -> tuple[bool, SignUpForm, Profile | None]:
        form = SignUpForm(data)
        if not form.is_valid():
            return False, form, None
        with transaction.atomic():
            profile = form.save()
            self.issue_code(profile, "signup")
        logger.info("Created %s account %s", profile.role, profile.email)
        return True, form, profile

    # One-time codes --------------------------------------------------------
    def issue_code(self, user: Profile, purpose: str) -> VerificationCode:
        code = VerificationCode.objects.create(
            user=user,
            code=f"{secrets.randbelow(10**6):06d}",
            purpose=purpose,
            expires_at=timezone.now() + CODE_TTL,
        )
        send_mail(
            CODE_SUBJECTS[purpose],
            f"Your Propella code is {code.code}. It expires in 15 minutes.",
            None,
            [user.email],
        )
        return code

    def verify_code(self, email: str, code: str, purpose: str) -> Profile:
        """Consume a one-time code; repeated misses for one email and purpose are rate limited."""
        email = normalize_email(email)
        scope = f"code-{purpose}"
        if cache.get(self._attempts_key(email, scope), 0) >= MAX_FAILED_ATTEMPTS:
            logger.warning("Code checks rate limited for %s (%s)", email, purpose)
            raise RateLimited(TOO_MANY_CODE_ATTEMPTS)

        user = Profile.objects.filter(email=email).first()
        if user is None:
            self._record_failure(email, scope)
            raise AuthError(INVALID_CODE, status_code=400)
        with transaction.atomic():
            record = (
                VerificationCode.objects.select_for_update()
                .filter(user=user, purpose=purpose, code=code, consumed_at__isnull=True)
                .first()
            )
            if record is None or not record.is_usable():
                self._record_failure(email, scope)
                raise AuthError(INVALID_CODE, status_code=400)
            record.consumed_at = timezone.now()
            record.save(update_fields=["consumed_at"])
            if purpose == "signup" and not user.email_verified:
                user.email_verified = True
                user.save(update_fields=["email_verified", "updated_at"])
        cache.delete(self._attempts_key(email, scope))
        return user

    def verify_otp(self, data, purpose: str = "signup") -> tuple[bool, CodeForm, Profile | None]:
        form = CodeForm(data)
        if not form.is_valid():
            return False, form, None
        user = self.verify_code(form.cleaned_data["email"], form.cleaned_data["code"], purpose)
        return True, form, user

    def request_password_reset(self, email: str) -> None:
        user = Profile.objects.filter(email=normalize_email(email), is_active=True).first()
        if user is None:
            logger.info("Password reset requested for unknown address")
            return
        self.issue_code(user, "recovery")

    def reset_password(self, data) -> tuple[bool, PasswordResetForm, Profile | None]:
        form = PasswordResetForm(data)
        if not form.is_valid():
            return False, form, None
        with transaction.atomic():
            user = self.verify_code(form.cleaned_data["email"], form.cleaned_data["code"], "recovery")
            user.set_password(form.cleaned_data["new_password"])
            user.save(update_fields=["password", "updated_at"])
        cache.delete(self._attempts_key(user.email))
        return True, form, user
