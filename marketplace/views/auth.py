from rest_framework import status
from rest_framework.generics import RetrieveAPIView
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from ..api.serializers import ProfileSerializer
from ..exceptions import MarketplaceError
from ..services.auth import AuthService
from ..services.inbox import threads
from ..services.profile import ProfileService, fetch_profile
from . import form_errors

__all__ = [
    "SignInView",
    "SignOutView",
    "SignUpView",
    "VerifyCodeView",
    "PasswordResetRequestView",
    "PasswordResetConfirmView",
    "CurrentUserView",
    "ProfileSnapshotView",
]


class AuthAPIView(APIView):
    permission_classes = [AllowAny]
    service_class = AuthService

    def get_service(self) -> AuthService:
        return self.service_class(self.request)


class SignInView(AuthAPIView):
    def post(self, request):
        result = self.get_service().sign_in(request.data.get("email"), request.data.get("password"))
        return Response({"profile": result.profile.as_dict(), "redirect_to": result.redirect_to})


class SignOutView(AuthAPIView):
    def post(self, request):
        if request.user.is_authenticated:
            threads.close(request.user)
        self.get_service().sign_out()
        return Response(status=status.HTTP_204_NO_CONTENT)


class SignUpView(AuthAPIView):
    def post(self, request):
        ok, form, profile = self.get_service().sign_up(request.data)
        if not ok:
            return form_errors(form)
        return Response(
            {"id": profile.pk, "email": profile.email, "message": "Check your email for a verification code."},
            status=status.HTTP_201_CREATED,
        )


class VerifyCodeView(AuthAPIView):
    def post(self, request):
        purpose = request.data.get("purpose") or "signup"
        if purpose not in ("signup", "recovery"):
            raise MarketplaceError("Unknown verification purpose.")
        ok, form, profile = self.get_service().verify_otp(request.data, purpose)
        if not ok:
            return form_errors(form)
        return Response({"verified": True, "email": profile.email})


class PasswordResetRequestView(AuthAPIView):
    def post(self, request):
        self.get_service().request_password_reset(request.data.get("email"))
        return Response({"message": "If an account exists for this email, a reset code has been sent."})


class PasswordResetConfirmView(AuthAPIView):
    def post(self, request):
        ok, form, _ = self.get_service().reset_password(request.data)
        if not ok:
            return form_errors(form)
        return Response({"message": "Your password has been updated. You can now sign in."})


class CurrentUserView(RetrieveAPIView):
    """Return or update the authenticated user's profile."""

    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_object(self):
        return self.request.user

    def patch(self, request):
        ok, form, profile = ProfileService(request.user).update(request.data, request.FILES)
        if not ok:
            return form_errors(form)
        return Response(self.get_serializer(profile).data)


class ProfileSnapshotView(APIView):
    def get(self, request, user_id):
        snapshot = fetch_profile(user_id, force_refresh=request.query_params.get("refresh") == "1")
        if snapshot is None:
            return Response({"error": "Profile not found."}, status=status.HTTP_404_NOT_FOUND)
        return Response(snapshot.as_dict())
