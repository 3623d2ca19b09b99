"""Authentication and profile endpoints."""

from django.urls import path

from ..views import auth

urlpatterns = [
    path("api/auth/sign-in/", auth.SignInView.as_view(), name="auth_sign_in"),
    path("api/auth/sign-out/", auth.SignOutView.as_view(), name="auth_sign_out"),
    path("api/auth/sign-up/", auth.SignUpView.as_view(), name="auth_sign_up"),
    path("api/auth/verify/", auth.VerifyCodeView.as_view(), name="auth_verify"),
    path("api/auth/password-reset/", auth.PasswordResetRequestView.as_view(), name="auth_password_reset"),
    path(
        "api/auth/password-reset/confirm/",
        auth.PasswordResetConfirmView.as_view(),
        name="auth_password_reset_confirm",
    ),
    path("api/auth/me/", auth.CurrentUserView.as_view(), name="auth_me"),
    path("api/profiles/<int:user_id>/", auth.ProfileSnapshotView.as_view(), name="profile_snapshot"),
]
