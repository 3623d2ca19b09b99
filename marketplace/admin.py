from django.conf import settings
from django.contrib import admin, messages
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import AuthenticationForm
from django.core.exceptions import ValidationError

from .exceptions import MarketplaceError
from .models import (
    AgentVerification,
    CommissionDispute,
    CommissionPayment,
    Message,
    Notification,
    OutboxMessage,
    Profile,
    Property,
    PropertyReview,
    PropertyView,
    Reservation,
    Transaction,
    Wallet,
    WithdrawalRequest,
)
from .services.commission import refund_commission, release_commission, resolve_dispute
from .services.verification import approve_verification, reject_verification


def has_full_access(user) -> bool:
    if not (user.is_active and user.is_authenticated):
        return False
    email = (user.email or "").lower()
    return user.is_superuser or user.role == "admin" or email in settings.ADMIN_EMAILS


def has_back_office_access(user) -> bool:
    return has_full_access(user) or (user.is_active and user.is_authenticated and user.is_agent)


class BackOfficeAuthenticationForm(AuthenticationForm):
    def confirm_login_allowed(self, user):
        super().confirm_login_allowed(user)
        if not has_back_office_access(user):
            raise ValidationError(
                "This account does not have access to the back office.",
                code="no_back_office_access",
            )


class BackOfficeSite(admin.AdminSite):
    site_header = "Propella back office"
    site_title = "Propella admin"
    index_title = "Marketplace data"
    login_form = BackOfficeAuthenticationForm

    def has_permission(self, request):
        return has_back_office_access(request.user)


back_office = BackOfficeSite(name="admin")


class BackOfficeModelAdmin(admin.ModelAdmin):
    """Everyone with back office access may browse; only full admins may write."""

    list_per_page = 50

    def has_module_permission(self, request):
        return has_back_office_access(request.user)

    def has_view_permission(self, request, obj=None):
        return has_back_office_access(request.user)

    def has_add_permission(self, request):
        return has_full_access(request.user)

    def has_change_permission(self, request, obj=None):
        return has_full_access(request.user)

    def has_delete_permission(self, request, obj=None):
        return has_full_access(request.user)


def _run_action(modeladmin, request, queryset, operation, done_message):
    done = 0
    for obj in queryset:
        try:
            operation(obj)
        except (MarketplaceError, ValueError) as exc:
            modeladmin.message_user(request, f"{obj}: {exc}", level=messages.ERROR)
        else:
            done += 1
    if done:
        modeladmin.message_user(request, done_message.format(count=done), level=messages.SUCCESS)


@admin.register(Profile, site=back_office)
class ProfileAdmin(BackOfficeModelAdmin, BaseUserAdmin):
    list_display = ("email", "full_name", "role", "email_verified", "is_verified_agent", "verification_badge", "created_at")
    list_filter = ("role", "email_verified", "is_verified_agent", "verification_badge", "is_active")
    search_fields = ("email", "full_name", "phone")
    ordering = ("-created_at",)
    fieldsets = BaseUserAdmin.fieldsets + (
        (
            "Marketplace profile",
            {
                "fields": (
                    "full_name",
                    "role",
                    "phone",
                    "avatar",
                    "bio",
                    "location",
                    "email_verified",
                    "verified",
                    "is_verified_agent",
                    "verification_badge",
                )
            },
        ),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Marketplace profile", {"classes": ("wide",), "fields": ("email", "full_name", "role")}),
    )


@admin.register(Property, site=back_office)
class PropertyAdmin(BackOfficeModelAdmin):
    list_display = ("title", "owner", "type", "category", "price", "status", "is_featured", "view_count", "created_at")
    list_filter = ("type", "category", "status", "is_featured", "verification_status")
    search_fields = ("title", "location", "owner__email", "owner__full_name")
    list_select_related = ("owner",)


@admin.register(Reservation, site=back_office)
class ReservationAdmin(BackOfficeModelAdmin):
    list_display = ("id", "property", "user", "reservation_date", "status", "payment_status", "refund_status", "created_at")
    list_filter = ("status", "payment_status", "refund_status")
    search_fields = ("property__title", "user__email", "transaction_id", "refund_number")
    list_select_related = ("property", "user")


@admin.register(Transaction, site=back_office)
class TransactionAdmin(BackOfficeModelAdmin):
    list_display = ("reference", "user", "type", "amount", "status", "created_at")
    list_filter = ("type", "status")
    search_fields = ("reference", "user__email", "description")


@admin.register(Wallet, site=back_office)
class WalletAdmin(BackOfficeModelAdmin):
    list_display = ("user", "balance", "currency", "updated_at")
    search_fields = ("user__email",)


@admin.register(WithdrawalRequest, site=back_office)
class WithdrawalRequestAdmin(BackOfficeModelAdmin):
    list_display = ("id", "user", "amount", "service", "phone", "status", "gateway_reference", "requested_at")
    list_filter = ("status", "service")
    search_fields = ("user__email", "phone", "gateway_reference")


@admin.register(Message, site=back_office)
class MessageAdmin(BackOfficeModelAdmin):
    list_display = ("id", "sender", "receiver", "property", "read", "created_at")
    list_filter = ("read",)
    search_fields = ("content", "sender__email", "receiver__email")


@admin.register(OutboxMessage, site=back_office)
class OutboxMessageAdmin(BackOfficeModelAdmin):
    list_display = ("id", "sender", "receiver", "status", "sync_attempts", "created_at")
    list_filter = ("status",)
    search_fields = ("content", "sender__email")


@admin.register(Notification, site=back_office)
class NotificationAdmin(BackOfficeModelAdmin):
    list_display = ("title", "user", "type", "read", "created_at")
    list_filter = ("type", "read")
    search_fields = ("title", "body", "user__email")


@admin.register(PropertyReview, site=back_office)
class PropertyReviewAdmin(BackOfficeModelAdmin):
    list_display = ("property", "user", "rating", "created_at")
    list_filter = ("rating",)
    search_fields = ("property__title", "user__email", "comment")


@admin.register(PropertyView, site=back_office)
class PropertyViewAdmin(BackOfficeModelAdmin):
    list_display = ("property", "viewer", "source", "device_type", "platform", "created_at")
    list_filter = ("source", "device_type", "platform")
    search_fields = ("property__title", "session_id")


@admin.register(CommissionPayment, site=back_office)
class CommissionPaymentAdmin(BackOfficeModelAdmin):
    list_display = ("id", "property", "user", "agent", "amount", "agent_amount", "status", "escrow_status", "release_date")
    list_filter = ("status", "escrow_status", "payment_method")
    search_fields = ("payment_reference", "user__email", "agent__email", "property__title")
    actions = ("release_selected", "refund_selected")

    @admin.action(description="Release selected commissions to the agent")
    def release_selected(self, request, queryset):
        if not has_full_access(request.user):
            self.message_user(request, "You cannot release commissions.", level=messages.ERROR)
            return
        _run_action(self, request, queryset, release_commission, "{count} commission(s) released.")

    @admin.action(description="Refund selected commissions to the payer")
    def refund_selected(self, request, queryset):
        if not has_full_access(request.user):
            self.message_user(request, "You cannot refund commissions.", level=messages.ERROR)
            return
        _run_action(self, request, queryset, refund_commission, "{count} commission(s) refunded.")


@admin.register(CommissionDispute, site=back_office)
class CommissionDisputeAdmin(BackOfficeModelAdmin):
    list_display = ("id", "commission_payment", "reported_by", "dispute_type", "status", "created_at")
    list_filter = ("status", "dispute_type")
    search_fields = ("description", "reported_by__email")
    actions = ("resolve_selected", "reject_selected")

    def _close(self, request, queryset, status):
        if not has_full_access(request.user):
            self.message_user(request, "You cannot resolve disputes.", level=messages.ERROR)
            return
        _run_action(
            self,
            request,
            queryset.filter(status="open"),
            lambda dispute: resolve_dispute(
                dispute,
                status,
                dispute.resolution or f"Dispute {status} by the back office.",
                request.user,
            ),
            "{count} dispute(s) " + status + ".",
        )

    @admin.action(description="Mark selected disputes resolved")
    def resolve_selected(self, request, queryset):
        self._close(request, queryset, "resolved")

    @admin.action(description="Reject selected disputes")
    def reject_selected(self, request, queryset):
        self._close(request, queryset, "rejected")


@admin.register(AgentVerification, site=back_office)
class AgentVerificationAdmin(BackOfficeModelAdmin):
    list_display = ("agent", "business_name", "verification_status", "verification_fee_paid", "verified_at")
    list_filter = ("verification_status", "verification_fee_paid")
    search_fields = ("agent__email", "business_name")
    actions = ("approve_selected", "reject_selected")

    @admin.action(description="Approve selected verifications")
    def approve_selected(self, request, queryset):
        if not has_full_access(request.user):
            self.message_user(request, "You cannot approve verifications.", level=messages.ERROR)
            return
        _run_action(
            self,
            request,
            queryset.select_related("agent"),
            lambda verification: approve_verification(verification, request.user, verification.admin_notes),
            "{count} verification(s) approved.",
        )

    @admin.action(description="Reject selected verifications")
    def reject_selected(self, request, queryset):
        if not has_full_access(request.user):
            self.message_user(request, "You cannot reject verifications.", level=messages.ERROR)
            return
        _run_action(
            self,
            request,
            queryset.select_related("agent"),
            lambda verification: reject_verification(
                verification,
                request.user,
                verification.rejection_reason or "Documents could not be verified.",
                verification.admin_notes,
            ),
            "{count} verification(s) rejected.",
        )
