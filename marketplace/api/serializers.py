from rest_framework import serializers

from ..models import (
    AgentVerification,
    CommissionDispute,
    CommissionPayment,
    Message,
    Notification,
    OutboxMessage,
    Profile,
    Property,
    PropertyReview,
    Reservation,
    Transaction,
    Wallet,
    WithdrawalRequest,
)


class ProfileSerializer(serializers.ModelSerializer):
    """The signed-in user's own profile."""

    avatar_url = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = (
            "id",
            "email",
            "full_name",
            "role",
            "phone",
            "avatar_url",
            "bio",
            "location",
            "verified",
            "is_verified_agent",
            "verification_badge",
            "average_rating",
            "total_reviews",
            "created_at",
        )
        read_only_fields = fields

    def get_avatar_url(self, obj):
        if not obj.avatar:
            return None
        request = self.context.get("request")
        avatar_url = obj.avatar.url
        if request is None:
            return avatar_url
        return request.build_absolute_uri(avatar_url)


class OwnerSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ("id", "full_name", "email", "role", "phone", "verification_badge", "is_verified_agent")
        read_only_fields = fields


class PropertySerializer(serializers.ModelSerializer):
    """Listing as shown to browsers: first image, verification flag and owner summary."""

    image = serializers.CharField(source="primary_image", read_only=True)
    is_verified = serializers.BooleanField(source="owner_is_verified", read_only=True)
    owner = OwnerSummarySerializer(read_only=True)

    class Meta:
        model = Property
        fields = (
            "id",
            "title",
            "description",
            "price",
            "location",
            "latitude",
            "longitude",
            "type",
            "property_type",
            "category",
            "bedrooms",
            "bathrooms",
            "area",
            "amenities",
            "images",
            "image",
            "status",
            "reservation_fee",
            "rent_period",
            "advance_months_min",
            "advance_months_max",
            "is_featured",
            "verification_status",
            "view_count",
            "average_rating",
            "total_reviews",
            "is_verified",
            "owner",
            "created_at",
            "updated_at",
        )
        read_only_fields = fields


class ReservationSerializer(serializers.ModelSerializer):
    property = PropertySerializer(read_only=True)
    user = OwnerSummarySerializer(read_only=True)

    class Meta:
        model = Reservation
        fields = (
            "id",
            "property",
            "user",
            "reservation_date",
            "reservation_time",
            "status",
            "amount",
            "reservation_fee",
            "transaction_id",
            "payment_status",
            "paid_at",
            "notes",
            "cancellation_reason",
            "refund_requested",
            "refund_status",
            "refund_number",
            "created_at",
        )
        read_only_fields = fields


class WalletSerializer(serializers.ModelSerializer):
    class Meta:
        model = Wallet
        fields = ("balance", "currency", "updated_at")
        read_only_fields = fields


class TransactionSerializer(serializers.ModelSerializer):
    class Meta:
        model = Transaction
        fields = ("id", "amount", "type", "status", "reference", "description", "property", "created_at", "updated_at")
        read_only_fields = fields


class WithdrawalRequestSerializer(serializers.ModelSerializer):
    class Meta:
        model = WithdrawalRequest
        fields = (
            "id",
            "amount",
            "phone",
            "service",
            "status",
            "gateway_reference",
            "failure_reason",
            "requested_at",
            "processed_at",
        )
        read_only_fields = fields


class MessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = Message
        fields = (
            "id",
            "sender",
            "receiver",
            "property",
            "content",
            "attachment_url",
            "attachment_type",
            "voice_url",
            "reply_to",
            "read",
            "created_at",
        )
        read_only_fields = fields


class ConversationSerializer(serializers.Serializer):
    counterpart = OwnerSummarySerializer(read_only=True)
    last_message = MessageSerializer(read_only=True)
    unread = serializers.BooleanField(read_only=True)
    unread_count = serializers.IntegerField(read_only=True)


class ThreadMessageSerializer(serializers.Serializer):
    id = serializers.ReadOnlyField()
    temp_id = serializers.CharField(read_only=True, allow_null=True)
    sender = serializers.IntegerField(source="sender_id", read_only=True)
    receiver = serializers.IntegerField(source="receiver_id", read_only=True)
    property = serializers.IntegerField(source="property_id", read_only=True, allow_null=True)
    content = serializers.CharField(read_only=True)
    attachment_url = serializers.CharField(read_only=True)
    attachment_type = serializers.CharField(read_only=True)
    status = serializers.CharField(read_only=True)
    is_optimistic = serializers.BooleanField(read_only=True)
    read = serializers.BooleanField(read_only=True)
    created_at = serializers.DateTimeField(read_only=True)


class OutboxMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = OutboxMessage
        fields = ("id", "receiver", "property", "content", "status", "is_local", "server_message", "sync_attempts", "created_at")
        read_only_fields = fields


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ("id", "title", "body", "type", "data", "read", "created_at")
        read_only_fields = fields


class ReviewSerializer(serializers.ModelSerializer):
    user = OwnerSummarySerializer(read_only=True)

    class Meta:
        model = PropertyReview
        fields = ("id", "property", "user", "reservation", "rating", "comment", "created_at")
        read_only_fields = fields


class CommissionPaymentSerializer(serializers.ModelSerializer):
    class Meta:
        model = CommissionPayment
        fields = (
            "id",
            "user",
            "agent",
            "property",
            "reservation",
            "amount",
            "platform_fee",
            "agent_amount",
            "status",
            "escrow_status",
            "payment_method",
            "payment_reference",
            "release_conditions",
            "release_date",
            "paid_at",
            "released_at",
            "created_at",
        )
        read_only_fields = fields


class CommissionDisputeSerializer(serializers.ModelSerializer):
    class Meta:
        model = CommissionDispute
        fields = ("id", "commission_payment", "reported_by", "dispute_type", "description", "status", "resolution", "created_at")
        read_only_fields = fields


class AgentVerificationSerializer(serializers.ModelSerializer):
    missing_documents = serializers.SerializerMethodField()

    class Meta:
        model = AgentVerification
        fields = (
            "id",
            "business_name",
            "business_address",
            "years_of_experience",
            "specializations",
            *AgentVerification.DOCUMENT_FIELDS,
            "verification_status",
            "verification_fee_amount",
            "verification_fee_paid",
            "rejection_reason",
            "verified_at",
            "missing_documents",
        )
        read_only_fields = fields

    def get_missing_documents(self, obj):
        return obj.missing_documents()
