from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from ..api.serializers import (
    ConversationSerializer,
    MessageSerializer,
    NotificationSerializer,
    OutboxMessageSerializer,
    ThreadMessageSerializer,
)
from ..exceptions import MarketplaceError
from ..models import Message, OutboxMessage, Profile
from ..services.inbox import threads
from ..services.messaging import MessagingService
from ..services.notification import NotificationService
from ..services.outbox import outbox
from . import form_errors

__all__ = [
    "MessageListView",
    "MessageDetailView",
    "MessageReadView",
    "ChatListView",
    "ConversationView",
    "MessageThreadView",
    "MessageThreadRetryView",
    "OutboxView",
    "OutboxRetryView",
    "NotificationListView",
    "NotificationReadView",
    "NotificationReadAllView",
    "BadgeCountsView",
]


class MessagingAPIView(APIView):
    service_class = MessagingService

    def get_service(self) -> MessagingService:
        return self.service_class(self.request.user)


class MessageListView(MessagingAPIView):
    def get(self, request):
        return Response(MessageSerializer(self.get_service().inbox(), many=True).data)

    def post(self, request):
        ok, form, message = self.get_service().send(request.data)
        if not ok:
            return form_errors(form)
        return Response(MessageSerializer(message).data, status=status.HTTP_201_CREATED)


class MessageDetailView(MessagingAPIView):
    def delete(self, request, pk):
        self.get_service().delete(get_object_or_404(Message, pk=pk))
        return Response(status=status.HTTP_204_NO_CONTENT)


class MessageReadView(MessagingAPIView):
    def post(self, request, pk):
        return Response({"updated": self.get_service().mark_read(pk)})


class ChatListView(MessagingAPIView):
    def get(self, request):
        return Response(ConversationSerializer(self.get_service().chat_list(), many=True).data)


class ConversationView(MessagingAPIView):
    def get(self, request, user_id):
        counterpart = get_object_or_404(Profile, pk=user_id)
        return Response(MessageSerializer(self.get_service().conversation(counterpart), many=True).data)

    def post(self, request, user_id):
        counterpart = get_object_or_404(Profile, pk=user_id)
        return Response({"updated": self.get_service().mark_conversation_read(counterpart)})


class MessageThreadView(APIView):
    """Live thread of the signed-in user; POST sends optimistically through it."""

    def get(self, request):
        messages = threads.get(request.user).fetch()
        return Response(ThreadMessageSerializer(messages, many=True).data)

    def post(self, request):
        form = MessagingService(request.user).form(request.data)
        if not form.is_valid():
            return form_errors(form)
        cleaned = form.cleaned_data
        sent = threads.get(request.user).send(
            {
                "receiver": cleaned["receiver"].pk,
                "property": cleaned["property"].pk if cleaned.get("property") else None,
                "content": cleaned.get("content") or "",
                "attachment_url": cleaned.get("attachment_url") or "",
                "attachment_type": cleaned.get("attachment_type") or "",
            }
        )
        return Response(ThreadMessageSerializer(sent).data, status=status.HTTP_201_CREATED)


class MessageThreadRetryView(APIView):
    def post(self, request, temp_id):
        sent = threads.get(request.user).retry(temp_id)
        if sent is None:
            raise MarketplaceError("Only failed messages can be retried.", status_code=409)
        return Response(ThreadMessageSerializer(sent).data)


class OutboxView(APIView):
    """Queued messages of the signed-in user; POST queues a new one."""

    def get(self, request):
        return Response(OutboxMessageSerializer(outbox.pending(request.user), many=True).data)

    def post(self, request):
        form = MessagingService(request.user).form(request.data)
        if not form.is_valid():
            return form_errors(form)
        cleaned = form.cleaned_data
        entry = outbox.enqueue(
            request.user,
            {
                "receiver": cleaned["receiver"].pk,
                "property": cleaned["property"].pk if cleaned.get("property") else None,
                "content": cleaned.get("content") or "",
                "attachment_url": cleaned.get("attachment_url") or "",
                "attachment_type": cleaned.get("attachment_type") or "",
            },
        )
        entry.refresh_from_db()
        return Response(OutboxMessageSerializer(entry).data, status=status.HTTP_201_CREATED)


class OutboxRetryView(APIView):
    def post(self, request, pk):
        entry = get_object_or_404(OutboxMessage, pk=pk, sender=request.user)
        if entry.status != "failed":
            raise MarketplaceError("Only failed messages can be retried.", status_code=409)
        delivered = outbox.retry(entry)
        entry.refresh_from_db()
        return Response({"delivered": delivered, "message": OutboxMessageSerializer(entry).data})


class NotificationListView(APIView):
    def get(self, request):
        unread_only = request.query_params.get("unread") in ("1", "true")
        notifications = NotificationService(request.user).notifications(unread_only=unread_only)
        return Response(NotificationSerializer(notifications, many=True).data)


class NotificationReadView(APIView):
    def post(self, request, pk):
        return Response({"updated": NotificationService(request.user).mark_read(pk)})


class NotificationReadAllView(APIView):
    def post(self, request):
        return Response({"updated": NotificationService(request.user).mark_all_read()})


class BadgeCountsView(APIView):
    def get(self, request):
        counts = NotificationService(request.user).badge_counts()
        return Response(
            {
                "unread_messages": counts.unread_messages,
                "unread_notifications": counts.unread_notifications,
                "pending_reservations": counts.pending_reservations,
            }
        )
