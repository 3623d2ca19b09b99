"""Messaging and notification endpoints."""

from django.urls import path

from ..views import messaging

urlpatterns = [
    path("api/messages/", messaging.MessageListView.as_view(), name="messages"),
    path("api/messages/chats/", messaging.ChatListView.as_view(), name="message_chats"),
    path("api/messages/thread/", messaging.MessageThreadView.as_view(), name="message_thread"),
    path(
        "api/messages/thread/<str:temp_id>/retry/",
        messaging.MessageThreadRetryView.as_view(),
        name="message_thread_retry",
    ),
    path("api/messages/with/<int:user_id>/", messaging.ConversationView.as_view(), name="message_conversation"),
    path("api/messages/<int:pk>/", messaging.MessageDetailView.as_view(), name="message_detail"),
    path("api/messages/<int:pk>/read/", messaging.MessageReadView.as_view(), name="message_read"),
    path("api/outbox/", messaging.OutboxView.as_view(), name="outbox"),
    path("api/outbox/<uuid:pk>/retry/", messaging.OutboxRetryView.as_view(), name="outbox_retry"),
    path("api/notifications/", messaging.NotificationListView.as_view(), name="notifications"),
    path(
        "api/notifications/read-all/",
        messaging.NotificationReadAllView.as_view(),
        name="notifications_read_all",
    ),
    path(
        "api/notifications/<int:pk>/read/",
        messaging.NotificationReadView.as_view(),
        name="notification_read",
    ),
    path("api/badges/", messaging.BadgeCountsView.as_view(), name="badge_counts"),
]
