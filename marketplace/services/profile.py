from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from dataclasses import asdict, dataclass
from typing import Any

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save

from ..forms import ProfileForm
from ..models import Profile

logger = logging.getLogger(__name__)

PROFILE_CACHE_TTL = 5 * 60
SNAPSHOT_FIELDS = ("id", "email", "full_name", "role", "avatar", "verified")


@dataclass(frozen=True)
class ProfileSnapshot:
    id: int
    email: str
    full_name: str
    role: str
    avatar_url: str | None
    verified: bool

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileSnapshot":
        return cls(
            id=profile.pk,
            email=profile.email,
            full_name=profile.full_name,
            role=profile.role,
            avatar_url=profile.avatar_url,
            verified=profile.verified,
        )

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


class ProfileCache:
    """Short-lived profile snapshots; concurrent loads of one id share a query."""

    def __init__(self, ttl: int = PROFILE_CACHE_TTL):
        self.ttl = ttl
        self._lock = threading.Lock()
        self._in_flight: dict[int, Future] = {}

    @staticmethod
    def key(user_id) -> str:
        return f"profile-snapshot:{user_id}"

    def fetch(self, user_id, force_refresh: bool = False) -> ProfileSnapshot | None:
        if not force_refresh:
            cached = cache.get(self.key(user_id))
            if cached is not None:
                return cached

        with self._lock:
            future = self._in_flight.get(user_id)
            leader = future is None
            if leader:
                future = Future()
                self._in_flight[user_id] = future

        if not leader:
            return future.result()

        try:
            snapshot = self._load(user_id)
        except Exception as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(snapshot)
            return snapshot
        finally:
            with self._lock:
                self._in_flight.pop(user_id, None)

    def _load(self, user_id) -> ProfileSnapshot | None:
        profile = Profile.objects.only(*SNAPSHOT_FIELDS).filter(pk=user_id).first()
        if profile is None:
            logger.warning("Profile %s not found", user_id)
            return None
        snapshot = ProfileSnapshot.from_profile(profile)
        cache.set(self.key(user_id), snapshot, self.ttl)
        return snapshot

    def invalidate(self, user_id) -> None:
        cache.delete(self.key(user_id))


profile_cache = ProfileCache()


def fetch_profile(user_id, force_refresh: bool = False) -> ProfileSnapshot | None:
    return profile_cache.fetch(user_id, force_refresh=force_refresh)


class ProfileService:
    """Self-service profile edits."""

    def __init__(self, user):
        self.user = user

    def form(self, data=None, files=None) -> ProfileForm:
        return ProfileForm(data, files, instance=self.user)

    def update(self, data, files=None) -> tuple[bool, ProfileForm, Profile | None]:
        form = self.form(data, files)
        if form.is_valid():
            profile = form.save()
            return True, form, profile
        return False, form, None


def _invalidate_snapshot(sender, instance, **kwargs):
    profile_cache.invalidate(instance.pk)


def connect_signals() -> None:
    post_save.connect(_invalidate_snapshot, sender=Profile, dispatch_uid="profile-cache-save")
    post_delete.connect(_invalidate_snapshot, sender=Profile, dispatch_uid="profile-cache-delete")
