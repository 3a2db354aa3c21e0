"""Index reconciliation.

Writes touch several keys without a transaction, so a crash can leave an
index pointing at a document that no longer exists. Reads already skip such
ids; this sweep removes them.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import StrEnum

from redis import Redis

logger = logging.getLogger(__name__)


class IndexKind(StrEnum):
    SET = "set"
    ZSET = "zset"
    LIST = "list"
    POINTER = "pointer"  # plain string key holding one id


@dataclass(frozen=True)
class IndexSpec:
    """One family of index keys and how to find the document behind a member.

    ``target`` receives the member and the index key it was found in.
    """

    name: str
    pattern: str
    kind: IndexKind
    target: Callable[[str, str], str]


def _suffix(index_key: str, parts: int) -> list[str]:
    return index_key.split(":")[-parts:]


INDEXES: tuple[IndexSpec, ...] = (
    IndexSpec("clients", "clients:index", IndexKind.SET, lambda m, _: f"client:{m}"),
    IndexSpec("client-emails", "clients:email:*", IndexKind.POINTER, lambda m, _: f"client:{m}"),
    IndexSpec("pets", "pets:index", IndexKind.SET, lambda m, _: f"pet:{m}"),
    IndexSpec("client-pets", "pets:client:*", IndexKind.SET, lambda m, _: f"pet:{m}"),
    IndexSpec(
        "appointments", "appointments:list", IndexKind.ZSET, lambda m, _: f"appointment:{m}"
    ),
    IndexSpec(
        "client-appointments",
        "appointments:client:*",
        IndexKind.SET,
        lambda m, _: f"appointment:{m}",
    ),
    IndexSpec(
        "health-records", "health-records:index", IndexKind.SET, lambda m, _: f"health-record:{m}"
    ),
    IndexSpec(
        "pet-health-records",
        "health-records:pet:*",
        IndexKind.ZSET,
        lambda m, _: f"health-record:{m}",
    ),
    IndexSpec("posts", "posts:list", IndexKind.LIST, lambda m, _: f"post:{m}"),
    IndexSpec("post-slugs", "posts:slug:*", IndexKind.POINTER, lambda m, _: f"post:{m}"),
    IndexSpec("contacts", "contacts:list", IndexKind.ZSET, lambda m, _: f"contact:{m}"),
    IndexSpec("redirects", "redirects:index", IndexKind.SET, lambda m, _: f"redirect:{m}"),
    IndexSpec(
        "redirect-sources", "redirects:source:*", IndexKind.POINTER, lambda m, _: f"redirect:{m}"
    ),
    IndexSpec("seo-pages", "seo-pages:index", IndexKind.SET, lambda m, _: f"seo-page:{m}"),
    IndexSpec(
        "seo-page-paths", "seo-pages:path:*", IndexKind.POINTER, lambda m, _: f"seo-page:{m}"
    ),
    IndexSpec(
        "email-templates",
        "email-templates:index",
        IndexKind.SET,
        lambda m, _: f"email-template:{m}",
    ),
    IndexSpec(
        "client-consents",
        "client-consents:*",
        IndexKind.SET,
        lambda m, _: f"consent-acceptance:{m}",
    ),
    IndexSpec(
        "pet-consents", "pet-consents:*", IndexKind.SET, lambda m, _: f"consent-acceptance:{m}"
    ),
    IndexSpec(
        "onboarding",
        "onboarding-index:*",
        IndexKind.SET,
        lambda m, key: f"onboarding-status:{_suffix(key, 1)[0]}:{m}",
    ),
)


@dataclass
class ReconcileReport:
    dry_run: bool
    removed: dict[str, int] = field(default_factory=dict)
    scanned: dict[str, int] = field(default_factory=dict)

    @property
    def total_removed(self) -> int:
        return sum(self.removed.values())


class IndexReconciler:
    """Drops index members whose primary document is missing."""

    def __init__(
        self,
        redis: Redis,  # type: ignore[type-arg]
        indexes: tuple[IndexSpec, ...] = INDEXES,
    ) -> None:
        self.redis = redis
        self.indexes = indexes

    def _index_keys(self, index: IndexSpec) -> list[str]:
        if "*" not in index.pattern:
            return [index.pattern]
        return sorted(self.redis.scan_iter(match=index.pattern))

    def _members(self, index: IndexSpec, key: str) -> list[str]:
        if index.kind == IndexKind.SET:
            return sorted(self.redis.smembers(key))
        if index.kind == IndexKind.ZSET:
            return list(self.redis.zrange(key, 0, -1))
        if index.kind == IndexKind.LIST:
            return list(dict.fromkeys(self.redis.lrange(key, 0, -1)))
        value = self.redis.get(key)
        return [value] if value else []

    def _remove(self, index: IndexSpec, key: str, member: str) -> None:
        if index.kind == IndexKind.SET:
            self.redis.srem(key, member)
        elif index.kind == IndexKind.ZSET:
            self.redis.zrem(key, member)
        elif index.kind == IndexKind.LIST:
            self.redis.lrem(key, 0, member)
        else:
            self.redis.delete(key)

    def reconcile(self, dry_run: bool = False) -> ReconcileReport:
        """Scan every index and drop members whose document is gone.

        Args:
            dry_run: Only count what would be removed

        Returns:
            Scanned and removed counts per index family
        """
        report = ReconcileReport(dry_run=dry_run)
        for index in self.indexes:
            scanned = removed = 0
            for key in self._index_keys(index):
                for member in self._members(index, key):
                    scanned += 1
                    if self.redis.exists(index.target(member, key)):
                        continue
                    removed += 1
                    if not dry_run:
                        self._remove(index, key, member)
            report.scanned[index.name] = scanned
            report.removed[index.name] = removed
            if removed:
                logger.info(
                    "Dangling index entries",
                    extra={"index": index.name, "count": removed, "dry_run": dry_run},
                )
        return report
