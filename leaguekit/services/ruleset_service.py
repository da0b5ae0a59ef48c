"""
RuleSet administration: sports and rule sets are created and edited by admins.
Every config write goes through rules.validate() and stores the canonical JSON.
"""
from __future__ import annotations

import logging
import sqlite3
from collections.abc import Mapping
from typing import Any

from leaguekit.models import RuleSet, Sport
from leaguekit.persistence.repositories import RuleSetRepository, SportRepository, UserRepository
from leaguekit.rules import RuleSetConfig, parse_stored_config, validate
from leaguekit.services.errors import DUPLICATE, FORBIDDEN, INVALID, NOT_FOUND, RuleSetError

logger = logging.getLogger(__name__)

ConfigInput = str | bytes | Mapping[str, Any] | RuleSetConfig


class RuleSetService:
    """Admin-only writes; reads are open."""

    def __init__(self) -> None:
        self._user_repo = UserRepository()
        self._sport_repo = SportRepository()
        self._rule_set_repo = RuleSetRepository()

    def _require_admin(self, conn: sqlite3.Connection, user_id: str | None) -> None:
        user = self._user_repo.get(conn, user_id) if user_id else None
        if user is None or not user.is_admin:
            raise RuleSetError(FORBIDDEN, "Admin role required")

    def create_sport(
        self,
        conn: sqlite3.Connection,
        user_id: str | None,
        slug: str,
        name: str,
        description: str | None = None,
    ) -> Sport:
        self._require_admin(conn, user_id)
        slug = slug.strip().lower()
        name = name.strip()
        if not slug or not name:
            raise RuleSetError(INVALID, "slug and name are required")
        try:
            return self._sport_repo.create(conn, slug, name, (description or "").strip() or None)
        except sqlite3.IntegrityError:
            conn.rollback()
            raise RuleSetError(DUPLICATE, f"Sport slug already exists: {slug}") from None

    def create_rule_set(
        self,
        conn: sqlite3.Connection,
        user_id: str | None,
        sport_id: str,
        slug: str,
        name: str,
        config: ConfigInput,
        description: str | None = None,
    ) -> RuleSet:
        """Raises ConfigError for a bad config; nothing is written in that case."""
        self._require_admin(conn, user_id)
        slug = slug.strip().lower()
        name = name.strip()
        if not slug or not name:
            raise RuleSetError(INVALID, "slug and name are required")
        if self._sport_repo.get(conn, sport_id) is None:
            raise RuleSetError(NOT_FOUND, f"Sport not found: {sport_id}")
        validated = validate(config)
        try:
            rule_set = self._rule_set_repo.create(
                conn, sport_id, slug, name, validated.to_json(),
                description=(description or "").strip() or None,
            )
        except sqlite3.IntegrityError:
            conn.rollback()
            raise RuleSetError(DUPLICATE, f"RuleSet slug already exists: {slug}") from None
        logger.info("Created rule set %s (%s)", rule_set.slug, rule_set.id)
        return rule_set

    def update_rule_set(
        self,
        conn: sqlite3.Connection,
        user_id: str | None,
        rule_set_id: str,
        name: str,
        config: ConfigInput,
        description: str | None = None,
    ) -> RuleSet:
        """
        Replace name, description and config. Leagues reference the rule set,
        so edits apply to them from the next derivation on.
        """
        self._require_admin(conn, user_id)
        existing = self._rule_set_repo.get(conn, rule_set_id)
        if existing is None:
            raise RuleSetError(NOT_FOUND, f"RuleSet not found: {rule_set_id}")
        name = name.strip()
        if not name:
            raise RuleSetError(INVALID, "name is required")
        validated = validate(config)
        in_use = self._rule_set_repo.count_leagues(conn, rule_set_id)
        if in_use and validated.to_json() != existing.config:
            logger.warning(
                "RuleSet %s edited while referenced by %d league(s); existing schedules and lineups keep their shape",
                existing.slug, in_use,
            )
        self._rule_set_repo.update(
            conn, rule_set_id, name, (description or "").strip() or None, validated.to_json()
        )
        updated = self._rule_set_repo.get(conn, rule_set_id)
        assert updated is not None
        return updated

    def get_rule_set(self, conn: sqlite3.Connection, rule_set_id: str) -> RuleSet:
        rule_set = self._rule_set_repo.get(conn, rule_set_id)
        if rule_set is None:
            raise RuleSetError(NOT_FOUND, f"RuleSet not found: {rule_set_id}")
        return rule_set

    def get_config(self, conn: sqlite3.Connection, rule_set_id: str) -> RuleSetConfig:
        return parse_stored_config(self.get_rule_set(conn, rule_set_id).config)
