from __future__ import annotations

import unittest

from bolao.models import Subscriber, SubscriberStatus
from bolao.repositories.draw_repository import DrawRepository
from bolao.repositories.game_repository import GameRepository
from bolao.repositories.pool_repository import PoolRepository
from bolao.repositories.subscriber_repository import SubscriberRepository
from tests.fakes import memory_session_factory

NUMBERS = ["04", "08", "15", "16", "23", "42"]


class RepositoryTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, self.Session = memory_session_factory()
        self.pools = PoolRepository()
        self.draws = DrawRepository()
        self.games = GameRepository()
        self.subscribers = SubscriberRepository()

    def tearDown(self) -> None:
        self.engine.dispose()

    def _pool(self, session, pool_id: str, draw_number: int):
        return self.pools.create(
            session, pool_id=pool_id, name=None, draw_number=draw_number, edit_token="t" * 32
        )


class DrawUpsertTests(RepositoryTestCase):
    def test_second_identical_upsert_changes_nothing(self) -> None:
        with self.Session.begin() as session:
            self.draws.upsert_draw(session, number=100, numbers=NUMBERS, draw_date="01/02/2025")

        with self.Session() as session:
            stamp = self.draws.get_draw(session, 100).updated_at

        with self.Session.begin() as session:
            again = self.draws.upsert_draw(session, number=100, numbers=NUMBERS, draw_date="01/02/2025")
            self.assertEqual(again.updated_at, stamp)
            self.assertEqual(again.numbers, NUMBERS)

    def test_corrected_result_overwrites(self) -> None:
        with self.Session.begin() as session:
            self.draws.upsert_draw(session, number=100, numbers=NUMBERS, draw_date="01/02/2025")

        corrected = ["01", "08", "15", "16", "23", "42"]
        with self.Session.begin() as session:
            self.draws.upsert_draw(session, number=100, numbers=corrected, draw_date="02/02/2025")

        with self.Session() as session:
            draw = self.draws.get_draw(session, 100)
            self.assertEqual(draw.numbers, corrected)
            self.assertEqual(draw.draw_date, "02/02/2025")
            self.assertEqual(len(self.draws.list_all(session)), 1)


class PendingPoolTests(RepositoryTestCase):
    def test_pending_numbers_exclude_resolved_draws(self) -> None:
        with self.Session.begin() as session:
            self._pool(session, "aaaaaaaaaa", 100)
            self._pool(session, "bbbbbbbbbb", 100)
            self._pool(session, "cccccccccc", 101)
            self.draws.upsert_draw(session, number=101, numbers=NUMBERS, draw_date="x")

        with self.Session() as session:
            self.assertEqual(self.pools.list_pending_draw_numbers(session), [100])
            self.assertTrue(self.pools.has_pending(session))
            missing = {p.id for p in self.pools.list_pools_missing_draw(session)}
            self.assertEqual(missing, {"aaaaaaaaaa", "bbbbbbbbbb"})

    def test_nothing_pending_once_every_draw_is_stored(self) -> None:
        with self.Session.begin() as session:
            self._pool(session, "aaaaaaaaaa", 100)
            self.draws.upsert_draw(session, number=100, numbers=NUMBERS, draw_date="x")

        with self.Session() as session:
            self.assertFalse(self.pools.has_pending(session))
            self.assertEqual(self.pools.list_pending_draw_numbers(session), [])


class GameRepositoryTests(RepositoryTestCase):
    def test_games_listed_newest_first(self) -> None:
        with self.Session.begin() as session:
            self._pool(session, "aaaaaaaaaa", 100)
            self.games.add_many(session, "aaaaaaaaaa", [NUMBERS, ["01", "02", "03", "04", "05", "06"]])

        with self.Session() as session:
            games = self.games.list_games(session, "aaaaaaaaaa")
            self.assertEqual([g.numbers[0] for g in games], ["01", "04"])


class SubscriberRepositoryTests(RepositoryTestCase):
    def test_resubscribe_resets_state(self) -> None:
        with self.Session.begin() as session:
            self._pool(session, "aaaaaaaaaa", 100)
            sub = self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="a@b.co", token="one")
            self.subscribers.mark_verified(session, sub)
            self.subscribers.mark_notified(session, sub.id, 99)

        with self.Session.begin() as session:
            sub = self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="a@b.co", token="two")
            self.assertEqual(sub.status, SubscriberStatus.PENDING.value)
            self.assertEqual(sub.verification_token, "two")
            self.assertIsNone(sub.verified_at)
            self.assertIsNone(sub.last_notified_draw)

        with self.Session() as session:
            self.assertEqual(session.query(Subscriber).count(), 1)

    def test_pending_notification_filter(self) -> None:
        with self.Session.begin() as session:
            self._pool(session, "aaaaaaaaaa", 101)
            fresh = self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="new@b.co", token="1")
            old = self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="old@b.co", token="2")
            self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="unverified@b.co", token="3")
            self.subscribers.mark_verified(session, fresh)
            self.subscribers.mark_verified(session, old)
            self.subscribers.mark_notified(session, old.id, 100)

        with self.Session() as session:
            for_100 = self.subscribers.list_verified_subscribers_pending_notification(session, "aaaaaaaaaa", 100)
            for_101 = self.subscribers.list_verified_subscribers_pending_notification(session, "aaaaaaaaaa", 101)
            self.assertEqual([s.email for s in for_100], ["new@b.co"])
            self.assertEqual([s.email for s in for_101], ["new@b.co", "old@b.co"])

    def test_reset_notified_only_touches_that_draw(self) -> None:
        with self.Session.begin() as session:
            self._pool(session, "aaaaaaaaaa", 100)
            a = self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="a@b.co", token="1")
            b = self.subscribers.upsert_pending(session, pool_id="aaaaaaaaaa", email="b@b.co", token="2")
            self.subscribers.mark_notified(session, a.id, 100)
            self.subscribers.mark_notified(session, b.id, 99)

        with self.Session.begin() as session:
            self.assertEqual(self.subscribers.reset_notified(session, 100), 1)

        with self.Session() as session:
            rows = {s.email: s.last_notified_draw for s in self.subscribers.list_for_pool(session, "aaaaaaaaaa")}
            self.assertEqual(rows, {"a@b.co": None, "b@b.co": 99})


if __name__ == "__main__":
    unittest.main()
