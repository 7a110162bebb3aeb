from __future__ import annotations

import unittest
from datetime import datetime
from zoneinfo import ZoneInfo

from bolao.errors import ForbiddenError, NotFoundError, UpstreamError, ValidationError
from bolao.models import DrawStatus, SubscriberStatus
from bolao.repositories.draw_repository import DrawRepository
from bolao.repositories.subscriber_repository import SubscriberRepository
from bolao.services.draw_service import DrawService
from bolao.services.hit_matcher import Achievement
from bolao.services.lottery_client import DrawSummary
from bolao.services.notification_service import NotificationService
from bolao.services.pool_service import PoolService, is_valid_pool_id, parse_brazil_date
from bolao.services.subscription_service import SubscriptionService, normalize_email
from tests.fakes import FakeLotteryClient, FakeMailer, memory_session_factory

SP = ZoneInfo("America/Sao_Paulo")
SUMMARY = DrawSummary(
    latest_number=2800,
    latest_draw_date="01/02/2025",
    next_number=2801,
    next_draw_date="04/02/2025",
)


class ServiceTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.engine, self.Session = memory_session_factory()
        self.client = FakeLotteryClient(summary=SUMMARY)
        self.mailer = FakeMailer()
        self.pools = PoolService(self.client)
        self.subscriptions = SubscriptionService(
            self.mailer, share_base_url="https://bolao.example/", from_domain="example.org"
        )
        self.draws = DrawService(NotificationService(self.mailer, from_domain="example.org"))

    def tearDown(self) -> None:
        self.engine.dispose()

    def _create(self, draw_number: int = 2801, name: str | None = None):
        with self.Session.begin() as session:
            return self.pools.create_pool(
                session,
                name=name,
                draw_number=draw_number,
                now=datetime(2025, 2, 3, 12, 0, tzinfo=SP),
            )


class CreatePoolTests(ServiceTestCase):
    def test_creates_pool_with_id_and_token(self) -> None:
        pool = self._create(name="  Família ")

        self.assertTrue(is_valid_pool_id(pool.id))
        self.assertEqual(len(pool.edit_token), 32)
        self.assertEqual(pool.name, "Família")
        self.assertEqual(pool.display_name, "Bolão Família")
        self.assertEqual(self.client.calls, ["summary"])

    def test_already_drawn_concurso_is_rejected(self) -> None:
        for number in (2800, 2799):
            with self.Session() as session, self.assertRaises(ValidationError) as ctx:
                self.pools.create_pool(session, name=None, draw_number=number)
            self.assertIn("já foi sorteado", ctx.exception.message)

    def test_next_concurso_is_rejected_after_its_date(self) -> None:
        late = datetime(2025, 2, 5, 0, 30, tzinfo=SP)
        with self.Session() as session, self.assertRaises(ValidationError):
            self.pools.create_pool(session, name=None, draw_number=2801, now=late)

        with self.Session() as session:
            pool = self.pools.create_pool(session, name=None, draw_number=2802, now=late)
            self.assertEqual(pool.draw_number, 2802)

    def test_summary_failure_does_not_block_creation(self) -> None:
        self.client.fail = True
        pool = self._create(draw_number=10)
        self.assertEqual(pool.draw_number, 10)

    def test_invalid_input(self) -> None:
        with self.Session() as session:
            with self.assertRaises(ValidationError):
                self.pools.create_pool(session, name=None, draw_number="abc")
            with self.assertRaises(ValidationError):
                self.pools.create_pool(session, name="x" * 81, draw_number=2801)

    def test_brazil_date_is_end_of_day(self) -> None:
        parsed = parse_brazil_date("04/02/2025", SP)
        self.assertEqual((parsed.day, parsed.hour, parsed.minute), (4, 23, 59))
        self.assertIsNone(parse_brazil_date("2025-02-04", SP))
        self.assertIsNone(parse_brazil_date("31/02/2025", SP))


class PoolAccessTests(ServiceTestCase):
    def test_lookup_by_id_is_case_insensitive(self) -> None:
        pool = self._create()
        with self.Session() as session:
            self.assertEqual(self.pools.get_pool(session, pool.id.upper()).id, pool.id)
            with self.assertRaises(NotFoundError):
                self.pools.get_pool(session, "../etc")
            with self.assertRaises(NotFoundError):
                self.pools.get_pool(session, "0000000000")

    def test_only_owner_may_edit(self) -> None:
        pool = self._create()
        with self.Session() as session:
            pool = self.pools.get_pool(session, pool.id)
            for token in (None, "", "wrong"):
                with self.assertRaises(ForbiddenError):
                    self.pools.add_games(session, pool, token, [[1, 2, 3, 4, 5, 6]])
            with self.assertRaises(ForbiddenError):
                self.pools.update_pool(session, pool, "wrong", draw_number=2900)

    def test_update_renames_and_retargets(self) -> None:
        created = self._create(name="Antigo")
        with self.Session.begin() as session:
            pool = self.pools.get_pool(session, created.id)
            self.pools.update_pool(session, pool, created.edit_token, name=" ", update_name=True, draw_number=2810)

        with self.Session() as session:
            pool = self.pools.get_pool(session, created.id)
            self.assertIsNone(pool.name)
            self.assertEqual(pool.draw_number, 2810)


class GamesTests(ServiceTestCase):
    def test_batch_is_normalized(self) -> None:
        created = self._create()
        with self.Session.begin() as session:
            pool = self.pools.get_pool(session, created.id)
            rows = self.pools.add_games(
                session,
                pool,
                created.edit_token,
                [[45, 5, 12, 23, 34, 1], ["7", 8, 9, 10, 11, 12, 13, 14]],
            )
            self.assertEqual(rows[0].numbers, ["01", "05", "12", "23", "34", "45"])
            self.assertEqual(len(rows[1].numbers), 8)

    def test_one_bad_game_rejects_the_whole_batch(self) -> None:
        created = self._create()
        with self.Session() as session:
            pool = self.pools.get_pool(session, created.id)
            with self.assertRaises(ValidationError) as ctx:
                self.pools.add_games(session, pool, created.edit_token, [[1, 2, 3, 4, 5, 6], [1, 2, 3]])
            self.assertTrue(ctx.exception.message.startswith("Jogo 2:"))
            session.rollback()
            self.assertEqual(self.pools.pool_view(session, pool).match.games, [])

    def test_empty_batch(self) -> None:
        created = self._create()
        with self.Session() as session:
            pool = self.pools.get_pool(session, created.id)
            with self.assertRaises(ValidationError):
                self.pools.add_games(session, pool, created.edit_token, [])

    def test_view_is_pending_until_draw_is_stored(self) -> None:
        created = self._create()
        with self.Session.begin() as session:
            pool = self.pools.get_pool(session, created.id)
            self.pools.add_games(session, pool, created.edit_token, [[4, 8, 15, 16, 23, 42]])

        with self.Session() as session:
            view = self.pools.pool_view(session, self.pools.get_pool(session, created.id))
            self.assertEqual(view.status, DrawStatus.PENDING)
            self.assertIsNone(view.draw)
            self.assertEqual(view.match.max_hits, 0)

        with self.Session.begin() as session:
            DrawRepository().upsert_draw(
                session, number=2801, numbers=["04", "08", "15", "16", "23", "42"], draw_date="04/02/2025"
            )

        with self.Session() as session:
            view = self.pools.pool_view(session, self.pools.get_pool(session, created.id))
            self.assertEqual(view.status, DrawStatus.RESOLVED)
            self.assertEqual(view.match.max_hits, 6)
            self.assertEqual(view.match.achievement, Achievement.SENA)


class SubscriptionTests(ServiceTestCase):
    def test_email_normalization(self) -> None:
        self.assertEqual(normalize_email("  Ana@Example.COM "), "ana@example.com")
        for bad in ("", None, "ana", "ana@example", "a b@example.com"):
            with self.assertRaises(ValidationError):
                normalize_email(bad)

    def test_subscribe_mails_confirmation_link(self) -> None:
        pool = self._create(name="Família")
        with self.Session.begin() as session:
            sub = self.subscriptions.subscribe(session, pool, "Ana@Example.com")
            token = sub.verification_token

        self.assertEqual(self.mailer.recipients(), ["ana@example.com"])
        mail = self.mailer.sent[0]
        self.assertIn(f"https://bolao.example/api/pools/{pool.id}/confirm?token={token}", mail.text)
        self.assertIn(f"bolao-{pool.id}@example.org", mail.sender)
        self.assertIn("Bolão Família", mail.subject)

    def test_confirm_verifies_and_invalidates_token(self) -> None:
        pool = self._create()
        with self.Session.begin() as session:
            token = self.subscriptions.subscribe(session, pool, "ana@example.com").verification_token

        with self.Session.begin() as session:
            sub = self.subscriptions.confirm(session, pool, token)
            self.assertEqual(sub.status, SubscriberStatus.VERIFIED.value)
            self.assertIsNotNone(sub.verified_at)

        with self.Session() as session:
            for bad in (token, "", None, "nope"):
                with self.assertRaises(ValidationError):
                    self.subscriptions.confirm(session, pool, bad)

    def test_resubscribe_returns_to_pending(self) -> None:
        pool = self._create()
        with self.Session.begin() as session:
            token = self.subscriptions.subscribe(session, pool, "ana@example.com").verification_token
        with self.Session.begin() as session:
            self.subscriptions.confirm(session, pool, token)
        with self.Session.begin() as session:
            self.subscriptions.subscribe(session, pool, "ana@example.com")

        with self.Session() as session:
            (sub,) = self.subscriptions.list_subscribers(session, pool)
            self.assertEqual(sub.status, SubscriberStatus.PENDING.value)
            self.assertIsNone(sub.verified_at)

    def test_mail_failure_is_reported(self) -> None:
        pool = self._create()
        self.mailer.failing = {"ana@example.com"}
        with self.Session() as session:
            with self.assertRaises(UpstreamError) as ctx:
                self.subscriptions.subscribe(session, pool, "ana@example.com")
            self.assertEqual(ctx.exception.status_code, 502)


class DrawServiceTests(ServiceTestCase):
    def _verified(self, pool, email: str) -> None:
        with self.Session.begin() as session:
            token = self.subscriptions.subscribe(session, pool, email).verification_token
        with self.Session.begin() as session:
            self.subscriptions.confirm(session, pool, token)
        self.mailer.sent.clear()

    def test_manual_draw_is_stored_and_notified(self) -> None:
        pool = self._create()
        self._verified(pool, "ana@example.com")

        with self.Session() as session:
            draw, report = self.draws.set_manual_draw(session, "2801", "42 23 16 15 8 4", "04/02/2025")

        self.assertEqual(draw.numbers, ["04", "08", "15", "16", "23", "42"])
        self.assertEqual(report.sent, 1)
        self.assertEqual(self.mailer.recipients(), ["ana@example.com"])

        with self.Session() as session:
            self.assertEqual(self.draws.get_draw(session, 2801).draw_date, "04/02/2025")

    def test_manual_draw_defaults_to_today(self) -> None:
        with self.Session() as session:
            draw, report = self.draws.set_manual_draw(session, 2801, "1 2 3 4 5 6")
        self.assertRegex(draw.draw_date, r"^\d{2}/\d{2}/\d{4}$")
        self.assertEqual(report.sent, 0)

    def test_manual_draw_validates_input(self) -> None:
        with self.Session() as session:
            with self.assertRaises(ValidationError):
                self.draws.set_manual_draw(session, 2801, "1 2 3 4 5")
            with self.assertRaises(ValidationError):
                self.draws.set_manual_draw(session, 0, "1 2 3 4 5 6")

    def test_delete_makes_subscribers_eligible_again(self) -> None:
        pool = self._create()
        self._verified(pool, "ana@example.com")
        with self.Session() as session:
            self.draws.set_manual_draw(session, 2801, "1 2 3 4 5 6", "04/02/2025")

        with self.Session.begin() as session:
            self.assertEqual(self.draws.delete_draw(session, 2801), 1)

        with self.Session() as session:
            with self.assertRaises(NotFoundError):
                self.draws.get_draw(session, 2801)
            (sub,) = SubscriberRepository().list_for_pool(session, pool.id)
            self.assertIsNone(sub.last_notified_draw)

        with self.Session() as session:
            _, report = self.draws.set_manual_draw(session, 2801, "1 2 3 4 5 7", "04/02/2025")
        self.assertEqual(report.sent, 1)

    def test_delete_unknown_draw(self) -> None:
        with self.Session() as session, self.assertRaises(NotFoundError):
            self.draws.delete_draw(session, 1234)


if __name__ == "__main__":
    unittest.main()
