"""ORM models."""

from bolao.models.draw import Draw, DrawStatus
from bolao.models.game import Game
from bolao.models.pool import Pool
from bolao.models.subscriber import Subscriber, SubscriberStatus

__all__ = ["Draw", "DrawStatus", "Game", "Pool", "Subscriber", "SubscriberStatus"]
