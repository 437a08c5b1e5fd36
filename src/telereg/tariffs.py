"""Client pricing tiers and the tariff tables that price communications."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from telereg.communications import Communication, CommunicationKind
from telereg.errors import ExitCode, RegistryError

TEXT_SHORT_LIMIT = 50
TEXT_MEDIUM_LIMIT = 100
GOLD_PROMOTION_BALANCE = 500.0
PLATINUM_VIDEO_STREAK = 5
GOLD_TEXT_STREAK = 2


class ClientType(str, Enum):
    NORMAL = "NORMAL"
    GOLD = "GOLD"
    PLATINUM = "PLATINUM"


@dataclass(frozen=True)
class TariffTable:
    text_short: float
    text_medium: float
    text_long: float
    text_long_per_char: float
    voice: float
    video: float
    friend_discount: float = 0.5

    def text_price(self, units: int) -> float:
        if units < TEXT_SHORT_LIMIT:
            return self.text_short
        if units < TEXT_MEDIUM_LIMIT:
            return self.text_medium
        return self.text_long + self.text_long_per_char * units


DEFAULT_TARIFFS: dict[ClientType, TariffTable] = {
    ClientType.NORMAL: TariffTable(
        text_short=10, text_medium=16, text_long=0, text_long_per_char=2, voice=20, video=30
    ),
    ClientType.GOLD: TariffTable(
        text_short=10, text_medium=10, text_long=0, text_long_per_char=2, voice=10, video=20
    ),
    ClientType.PLATINUM: TariffTable(
        text_short=0, text_medium=4, text_long=4, text_long_per_char=0, voice=10, video=10
    ),
}


@dataclass(frozen=True)
class TariffPolicy:
    tables: Mapping[ClientType, TariffTable] = field(default_factory=lambda: dict(DEFAULT_TARIFFS))

    def table_for(self, client_type: ClientType) -> TariffTable:
        table = self.tables.get(client_type)
        if table is None:
            return DEFAULT_TARIFFS[client_type]
        return table

    def price(self, communication: Communication, client_type: ClientType) -> float:
        if communication.units is None:
            raise RegistryError(
                f"Communication {communication.comm_id} has no units to price",
                code=ExitCode.RUNTIME_ERROR,
            )
        table = self.table_for(client_type)
        units = communication.units
        if communication.kind == CommunicationKind.TEXT:
            return float(table.text_price(units))
        per_unit = table.voice if communication.kind == CommunicationKind.VOICE else table.video
        amount = float(per_unit * units)
        if communication.between_friends:
            amount *= 1 - table.friend_discount
        return amount


def review_client_type(
    current: ClientType,
    balance: float,
    recent_kinds: Sequence[CommunicationKind] = (),
    *,
    after_payment: bool = False,
) -> ClientType:
    """Return the tier a client moves to given its balance and latest communications.

    ``recent_kinds`` lists the kinds of the client's most recently priced
    communications, oldest first.
    """
    if current == ClientType.NORMAL:
        if after_payment and balance > GOLD_PROMOTION_BALANCE:
            return ClientType.GOLD
        return current

    if balance < 0:
        return ClientType.NORMAL

    if current == ClientType.GOLD:
        if _ends_with_streak(recent_kinds, CommunicationKind.VIDEO, PLATINUM_VIDEO_STREAK):
            return ClientType.PLATINUM
        return current

    if _ends_with_streak(recent_kinds, CommunicationKind.TEXT, GOLD_TEXT_STREAK):
        return ClientType.GOLD
    return current


def _ends_with_streak(kinds: Sequence[CommunicationKind], kind: CommunicationKind, length: int) -> bool:
    if len(kinds) < length:
        return False
    return all(item == kind for item in list(kinds)[-length:])
