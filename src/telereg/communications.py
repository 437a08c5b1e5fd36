"""Communication records exchanged between terminals."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from telereg.errors import ExitCode, InvalidPaymentError, RegistryError

if TYPE_CHECKING:
    from telereg.tariffs import ClientType, TariffPolicy


class CommunicationKind(str, Enum):
    TEXT = "TEXT"
    VOICE = "VOICE"
    VIDEO = "VIDEO"

    @property
    def is_interactive(self) -> bool:
        return self is not CommunicationKind.TEXT


def round_amount(value: float) -> int:
    """Round half away from zero for non-negative amounts, as balances are displayed."""
    return int(math.floor(value + 0.5))


@dataclass(eq=False)
class Communication:
    comm_id: int
    kind: CommunicationKind
    sender_key: str
    receiver_key: str
    text: str = ""
    units: int | None = None
    price: float | None = None
    finished: bool = False
    paid: bool = False
    between_friends: bool = False

    @classmethod
    def text_message(
        cls,
        comm_id: int,
        sender_key: str,
        receiver_key: str,
        text: str,
        *,
        tariff: TariffPolicy,
        client_type: ClientType,
        between_friends: bool = False,
    ) -> Communication:
        comm = cls(
            comm_id=comm_id,
            kind=CommunicationKind.TEXT,
            sender_key=sender_key,
            receiver_key=receiver_key,
            text=text,
            units=len(text),
            between_friends=between_friends,
        )
        comm.price = tariff.price(comm, client_type)
        comm.finished = True
        return comm

    @classmethod
    def interactive(
        cls,
        comm_id: int,
        sender_key: str,
        receiver_key: str,
        kind: CommunicationKind,
        *,
        between_friends: bool = False,
    ) -> Communication:
        if not kind.is_interactive:
            raise RegistryError(
                f"Not an interactive communication kind: {kind.value}",
                code=ExitCode.VALIDATION_ERROR,
            )
        return cls(
            comm_id=comm_id,
            kind=kind,
            sender_key=sender_key,
            receiver_key=receiver_key,
            between_friends=between_friends,
        )

    @property
    def is_interactive(self) -> bool:
        return self.kind.is_interactive

    def priced(self, units: int, *, tariff: TariffPolicy, client_type: ClientType) -> float:
        """Price this session would have if closed now with ``units``; no mutation."""
        candidate = Communication(
            comm_id=self.comm_id,
            kind=self.kind,
            sender_key=self.sender_key,
            receiver_key=self.receiver_key,
            units=units,
            between_friends=self.between_friends,
        )
        return tariff.price(candidate, client_type)

    def close(self, units: int, *, tariff: TariffPolicy, client_type: ClientType) -> float:
        if self.finished:
            raise RegistryError(
                f"Communication {self.comm_id} is already finished",
                code=ExitCode.STATE_ERROR,
            )
        if units < 0:
            raise RegistryError(
                f"Invalid communication duration: {units}",
                code=ExitCode.VALIDATION_ERROR,
                hint="Use a non-negative duration.",
            )
        price = self.priced(units, tariff=tariff, client_type=client_type)
        self.units = units
        self.price = price
        self.finished = True
        return price

    def mark_paid(self) -> None:
        if not self.finished or self.paid:
            raise InvalidPaymentError(self.comm_id)
        self.paid = True

    def to_record(self) -> str:
        units = self.units if self.units is not None else 0
        price = round_amount(self.price) if self.price is not None else 0
        status = "FINISHED" if self.finished else "ONGOING"
        return "|".join(
            [
                self.kind.value,
                str(self.comm_id),
                self.sender_key,
                self.receiver_key,
                str(units),
                str(price),
                status,
            ]
        )
