"""
Dialog State Machine

The intake dialog is a finite state machine over SessionStep:

    awaiting_name -> awaiting_item_kind
        gold:     -> awaiting_unit_price_gold            -> awaiting_total_or_quantity
        coin:     -> awaiting_coin_subtype     -> awaiting_base_price -> awaiting_total_or_quantity
        currency: -> awaiting_currency_subtype -> awaiting_base_price -> awaiting_total_or_quantity
    awaiting_total_or_quantity -> awaiting_note -> complete

The DialogProfile trims this graph (the gold-only profiles skip the item
kind and note steps, GOLD_BASIC also skips the name).

`advance(session, text)` is a total transition function: it never mutates
its input, and returns the next session together with the prompt to show.
A rejected answer returns the unchanged session, the same prompt and an
error notice.
"""

from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel

from gold_ledger.calculator import InvalidInput, derive_gold_weight, derive_total
from gold_ledger.config import DialogProfile
from gold_ledger.conversation.prompts import (
    COIN_OPTIONS,
    CURRENCY_OPTIONS,
    ITEM_KIND_OPTIONS,
    step_prompt,
)
from gold_ledger.models import (
    CoinDetails,
    CurrencyDetails,
    Direction,
    GoldDetails,
    ItemKind,
    NOTE_PLACEHOLDER,
    Prompt,
    Session,
    SessionStep,
    TransactionRecord,
)
from gold_ledger.validation import (
    AnswerRejected,
    InvalidNumericInput,
    parse_choice,
    parse_free_text,
    parse_number,
)


class Transition(BaseModel):
    """Result of feeding one answer to the state machine."""

    session: Session
    prompt: Prompt
    accepted: bool
    error: Optional[str] = None

    @property
    def completed(self) -> bool:
        return self.session.is_complete


class DialogStateMachine:
    """
    Validates answers, stores them on the session and decides the next step.

    Stateless apart from its configuration; sessions live in SessionStore.
    """

    def __init__(
        self,
        profile: DialogProfile = DialogProfile.FULL,
        currency_label: str = "Toman",
    ):
        self._profile = profile
        self._currency_label = currency_label
        self._handlers: dict[SessionStep, Callable[[Session, str], dict]] = {
            SessionStep.AWAITING_NAME: self._accept_name,
            SessionStep.AWAITING_ITEM_KIND: self._accept_item_kind,
            SessionStep.AWAITING_UNIT_PRICE_GOLD: self._accept_unit_price,
            SessionStep.AWAITING_COIN_SUBTYPE: self._accept_coin_type,
            SessionStep.AWAITING_CURRENCY_SUBTYPE: self._accept_currency,
            SessionStep.AWAITING_BASE_PRICE: self._accept_unit_price,
            SessionStep.AWAITING_TOTAL_OR_QUANTITY: self._accept_total_or_quantity,
            SessionStep.AWAITING_NOTE: self._accept_note,
        }

    @property
    def profile(self) -> DialogProfile:
        return self._profile

    def start(self, identity: str, direction: Direction) -> tuple[Session, Prompt]:
        """Create the session for a new dialog and its first prompt."""
        if self._profile == DialogProfile.GOLD_BASIC:
            session = Session(
                identity=identity,
                direction=direction,
                item_kind=ItemKind.GOLD,
                step=SessionStep.AWAITING_UNIT_PRICE_GOLD,
            )
        elif self._profile == DialogProfile.GOLD_NAMED:
            session = Session(
                identity=identity,
                direction=direction,
                item_kind=ItemKind.GOLD,
                step=SessionStep.AWAITING_NAME,
            )
        else:
            session = Session(
                identity=identity,
                direction=direction,
                step=SessionStep.AWAITING_NAME,
            )
        return session, self.prompt_for(session)

    def prompt_for(self, session: Session) -> Prompt:
        return step_prompt(session, self._currency_label)

    def advance(self, session: Session, text: Optional[str]) -> Transition:
        """Feed one answer to the dialog."""
        if session.is_complete:
            return Transition(
                session=session,
                prompt=self.prompt_for(session),
                accepted=False,
                error="This dialog is already complete.",
            )

        handler = self._handlers[session.step]
        try:
            updates = handler(session, text or "")
        except AnswerRejected as e:
            return Transition(
                session=session,
                prompt=self.prompt_for(session),
                accepted=False,
                error=e.message,
            )

        candidate = session.model_copy(update=updates)
        next_session = candidate.model_copy(
            update={
                "step": self._next_step(candidate),
                "updated_at": datetime.now(),
            }
        )
        return Transition(
            session=next_session,
            prompt=self.prompt_for(next_session),
            accepted=True,
        )

    # -------------------------------------------------------------------------
    # Step handlers: parse the answer, return the fields to set
    # -------------------------------------------------------------------------

    def _accept_name(self, session: Session, text: str) -> dict:
        return {"counterparty_name": parse_free_text(text)}

    def _accept_item_kind(self, session: Session, text: str) -> dict:
        return {"item_kind": parse_choice(text, ITEM_KIND_OPTIONS)}

    def _accept_coin_type(self, session: Session, text: str) -> dict:
        return {"coin_type": parse_choice(text, COIN_OPTIONS)}

    def _accept_currency(self, session: Session, text: str) -> dict:
        return {"currency": parse_choice(text, CURRENCY_OPTIONS)}

    def _accept_unit_price(self, session: Session, text: str) -> dict:
        return {"unit_price": parse_number(text)}

    def _accept_total_or_quantity(self, session: Session, text: str) -> dict:
        try:
            if session.item_kind == ItemKind.GOLD:
                total_amount = parse_number(text, allow_zero=True)
                return {
                    "total_amount": total_amount,
                    "weight_grams": derive_gold_weight(session.unit_price, total_amount),
                }

            quantity = parse_number(text)
            if session.item_kind == ItemKind.COIN and quantity != quantity.to_integral_value():
                raise InvalidNumericInput("❌ Coins are counted in whole pieces.", text)
            return {
                "quantity": quantity,
                "total_amount": derive_total(session.unit_price, quantity),
            }
        except InvalidInput:
            raise InvalidNumericInput(
                "❌ These numbers cannot be combined. Please check the amount.", text
            )

    def _accept_note(self, session: Session, text: str) -> dict:
        return {"note": parse_free_text(text, placeholder=NOTE_PLACEHOLDER)}

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def _next_step(self, session: Session) -> SessionStep:
        step = session.step
        full = self._profile == DialogProfile.FULL

        if step == SessionStep.AWAITING_NAME:
            return SessionStep.AWAITING_ITEM_KIND if full else SessionStep.AWAITING_UNIT_PRICE_GOLD
        if step == SessionStep.AWAITING_ITEM_KIND:
            if session.item_kind == ItemKind.GOLD:
                return SessionStep.AWAITING_UNIT_PRICE_GOLD
            if session.item_kind == ItemKind.COIN:
                return SessionStep.AWAITING_COIN_SUBTYPE
            return SessionStep.AWAITING_CURRENCY_SUBTYPE
        if step in (SessionStep.AWAITING_COIN_SUBTYPE, SessionStep.AWAITING_CURRENCY_SUBTYPE):
            return SessionStep.AWAITING_BASE_PRICE
        if step in (SessionStep.AWAITING_UNIT_PRICE_GOLD, SessionStep.AWAITING_BASE_PRICE):
            return SessionStep.AWAITING_TOTAL_OR_QUANTITY
        if step == SessionStep.AWAITING_TOTAL_OR_QUANTITY:
            return SessionStep.AWAITING_NOTE if full else SessionStep.COMPLETE
        if step == SessionStep.AWAITING_NOTE:
            return SessionStep.COMPLETE
        raise ValueError(f"No transition out of {step}")

    # -------------------------------------------------------------------------
    # Completion
    # -------------------------------------------------------------------------

    def build_record(self, session: Session) -> TransactionRecord:
        """
        Turn a completed session into the record to persist.

        Raises:
            ValueError: the session has not reached the complete step
        """
        if not session.is_complete:
            raise ValueError(f"Session is still at {session.step.value}")

        if session.item_kind == ItemKind.GOLD:
            details = GoldDetails(
                unit_price=session.unit_price,
                total_amount=session.total_amount,
                weight_grams=session.weight_grams,
            )
        elif session.item_kind == ItemKind.COIN:
            details = CoinDetails(
                coin_type=session.coin_type,
                unit_price=session.unit_price,
                quantity=session.quantity,
                total_amount=session.total_amount,
            )
        elif session.item_kind == ItemKind.CURRENCY:
            details = CurrencyDetails(
                currency=session.currency,
                unit_price=session.unit_price,
                quantity=session.quantity,
                total_amount=session.total_amount,
            )
        else:
            raise ValueError(f"Unknown item kind: {session.item_kind}")

        return TransactionRecord(
            direction=session.direction,
            details=details,
            counterparty_name=session.counterparty_name or None,
            note=session.note or NOTE_PLACEHOLDER,
        )
