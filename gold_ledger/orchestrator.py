"""
Main Orchestrator for Gold Ledger

Ties the components together and defines the end-to-end flows:
1. Inbound event -> active dialog, or -> command dispatch
2. Dialog completion: compute -> persist -> render invoice -> deliver
3. Reports: summary and CSV/XLSX/PDF exports of a history

Boundaries enforced here:
- At most one dialog per identity; all events of one identity are handled
  one at a time (per-identity lock), other identities may interleave
  while an artifact is being encoded
- Nothing is rendered from a record that was not persisted first
- Every step is audited
"""

import asyncio
from collections import defaultdict
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Optional

from gold_ledger.audit import AuditLogger
from gold_ledger.config import (
    BusyCommandPolicy,
    ConversationSettings,
    Settings,
    get_settings,
)
from gold_ledger.conversation import (
    Command,
    DIRECTION_LABELS,
    DialogStateMachine,
    EXPORT_COMMANDS,
    START_COMMANDS,
    SessionStore,
    main_menu,
    parse_command,
)
from gold_ledger.models import (
    Direction,
    LedgerSummary,
    Prompt,
    Session,
    TransactionRecord,
)
from gold_ledger.queries import NoDataError, require_history, summarize
from gold_ledger.services.delivery import DeliveryError, DeliveryInterface, OutboxDelivery
from gold_ledger.services.render import (
    Artifact,
    ArtifactFormat,
    ArtifactRenderer,
    EXPORT_CAPTIONS,
    LedgerFormatter,
    RenderError,
)
from gold_ledger.services.storage import (
    IdentityDirectoryInterface,
    JsonIdentityDirectory,
    JsonLedgerStorage,
    JsonLinesAuditStorage,
    LedgerStorageInterface,
    StorageError,
)


NO_TRANSACTIONS_MESSAGE = "❗ You have not recorded any transactions yet."
NO_EXPORT_DATA_MESSAGE = "❗ There is no data to export yet."
STORAGE_READ_FAILED_MESSAGE = "⚠️ Your transactions could not be read. Please try again later."
SAVE_FAILED_MESSAGE = "⚠️ The transaction could not be saved. Please start again."
BUSY_MESSAGE = "⏳ Please finish the current transaction first."
RENDER_FAILED_MESSAGE = "⚠️ The file could not be created. Please try again later."


class _Messenger:
    """Delivery wrapper: failures are audited instead of raised."""

    def __init__(self, delivery: DeliveryInterface, audit_logger: AuditLogger):
        self._delivery = delivery
        self._audit = audit_logger

    async def text(
        self,
        identity: str,
        text: str,
        keyboard: Optional[list[list[str]]] = None,
    ) -> bool:
        try:
            await self._delivery.send_message(identity, text, keyboard=keyboard)
            return True
        except DeliveryError as e:
            await self._audit.log_delivery_failed(identity, str(e))
            return False

    async def prompt(self, identity: str, prompt: Prompt, notice: Optional[str] = None) -> bool:
        text = f"{notice}\n{prompt.text}" if notice else prompt.text
        return await self.text(identity, text, keyboard=prompt.keyboard)

    async def photo(self, identity: str, path: Path, caption: str) -> bool:
        try:
            await self._delivery.send_photo(identity, path, caption=caption)
            return True
        except DeliveryError as e:
            await self._audit.log_delivery_failed(identity, str(e))
            return False

    async def document(self, identity: str, path: Path, caption: str) -> bool:
        try:
            await self._delivery.send_document(identity, path, caption=caption)
            return True
        except DeliveryError as e:
            await self._audit.log_delivery_failed(identity, str(e))
            return False


class TransactionFlow:
    """
    Completion of a dialog.

    Flow:
    1. Persist → append the record to the identity's history
    2. Render → invoice image
    3. Deliver → photo with a confirmation caption

    A record that fails to persist is never rendered.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        renderer: ArtifactRenderer,
        messenger: _Messenger,
        audit_logger: AuditLogger,
    ):
        self._ledger = ledger_storage
        self._renderer = renderer
        self._messenger = messenger
        self._audit_logger = audit_logger

    async def complete(
        self,
        session: Session,
        record: TransactionRecord,
    ) -> Optional[TransactionRecord]:
        """
        Persist, render and deliver a finished transaction.

        Returns:
            The persisted record, or None if it could not be saved
        """
        identity = session.identity

        try:
            await self._ledger.append(identity, record)
        except StorageError as e:
            await self._audit_logger.log_save_failed(
                identity,
                str(e),
                correlation_id=session.correlation_id,
            )
            await self._messenger.text(identity, SAVE_FAILED_MESSAGE)
            return None

        await self._audit_logger.log_transaction_saved(
            identity=identity,
            record_id=record.id,
            direction=record.direction.value,
            item_kind=record.item_kind.value,
            amount=str(record.total_amount),
            correlation_id=session.correlation_id,
        )

        caption = f"✅ {DIRECTION_LABELS[record.direction]} recorded."
        try:
            artifact = await asyncio.to_thread(
                self._renderer.render_invoice, identity, record
            )
        except RenderError as e:
            await self._audit_logger.log_error(
                error_type="invoice_render_failed",
                error_message=str(e),
                identity=identity,
                correlation_id=session.correlation_id,
            )
            await self._messenger.text(identity, caption)
            return record

        await self._audit_logger.log_invoice_rendered(
            identity=identity,
            record_id=record.id,
            path=str(artifact.path),
            correlation_id=session.correlation_id,
        )
        await self._messenger.photo(identity, artifact.path, caption)
        return record


class ReportFlow:
    """
    Summary and exports over a full history.

    Empty histories are reported as "no data", never as zero totals or
    empty files.
    """

    def __init__(
        self,
        ledger_storage: LedgerStorageInterface,
        renderer: ArtifactRenderer,
        messenger: _Messenger,
        audit_logger: AuditLogger,
    ):
        self._ledger = ledger_storage
        self._renderer = renderer
        self._messenger = messenger
        self._audit_logger = audit_logger

    async def _history(self, identity: str) -> Optional[list[TransactionRecord]]:
        try:
            return await self._ledger.read_history(identity)
        except StorageError as e:
            await self._audit_logger.log_error(
                error_type="history_read_failed",
                error_message=str(e),
                identity=identity,
            )
            await self._messenger.text(identity, STORAGE_READ_FAILED_MESSAGE)
            return None

    async def send_summary(self, identity: str) -> Optional[LedgerSummary]:
        history = await self._history(identity)
        if history is None:
            return None

        summary = summarize(history)
        if summary.is_empty:
            await self._messenger.text(identity, NO_TRANSACTIONS_MESSAGE)
            return None

        await self._messenger.text(
            identity,
            format_summary(summary, self._renderer.formatter),
        )
        await self._audit_logger.log_summary_presented(identity, summary.count)
        return summary

    async def send_export(self, identity: str, fmt: ArtifactFormat) -> Optional[Artifact]:
        history = await self._history(identity)
        if history is None:
            return None

        try:
            require_history(history)
            artifact = await asyncio.to_thread(
                self._renderer.export, identity, history, fmt
            )
        except NoDataError:
            await self._audit_logger.log_export_rejected(identity, fmt.value)
            await self._messenger.text(identity, NO_EXPORT_DATA_MESSAGE)
            return None
        except RenderError as e:
            await self._audit_logger.log_error(
                error_type="export_render_failed",
                error_message=str(e),
                identity=identity,
                details={"export_format": fmt.value},
            )
            await self._messenger.text(identity, RENDER_FAILED_MESSAGE)
            return None

        await self._audit_logger.log_export_generated(
            identity=identity,
            export_format=fmt.value,
            path=str(artifact.path),
            count=artifact.entry_count,
        )
        await self._messenger.document(identity, artifact.path, EXPORT_CAPTIONS[fmt])
        return artifact


def format_summary(summary: LedgerSummary, formatter: LedgerFormatter) -> str:
    """Plain-text summary message."""
    return "\n".join([
        "📊 Summary:",
        "-------------------------",
        f"🟢 Total purchases: {formatter.money(summary.total_buy)} "
        f"({formatter.localize(str(summary.buy_count))})",
        f"🔴 Total sales: {formatter.money(summary.total_sell)} "
        f"({formatter.localize(str(summary.sell_count))})",
        f"💎 Net profit / loss: {formatter.money(summary.net_profit)}",
        f"⚖️ Gold bought / sold: {formatter.weight(summary.gold_bought_grams)}"
        f" / {formatter.weight(summary.gold_sold_grams)}",
        "-------------------------",
        f"📅 Transactions: {formatter.localize(str(summary.count))}",
    ])


class LedgerBot:
    """
    Routes inbound text events.

    An event goes to the identity's active dialog if there is one,
    otherwise to the command dispatcher. Menu commands that arrive
    mid-dialog follow the configured BusyCommandPolicy.
    """

    def __init__(
        self,
        state_machine: DialogStateMachine,
        sessions: SessionStore,
        directory: IdentityDirectoryInterface,
        transaction_flow: TransactionFlow,
        report_flow: ReportFlow,
        messenger: _Messenger,
        audit_logger: AuditLogger,
        conversation_settings: ConversationSettings,
        export_formats: list[str],
    ):
        self._machine = state_machine
        self._sessions = sessions
        self._directory = directory
        self._transactions = transaction_flow
        self._reports = report_flow
        self._messenger = messenger
        self._audit_logger = audit_logger
        self._settings = conversation_settings
        self._export_formats = export_formats
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = defaultdict(int)

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    @property
    def lock_count(self) -> int:
        """Identities with an event in flight or waiting."""
        return len(self._locks)

    @asynccontextmanager
    async def _identity_lock(self, identity: str):
        """
        Serialize events of one identity. The lock lives only while some
        event holds or awaits it.
        """
        lock = self._locks.setdefault(identity, asyncio.Lock())
        self._lock_users[identity] += 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[identity] -= 1
            if not self._lock_users[identity]:
                del self._lock_users[identity]
                del self._locks[identity]

    @property
    def menu(self) -> Prompt:
        return main_menu(self._export_formats)

    async def handle(self, identity: str, text: Optional[str], display_name: str = "User") -> None:
        """Handle one inbound text event to completion."""
        identity = str(identity)
        async with self._identity_lock(identity):
            await self._purge_idle_sessions()
            await self.register_identity(identity, display_name)

            command = parse_command(text)
            if command == Command.START:
                await self._send_menu(identity)
                return

            session = self._sessions.get(identity)
            if session is not None:
                if command is None or self._settings.busy_command_policy == BusyCommandPolicy.REINTERPRET:
                    await self._continue_dialog(session, text)
                    return
                if self._settings.busy_command_policy == BusyCommandPolicy.IGNORE:
                    await self._messenger.prompt(
                        identity,
                        self._machine.prompt_for(session),
                        notice=BUSY_MESSAGE,
                    )
                    return
                self._sessions.destroy(identity)
                await self._audit_logger.log_session_abandoned(
                    identity,
                    step=session.step.value,
                    reason=f"command {command.value}",
                    correlation_id=session.correlation_id,
                )

            await self._dispatch(identity, command)

    async def register_identity(self, identity: str, display_name: str) -> bool:
        """
        Add the identity to the directory on first contact and notify
        the administrator. Later calls do nothing.

        Returns:
            True if the identity was new
        """
        try:
            entry = await self._directory.register_once(identity, display_name)
        except StorageError as e:
            await self._audit_logger.log_error(
                error_type="identity_registration_failed",
                error_message=str(e),
                identity=identity,
            )
            return False

        if entry is None:
            return False

        await self._audit_logger.log_identity_registered(identity, entry.display_name)
        admin = self._settings.admin_identity
        notified = await self._messenger.text(
            admin,
            f"📢 New user registered:\n👤 {entry.display_name}\n🆔 {identity}",
        )
        if notified:
            await self._audit_logger.log_admin_notified(identity, admin)
        return True

    async def start_dialog(self, identity: str, direction: Direction) -> Session:
        session, prompt = self._machine.start(identity, direction)
        self._sessions.create(session)
        await self._audit_logger.log_session_started(
            identity,
            direction.value,
            session.correlation_id,
        )
        await self._messenger.prompt(identity, prompt)
        return session

    async def _dispatch(self, identity: str, command: Optional[Command]) -> None:
        if command in START_COMMANDS:
            await self.start_dialog(identity, START_COMMANDS[command])
        elif command == Command.SHOW_SUMMARY:
            await self._reports.send_summary(identity)
        elif command in EXPORT_COMMANDS:
            fmt = EXPORT_COMMANDS[command]
            if fmt not in self._export_formats:
                await self._send_menu(identity)
                return
            await self._reports.send_export(identity, ArtifactFormat(fmt))
        else:
            await self._send_menu(identity)

    async def _continue_dialog(self, session: Session, text: Optional[str]) -> None:
        identity = session.identity
        transition = self._machine.advance(session, text)

        if not transition.accepted:
            await self._audit_logger.log_answer_rejected(
                identity,
                step=session.step.value,
                reason=transition.error or "",
                correlation_id=session.correlation_id,
            )
            await self._messenger.prompt(identity, transition.prompt, notice=transition.error)
            return

        await self._audit_logger.log_answer_accepted(
            identity,
            step=session.step.value,
            next_step=transition.session.step.value,
            correlation_id=session.correlation_id,
        )

        if not transition.completed:
            self._sessions.replace(transition.session)
            await self._messenger.prompt(identity, transition.prompt)
            return

        self._sessions.destroy(identity)
        record = self._machine.build_record(transition.session)
        await self._transactions.complete(transition.session, record)
        await self._send_menu(identity)

    async def _send_menu(self, identity: str) -> None:
        await self._messenger.prompt(identity, self.menu)

    async def _purge_idle_sessions(self) -> None:
        for session in self._sessions.purge_expired():
            await self._audit_logger.log_session_abandoned(
                session.identity,
                step=session.step.value,
                reason="idle timeout",
                correlation_id=session.correlation_id,
            )


def create_app_components(
    settings: Optional[Settings] = None,
    delivery: Optional[DeliveryInterface] = None,
) -> tuple[LedgerBot, DeliveryInterface, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        settings: Settings to build from (defaults to get_settings())
        delivery: Transport capability (defaults to an in-memory outbox)

    Returns:
        (ledger_bot, delivery, audit_logger)
    """
    settings = settings or get_settings()
    storage_settings = settings.storage
    render_settings = settings.render
    conversation_settings = settings.conversation

    for directory in (storage_settings.data_dir, storage_settings.export_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)

    audit_storage = (
        JsonLinesAuditStorage(storage_settings.audit_file)
        if storage_settings.persist_audit
        else None
    )
    audit_logger = AuditLogger(audit_storage)
    delivery = delivery or OutboxDelivery()
    messenger = _Messenger(delivery, audit_logger)

    ledger_storage = JsonLedgerStorage(storage_settings.data_dir)
    renderer = ArtifactRenderer(storage_settings.export_dir, render_settings)

    idle_timeout = None
    if conversation_settings.session_idle_timeout_minutes:
        idle_timeout = timedelta(minutes=conversation_settings.session_idle_timeout_minutes)

    bot = LedgerBot(
        state_machine=DialogStateMachine(
            profile=conversation_settings.dialog_profile,
            currency_label=render_settings.currency_label,
        ),
        sessions=SessionStore(idle_timeout=idle_timeout),
        directory=JsonIdentityDirectory(storage_settings.users_file),
        transaction_flow=TransactionFlow(ledger_storage, renderer, messenger, audit_logger),
        report_flow=ReportFlow(ledger_storage, renderer, messenger, audit_logger),
        messenger=messenger,
        audit_logger=audit_logger,
        conversation_settings=conversation_settings,
        export_formats=render_settings.export_formats_list,
    )
    return bot, delivery, audit_logger
