"""
Streamlit Frontend for Gold Ledger

A chat transport for the ledger bot: the user types (or taps) answers,
the bot replies with prompts, keyboards, invoice images and export files.

DESIGN PRINCIPLES:
1. The page only relays text; every decision is made by the bot
2. Keyboards are shown as buttons, tapping one sends its label
3. Invoices are shown inline, exports are offered as downloads
4. Recent audit events are visible for troubleshooting
"""

import asyncio
from pathlib import Path

import streamlit as st

from gold_ledger.audit import configure_logging
from gold_ledger.config import get_settings, validate_all_settings
from gold_ledger.models import OutgoingKind, OutgoingMessage
from gold_ledger.orchestrator import create_app_components


# Page configuration
st.set_page_config(
    page_title="Gold Ledger",
    page_icon="🪙",
    layout="centered",
    initial_sidebar_state="expanded",
)

st.markdown("""
<style>
    .stButton>button {
        width: 100%;
    }
</style>
""", unsafe_allow_html=True)


MIME_TYPES = {
    ".csv": "text/csv",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ".pdf": "application/pdf",
}


def run_async(coro):
    """Helper to run async functions in Streamlit."""
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@st.cache_resource
def get_components():
    """Get or create application components (cached)."""
    configure_logging(get_settings().app.log_level)
    return create_app_components()


def send(identity: str, display_name: str, text: str) -> None:
    """Relay one user message and collect the bot's replies."""
    bot, delivery, _ = get_components()
    transcript = st.session_state.transcripts.setdefault(identity, [])
    transcript.append(("user", text))
    run_async(bot.handle(identity, text, display_name=display_name))
    for message in delivery.drain(identity):
        transcript.append(("assistant", message))


def render_message(message: OutgoingMessage, key: str) -> None:
    if message.kind == OutgoingKind.PHOTO:
        st.image(str(message.path), caption=message.text)
    elif message.kind == OutgoingKind.DOCUMENT:
        path = Path(message.path)
        if message.text:
            st.markdown(message.text)
        if path.exists():
            st.download_button(
                f"⬇️ {path.name}",
                data=path.read_bytes(),
                file_name=path.name,
                mime=MIME_TYPES.get(path.suffix, "application/octet-stream"),
                key=f"download-{key}",
            )
        else:
            st.warning("This file is no longer available.")
    else:
        st.markdown(message.text.replace("\n", "  \n"))


def last_keyboard(transcript: list) -> list[list[str]]:
    for role, message in reversed(transcript):
        if role == "assistant" and message.kind == OutgoingKind.TEXT:
            return message.keyboard or []
    return []


def render_sidebar() -> tuple[str, str]:
    st.sidebar.title("🪙 Gold Ledger")
    st.sidebar.markdown("---")

    identity = st.sidebar.text_input("User ID", value="demo").strip() or "demo"
    display_name = st.sidebar.text_input("Display name", value="User").strip() or "User"

    st.sidebar.markdown("---")
    st.sidebar.markdown(
        """
        **How to use:**
        1. Send /start to see the menu
        2. Pick *Record purchase* or *Record sale*
        3. Answer the questions one by one
        4. Ask for a summary or an export at any time
        """
    )

    st.sidebar.markdown("---")
    with st.sidebar.expander("⚙️ Configuration"):
        status = validate_all_settings()
        for name in ("storage", "render", "conversation", "app"):
            if status.get(name, False):
                st.success(f"✅ {name}")
            else:
                st.error(f"❌ {name} - {status.get(f'{name}_error', 'invalid')}")

    with st.sidebar.expander("🔍 Recent activity"):
        _, _, audit_logger = get_components()
        events = run_async(audit_logger.recent_events(limit=20))
        if not events:
            st.caption("No audit events yet.")
        for event in events:
            st.json(event, expanded=False)

    return identity, display_name


def main():
    """Main application entry point."""
    if "transcripts" not in st.session_state:
        st.session_state.transcripts = {}

    identity, display_name = render_sidebar()
    transcript = st.session_state.transcripts.setdefault(identity, [])

    st.title("🪙 Gold Ledger")

    for index, (role, message) in enumerate(transcript):
        with st.chat_message(role):
            if role == "user":
                st.markdown(message)
            else:
                render_message(message, key=f"{identity}-{index}")

    keyboard = last_keyboard(transcript)
    for row_index, row in enumerate(keyboard):
        columns = st.columns(len(row))
        for column, label in zip(columns, row):
            with column:
                if st.button(label, key=f"kb-{identity}-{len(transcript)}-{row_index}-{label}"):
                    send(identity, display_name, label)
                    st.rerun()

    text = st.chat_input("Type your answer...")
    if text:
        send(identity, display_name, text)
        st.rerun()

    if not transcript and st.button("▶️ Start", type="primary"):
        send(identity, display_name, "/start")
        st.rerun()


if __name__ == "__main__":
    main()
