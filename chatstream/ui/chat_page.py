"""NiceGUI chat interface rendering SessionController snapshots."""

import json

from nicegui import context, ui

from chatstream.config import ClientConfig, get_client_config
from chatstream.models.schemas import Message, ProcessStep, Sender, SessionState
from chatstream.session import SessionController

PRESET_QUESTIONS: list[tuple[str, str, str]] = [
    ("memory", "スキル", "宮木翔太のスキルを教えて"),
    ("school", "学歴", "宮木翔太の学歴を教えて"),
    ("work", "職歴", "宮木翔太のこれまでの仕事を教えて"),
    ("star", "強み", "宮木翔太の強みを教えて"),
]

CUSTOM_CSS = """
<style>
    body { background: #111827; color: white; min-height: 100vh; }

    .message-user { background: #2563eb; border-radius: 12px; }
    .message-bot { background: #374151; border-radius: 12px; }

    .option-card { background: #1f2937; border-radius: 12px; cursor: pointer; }
    .option-card:hover { background: #374151; }

    .process-panel { background: #1f2937; border-radius: 12px; }
    .step-current { color: #60a5fa; font-weight: 600; }
    .step-done { color: #4ade80; }
    .step-pending { color: #9ca3af; }

    .message-bot pre { background: #1f2937; border-radius: 8px; padding: 0.75rem; overflow-x: auto; }
</style>
"""


def step_details(
    config: ClientConfig, state: SessionState, step: ProcessStep
) -> str | None:
    """Return the diagnostic text shown under a step, if it has any."""
    if step.name == config.query_step:
        return state.query or None
    if step.name == config.search_step and state.search_results is not None:
        return json.dumps(state.search_results, ensure_ascii=False, indent=2)
    return None


def step_status(state: SessionState, index: int) -> str:
    """Classify a step as current, done or pending for display."""
    if state.is_loading and index == state.current_step_index:
        return "current"
    if state.steps[index].completed:
        return "done"
    return "pending"


@ui.page("/")
def chat_page() -> None:
    """Main chat page."""
    ui.add_head_html(CUSTOM_CSS)
    controller = SessionController(get_client_config())

    messages_container: ui.column
    process_container: ui.column
    input_field: ui.input
    send_btn: ui.button
    abort_btn: ui.button
    reset_btn: ui.button

    def render_message(msg: Message) -> None:
        bubble = "message-user" if msg.sender is Sender.USER else "message-bot"
        with ui.element("div").classes(f"w-full p-4 {bubble}"):
            if msg.sender is Sender.BOT:
                ui.markdown(msg.text).classes("text-sm")
            else:
                ui.label(msg.text).classes("text-sm whitespace-pre-wrap")

    def render_options() -> None:
        with ui.grid(columns=2).classes("w-full gap-2"):
            for icon, label, question in PRESET_QUESTIONS:
                with (
                    ui.column()
                    .classes("option-card items-center p-4")
                    .on("click", lambda q=question: send(q))
                ):
                    ui.icon(icon).classes("text-3xl")
                    ui.label(label).classes("text-xs text-gray-400")

    def render_process(state: SessionState) -> None:
        with ui.column().classes("w-full process-panel p-4 gap-2"):
            ui.label("実行プロセス").classes("text-lg font-semibold self-center")
            for index, step in enumerate(state.steps):
                status = step_status(state, index)
                details = step_details(controller.config, state, step)
                with ui.row().classes(f"items-center gap-3 step-{status}"):
                    if status == "current":
                        ui.spinner(size="sm")
                    elif status == "done":
                        ui.icon("check_circle")
                    else:
                        ui.icon("radio_button_unchecked")
                    if details:
                        with ui.expansion(step.name).classes("text-sm"):
                            ui.code(details).classes("text-xs max-h-40 overflow-auto")
                    else:
                        ui.label(step.name).classes("text-sm")

    def refresh(state: SessionState) -> None:
        messages_container.clear()
        process_container.clear()
        with messages_container:
            if not state.transcript:
                render_options()
            else:
                for msg in state.transcript:
                    render_message(msg)
                if state.is_loading:
                    ui.spinner(size="lg").classes("self-center")
        if state.transcript:
            with process_container:
                render_process(state)

        input_field.set_enabled(not state.is_loading)
        send_btn.set_enabled(not state.is_loading)
        abort_btn.set_visibility(state.is_loading)
        reset_btn.set_enabled(bool(state.transcript) or state.is_loading)

    async def send(text: str) -> None:
        if not text.strip() or controller.is_loading:
            return
        input_field.value = ""
        await controller.send(text)

    async def send_message() -> None:
        await send(input_field.value or "")

    # === UI Layout ===
    with ui.column().classes("w-full max-w-2xl mx-auto min-h-screen p-4 gap-4"):
        # Header
        with ui.row().classes("w-full items-center justify-between"):
            with ui.row().classes("items-center gap-3"):
                ui.icon("chat").classes("text-3xl")
                ui.label("Chat").classes("text-lg font-semibold")
            reset_btn = ui.button(icon="refresh", on_click=controller.reset).props(
                "flat round color=white"
            )

        messages_container = ui.column().classes("w-full gap-4")
        process_container = ui.column().classes("w-full")

        # Input
        with ui.row().classes("w-full items-center gap-2 no-wrap"):
            input_field = (
                ui.input(placeholder="メッセージを送信")
                .props("dark outlined dense")
                .classes("flex-grow")
                .on("keydown.enter", send_message)
            )
            send_btn = ui.button(icon="send", on_click=send_message).props("round unelevated")
            abort_btn = ui.button(icon="stop_circle", on_click=controller.abort).props(
                "round flat color=red"
            )
            abort_btn.tooltip("プロセスを中断")

    unsubscribe = controller.subscribe(refresh)
    refresh(controller.state)

    def on_disconnect() -> None:
        controller.reset()
        unsubscribe()

    context.client.on_disconnect(on_disconnect)


def main() -> None:
    ui.run(title="Chat", port=8080, reload=False)


if __name__ == "__main__":
    main()
