"""
Terminal console - pick a message type, fill the form, send it to the device.
"""

import sys

from textual.app import App, ComposeResult
from textual.containers import Container, Horizontal, VerticalScroll
from textual.widgets import (
    Button,
    Footer,
    Header,
    Input,
    Label,
    ListItem,
    ListView,
    RadioButton,
    RadioSet,
    Select,
    Static,
    Switch,
)

from util.logging import logger
from iot_console.core import config
from iot_console.core.orchestrator import DISPATCH_STARTED, SETTLED, VALIDATION_FAILED, SubmissionEvent
from iot_console.core.persistence import ValueMapStore
from iot_console.core.schema import FieldKind, FieldSpec
from iot_console.core.session import ConfigurationSession
from iot_console.device.connection import ConnectionMonitor
from .forms import (
    NOTIFY_SEVERITY,
    coerce_input,
    display_value,
    field_name_from_widget_id,
    field_widget_id,
    format_feedback,
    schema_summary,
)


class ConsoleApp(App):
    """IoT configuration console TUI application."""

    CSS = """
    .title {
        text-style: bold;
        margin-bottom: 1;
        color: cyan;
    }

    .field-label {
        margin-top: 1;
    }

    #sidebar {
        width: 40;
        border: solid white;
        padding: 1;
    }

    #form-section {
        width: 1fr;
        border: solid white;
        padding: 1;
    }

    #feedback-section {
        width: 60;
        border: solid white;
        padding: 1;
    }

    #connection-status {
        margin-top: 1;
        color: gray;
    }

    #feedback-log {
        background: $panel;
        padding: 1;
    }
    """

    TITLE = "IoT Configuration Console"

    BINDINGS = [
        ("q", "quit", "Quit"),
        ("ctrl+s", "submit", "Send"),
        ("ctrl+l", "clear_feedback", "Clear feedback"),
    ]

    def __init__(self, session: ConfigurationSession = None, monitor: ConnectionMonitor = None):
        super().__init__()
        store = ValueMapStore() if config.STATE_PERSISTENCE_ENABLED else None
        self.session = session if session is not None else ConfigurationSession(store=store)
        self.monitor = monitor if monitor is not None else ConnectionMonitor()
        self.sending = False
        self._unsubscribe = self.session.subscribe(self.on_submission_event)

    def compose(self) -> ComposeResult:
        yield Header()
        with Horizontal():
            with Container(id="sidebar"):
                yield Static("Message Types", classes="title")
                yield ListView(
                    *[ListItem(Label(schema_summary(s)), id=f"type-{s.id}")
                      for s in self.session.registry.get_all()],
                    id="message-types",
                )
                yield Static("", id="connection-status")
            with VerticalScroll(id="form-section"):
                yield Static("Select a message type", id="form-title", classes="title")
                yield Container(id="form-fields")
                yield Button("Send Configuration", id="send-button", variant="primary", disabled=True)
            with VerticalScroll(id="feedback-section"):
                yield Static("Device Feedback", classes="title")
                yield Static(format_feedback(self.session.feedback()), id="feedback-log")
                yield Button("Clear", id="clear-button", variant="default")
        yield Footer()

    async def on_mount(self) -> None:
        logger.info("IoT configuration console started")
        for issue in config.validate_config():
            self.notify(issue, title="Configuration issue", severity="warning")

        self.refresh_connection()
        self.set_interval(self.monitor.interval_sec, self.refresh_connection)

        if self.session.selected_schema is not None:
            await self.render_form()

    def refresh_connection(self) -> None:
        connected = self.monitor.check()
        text = "● Device connected" if connected else "○ Device disconnected"
        self.query_one("#connection-status", Static).update(text)

    async def render_form(self) -> None:
        schema = self.session.selected_schema
        values = self.session.values
        self.query_one("#form-title", Static).update(f"{schema.name}\n{schema.description}")

        container = self.query_one("#form-fields", Container)
        await container.remove_children()
        widgets = []
        for spec in schema.fields:
            label = f"{spec.label} *" if spec.required else spec.label
            widgets.append(Label(label, classes="field-label"))
            widgets.append(self._field_widget(spec, values.get(spec.name)))
        await container.mount(*widgets)

        self.query_one("#send-button", Button).disabled = self.sending

    def _field_widget(self, spec: FieldSpec, value):
        widget_id = field_widget_id(spec.name)
        if spec.kind == FieldKind.BOOLEAN:
            return Switch(value=bool(value), id=widget_id)
        if spec.kind == FieldKind.DROPDOWN:
            return Select(
                [(option, option) for option in spec.options],
                value=value if value in spec.options else Select.BLANK,
                prompt=f"Select {spec.label}",
                id=widget_id,
            )
        if spec.kind == FieldKind.RADIO:
            return RadioSet(
                *[RadioButton(option, value=(option == value)) for option in spec.options],
                id=widget_id,
            )
        return Input(value=display_value(value), placeholder=spec.label, id=widget_id)

    def _field_spec(self, widget_id):
        schema = self.session.selected_schema
        name = field_name_from_widget_id(widget_id)
        if schema is None or name is None:
            return None
        return schema.get_field(name)

    async def on_list_view_selected(self, event: ListView.Selected) -> None:
        schema_id = event.item.id[len("type-"):]
        self.session.on_schema_select(schema_id)
        await self.render_form()

    def on_input_changed(self, event: Input.Changed) -> None:
        spec = self._field_spec(event.input.id)
        if spec is not None:
            self.session.on_field_change(spec.name, coerce_input(spec, event.value))

    def on_select_changed(self, event: Select.Changed) -> None:
        spec = self._field_spec(event.select.id)
        if spec is not None:
            value = None if event.value is Select.BLANK else event.value
            self.session.on_field_change(spec.name, value)

    def on_radio_set_changed(self, event: RadioSet.Changed) -> None:
        spec = self._field_spec(event.radio_set.id)
        if spec is not None:
            self.session.on_field_change(spec.name, str(event.pressed.label))

    def on_switch_changed(self, event: Switch.Changed) -> None:
        spec = self._field_spec(event.switch.id)
        if spec is not None:
            self.session.on_field_change(spec.name, event.value)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send-button":
            self.action_submit()
        elif event.button.id == "clear-button":
            self.action_clear_feedback()

    def action_submit(self) -> None:
        # One submission at a time from this console
        if self.sending or self.session.selected_schema is None:
            return
        self.run_worker(self.submit_form(), exclusive=True)

    async def submit_form(self) -> None:
        self.sending = True
        self.query_one("#send-button", Button).disabled = True
        try:
            await self.session.on_submit()
        finally:
            self.sending = False
            self.query_one("#send-button", Button).disabled = False

    def action_clear_feedback(self) -> None:
        self.session.clear_feedback()
        self.refresh_feedback()

    def refresh_feedback(self) -> None:
        self.query_one("#feedback-log", Static).update(format_feedback(self.session.feedback()))

    def on_submission_event(self, event: SubmissionEvent) -> None:
        if event.kind == VALIDATION_FAILED:
            missing = ", ".join(event.missing_field_labels) or "fields with invalid values"
            self.notify(f"Please fill in: {missing}", title=config.REQUIRED_FIELD_ERROR, severity="error")
        elif event.kind == DISPATCH_STARTED:
            self.notify(config.SENDING_DESCRIPTION, title=config.SENDING_TITLE)
        elif event.kind == SETTLED:
            entry = event.entry
            title = entry.kind.value.capitalize()
            if entry.message == config.CHANNEL_FAILURE_MESSAGE:
                title = config.COMMUNICATION_ERROR
            self.notify(entry.message, title=title, severity=NOTIFY_SEVERITY.get(entry.kind.value, "information"))
            self.refresh_feedback()

    def on_unmount(self) -> None:
        self._unsubscribe()


def main():
    """Console entry point."""
    try:
        issues = config.validate_config()
        if issues:
            print(f"❌ Console configuration error: {'; '.join(issues)}")
            sys.exit(1)

        print("🚀 Starting IoT configuration console...")
        ConsoleApp().run()

    except KeyboardInterrupt:
        print("\nℹ️  Console interrupted by user")
        logger.info("Console exited via keyboard interrupt")
    except Exception as e:
        error_msg = f"Console startup failed: {e}"
        print(f"❌ {error_msg}")
        logger.error(error_msg)
        sys.exit(1)


if __name__ == "__main__":
    main()
