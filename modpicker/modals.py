from __future__ import annotations
from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.screen import ModalScreen
from textual.widgets import Button, Static

class ConfirmModal(ModalScreen[bool]):
    """Yes/no question before anything touches the package folder or the catalog."""

    BINDINGS = [("y", "answer(True)", "Yes"), ("n", "answer(False)", "No"), ("escape", "answer(False)", "No")]

    def __init__(self, title: str, body: str, confirm_label: str = "OK"):
        super().__init__()
        self.title_text = title
        self.body_text = body
        self.confirm_label = confirm_label

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self.title_text, classes="modal_title", markup=False),
            Static(self.body_text, id="modal_body", markup=False),
            Horizontal(
                Button("Cancel", id="no", variant="error"),
                Button(self.confirm_label, id="yes", variant="success"),
            ),
            id="modal",
        )

    def action_answer(self, yes: bool) -> None:
        self.dismiss(yes)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(event.button.id == "yes")

class OutputModal(ModalScreen[None]):
    """Read-only message box for refused toggles and git results.

    The body is shown verbatim: package names and git output are not markup.
    """

    BINDINGS = [("escape", "close", "Close")]

    def __init__(self, title: str, body: str):
        super().__init__()
        self.title_text = title
        self.body_text = body

    def compose(self) -> ComposeResult:
        yield Container(
            Static(self.title_text, classes="modal_title", markup=False),
            Static(self.body_text, id="modal_body", markup=False),
            Button("Close", id="close", variant="primary"),
            id="modal",
        )

    def action_close(self) -> None:
        self.dismiss(None)

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.dismiss(None)
