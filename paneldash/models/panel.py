from dataclasses import dataclass

from ..exceptions import PanelNotFoundError


@dataclass(frozen=True)
class Panel:
    """A named administrative area served under `path`."""
    id: str
    path: str = "/"
    brand_name: str = "Admin"


class PanelRegistry:
    """Static lookup of panels by id. Panels are never persisted."""

    def __init__(self, panels=()):
        self._panels: dict[str, Panel] = {}
        for p in panels:
            self.register(p)

    def register(self, panel: Panel) -> Panel:
        self._panels[panel.id] = panel
        return panel

    def get(self, panel_id: str) -> Panel:
        try:
            return self._panels[panel_id]
        except KeyError:
            raise PanelNotFoundError(f"Error: panel '{panel_id}' is not registered") from None
