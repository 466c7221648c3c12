"""
UI callbacks for the marker map
"""

from dash import Input, Output, State, html

from marker_clustering.ui.layout import COLLAPSIBLE_SECTIONS


class UICallbacks:
    """Handles UI-related callbacks"""

    def __init__(self, app):
        """
        Initialize UI callbacks.

        Args:
            app: Dash application instance
        """
        self.app = app
        self.setup_callbacks()

    def setup_callbacks(self):
        """Setup all UI-related callbacks"""
        self._setup_collapsible_callbacks()
        self._setup_clustering_controls_callback()

    def _setup_collapsible_callbacks(self):
        """Setup callbacks for collapsible sections"""
        for card_id, title in COLLAPSIBLE_SECTIONS.items():
            self._register_collapsible(card_id, title)

    def _register_collapsible(self, card_id, title):
        @self.app.callback(
            [Output(f"{card_id}-collapse", "is_open"), Output(f"{card_id}-toggle", "children")],
            [Input(f"{card_id}-toggle", "n_clicks")],
            [State(f"{card_id}-collapse", "is_open")],
            prevent_initial_call=True,
        )
        def toggle_section(n_clicks, is_open):
            return self.toggle_section(title, is_open)

    @staticmethod
    def toggle_section(title, is_open):
        """Flip a section and point its chevron to the new state"""
        is_open = not is_open
        icon = "fas fa-chevron-down" if is_open else "fas fa-chevron-right"
        return is_open, [html.I(className=f"{icon} me-2"), title]

    def _setup_clustering_controls_callback(self):
        @self.app.callback(
            Output("distance-input", "disabled"),
            [Input("clustering-switch", "value")],
            prevent_initial_call=False,
        )
        def update_distance_input_state(clustering_enabled):
            """Distance only matters while clustering is on"""
            return not clustering_enabled
