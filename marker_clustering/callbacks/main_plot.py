"""
Main plot callbacks for the marker map.

Handles rendering of the map: the zoom level is derived from the visible
longitude span, the clustering engine is materialized at that level and the
result is drawn as marker and cluster traces.
"""

import dash_bootstrap_components as dbc  # type: ignore[import]
from dash import Input, Output, State, html

from marker_clustering.utils.colordefinitions import CLUSTER_TYPE, MARKER_TYPE


class MainPlotCallbacks:
    """Handles main plot rendering callbacks"""

    def __init__(self, app, engine, trace_creator, figure_manager, initial_zoom=2):
        """
        Initialize main plot callbacks.

        Args:
            app: Dash application instance
            engine: MarkerClusterEngine holding the markers
            trace_creator: TraceCreator instance for trace creation
            figure_manager: FigureManager instance for figure layout
            initial_zoom: Clustering level drawn before the user zooms
        """
        self.app = app
        self.engine = engine
        self.trace_creator = trace_creator
        self.figure_manager = figure_manager
        self.initial_zoom = initial_zoom
        self.current_zoom = initial_zoom

        self.setup_callbacks()

    def setup_callbacks(self):
        """Setup all main plot callbacks"""
        self._setup_main_render_callback()
        self._setup_button_text_callback()

    def _setup_main_render_callback(self):
        """Setup the map render callback"""

        @self.app.callback(
            [
                Output("marker-map", "figure"),
                Output("status-info", "children"),
                Output("zoom-display", "children"),
            ],
            [
                Input("render-button", "n_clicks"),
                Input("markers-version", "data"),
                Input("marker-map", "relayoutData"),
                Input("selection-store", "data"),
            ],
            [State("marker-map", "figure")],
        )
        def update_map(n_clicks, markers_version, relayout_data, selection, current_figure):
            if not n_clicks:
                return (
                    self.figure_manager.create_empty_figure(),
                    dbc.Alert("Add or load markers, then click 'Render Map'.", color="secondary"),
                    "",
                )

            try:
                return self.render_map(relayout_data, selection, current_figure)
            except Exception as e:
                print(f"⚠️  Warning: Map render failed: {e}")
                return (
                    self.figure_manager.create_empty_figure(show_initial_message=False),
                    dbc.Alert(f"Error rendering map: {str(e)}", color="danger"),
                    "",
                )

    def _setup_button_text_callback(self):
        @self.app.callback(
            Output("render-button", "children"),
            [Input("render-button", "n_clicks")],
            prevent_initial_call=False,
        )
        def update_render_button_text(n_clicks):
            """Update main render button text"""
            if n_clicks is None:
                n_clicks = 0
            return "🗺️ Render Map" if n_clicks == 0 else f"✅ Live Updates Active ({n_clicks})"

    def derive_zoom_level(self, relayout_data):
        """
        Clustering level for a relayout event.

        Autorange (double click) returns to the initial level; events without
        an x range keep the current level.
        """
        if relayout_data and relayout_data.get("xaxis.autorange"):
            self.current_zoom = self.initial_zoom
        else:
            self.current_zoom = self.figure_manager.zoom_level_from_relayout(
                relayout_data, default=self.current_zoom
            )
        return self.current_zoom

    def render_map(self, relayout_data=None, selection=None, current_figure=None):
        """
        Materialize the engine at the current zoom and build the map figure.

        Args:
            relayout_data: Dash relayoutData of the map graph
            selection: selection-store payload with highlighted point indices
            current_figure: Figure currently shown, used to keep the view

        Returns:
            Tuple of (figure, status component, zoom display text)
        """
        zoom_level = self.derive_zoom_level(relayout_data)
        materialized = self.engine.materialize(zoom_level)

        highlight = None
        if selection and selection.get("zoom_level") == materialized.zoom_level:
            highlight = selection.get("indices")

        traces = self.trace_creator.create_traces(materialized, highlight_indices=highlight)
        fig = self.figure_manager.create_figure(traces, zoom_level=materialized.zoom_level)
        self.figure_manager.preserve_zoom_state(fig, relayout_data, current_figure)

        status = self.create_status(materialized)
        zoom_text = f"Zoom level {zoom_level} (drawing level {materialized.zoom_level})"
        return fig, status, zoom_text

    def create_status(self, materialized):
        """Status line summarizing what is drawn"""
        n_markers = len(materialized.indices_of_type(MARKER_TYPE))
        n_clusters = len(materialized.indices_of_type(CLUSTER_TYPE))
        return dbc.Alert([
            html.Strong(f"{self.engine.number_of_markers} markers"),
            f" drawn as {len(materialized)} points: {n_markers} single, {n_clusters} clusters",
            html.Span(
                f" | clustering {'on' if self.engine.clustering else 'off'}",
                className="text-muted",
            ),
        ], color="success" if len(materialized) else "secondary", className="py-2 mb-0")
