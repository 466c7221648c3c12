"""
Selection callbacks for the marker map.

Turns click and box/lasso selections on the map into marker ids and cluster
ids, lists the markers inside selected clusters and records the selected
points so the next render outlines them.
"""

import dash_bootstrap_components as dbc  # type: ignore[import]
from dash import Input, Output, callback_context, html

from marker_clustering.src.visualization.traces import TraceCreator

MAX_LISTED_MARKERS = 20


class PickCallbacks:
    """Handles map selection callbacks"""

    def __init__(self, app, engine, max_listed=MAX_LISTED_MARKERS):
        """
        Initialize pick callbacks.

        Args:
            app: Dash application instance
            engine: MarkerClusterEngine whose latest materialization is drawn
            max_listed: Maximum member marker ids listed per cluster
        """
        self.app = app
        self.engine = engine
        self.max_listed = max_listed

        self.setup_callbacks()

    def setup_callbacks(self):
        """Setup all selection callbacks"""
        self._setup_selection_callback()

    def _setup_selection_callback(self):
        @self.app.callback(
            [Output("pick-info", "children"), Output("selection-store", "data")],
            [Input("marker-map", "selectedData"), Input("marker-map", "clickData")],
            prevent_initial_call=True,
        )
        def handle_map_selection(selected_data, click_data):
            ctx = callback_context
            trigger = ctx.triggered[0]["prop_id"] if ctx.triggered else ""
            selection = click_data if trigger.endswith("clickData") else selected_data
            return self.handle_selection(selection)

    def handle_selection(self, selection):
        """
        Resolve a Dash selection payload.

        Returns:
            Tuple of (pick details component, selection-store payload)
        """
        cell_ids, cell_to_point = TraceCreator.cells_from_selection(selection)
        result = self.engine.resolve_pick(cell_ids, cell_to_point)

        materialized = self.engine.current_markers
        if not result or materialized is None:
            return html.Div("Nothing selected.", className="small text-muted"), None

        indices = sorted(set(cell_to_point.values()))
        store = {"zoom_level": materialized.zoom_level, "indices": indices}
        return self.describe_pick(result), store

    def describe_pick(self, result):
        """Component listing the picked markers and cluster members"""
        children = []
        if result.marker_ids:
            children.append(html.Div([
                html.Strong(f"{len(result.marker_ids)} marker(s): "),
                ", ".join(str(marker_id) for marker_id in result.marker_ids),
            ], className="mb-2"))

        for cluster_id in result.cluster_ids:
            members = self.engine.cluster_marker_ids(cluster_id)
            listed = ", ".join(str(marker_id) for marker_id in members[:self.max_listed])
            if len(members) > self.max_listed:
                listed += f", ... (+{len(members) - self.max_listed} more)"
            children.append(dbc.Card([
                dbc.CardHeader(f"Cluster {cluster_id}: {len(members)} markers", className="py-1 small"),
                dbc.CardBody(listed, className="py-1 small"),
            ], className="mb-2"))

        return html.Div(children)
