"""
App layout for the marker map.

Contains the complete Dash layout definition with sidebar controls for
adding and loading markers, clustering settings, the main map plot and the
pick details panel.
"""

import dash_bootstrap_components as dbc
from dash import dcc, html

# Collapsible sidebar sections: card id -> header title
COLLAPSIBLE_SECTIONS = {
    "add-markers": "📍 Add Markers",
    "load-markers": "📂 Load Marker File",
    "clustering-settings": "🧩 Clustering Settings",
}


class AppLayout:
    """Handles the main application layout"""

    @staticmethod
    def create_layout(config=None):
        """
        Create and return the complete app layout.

        Args:
            config: Configuration object used for the initial control values (optional)
        """
        return dbc.Container([
            # Header row
            dbc.Row([
                dbc.Col([
                    html.H1("Marker Map: Multi-Resolution Clustering", className="text-center mb-3"),
                ])
            ], className="mb-3"),

            # Main horizontal layout: Controls sidebar + Plot area
            dbc.Row([
                dbc.Col([
                    dbc.Card([
                        dbc.CardHeader([
                            html.Div([
                                html.I(className="fas fa-sliders-h me-2 text-white"),
                                html.H5("Map Controls", className="mb-0 d-inline-block text-white"),
                            ], className="d-flex align-items-center justify-content-center")
                        ], className="bg-gradient text-white", style={
                            'background': 'linear-gradient(135deg, #00539b 0%, #00a9b3 100%)',
                            'border-radius': '15px 15px 0 0'
                        }),
                        dbc.CardBody([
                            dbc.Alert([
                                html.I(className="fas fa-info-circle me-2"),
                                "Zooming the map switches the clustering level automatically"
                            ], color="info", className="mb-3 small text-center border-0"),

                            AppLayout._create_main_render_section(),

                            html.Div(id="marker-status", className="mb-3"),

                            AppLayout._create_collapsible_sections(config),

                        ], style={'overflow-y': 'auto', 'max-height': 'calc(100vh - 200px)'})
                    ], className="h-100 shadow-lg border-0", style={'border-radius': '15px'})
                ], width=3, className="pe-3"),

                # Right side: Map and pick details
                dbc.Col([
                    dbc.Row([
                        dbc.Col([
                            dcc.Loading(
                                id="loading",
                                children=[
                                    dcc.Graph(
                                        id='marker-map',
                                        style={'height': '75vh', 'width': '100%', 'min-height': '500px'},
                                        config={
                                            'displayModeBar': True,
                                            'displaylogo': False,
                                            'scrollZoom': True,
                                            'responsive': True
                                        }
                                    )
                                ],
                                type="circle"
                            )
                        ], width=9),

                        dbc.Col([
                            dbc.Card([
                                dbc.CardHeader(html.H6("🎯 Selection", className="mb-0")),
                                dbc.CardBody([
                                    html.Div(
                                        "Click a marker or box-select an area to list the markers it holds.",
                                        id="pick-info",
                                        className="small text-muted"
                                    )
                                ], className="p-2", style={'overflow-y': 'auto'})
                            ], style={'height': '75vh'})
                        ], width=3)
                    ]),

                    # Status info row
                    dbc.Row([
                        dbc.Col([
                            html.Div(id="status-info", className="mt-2")
                        ], width=9),
                        dbc.Col([
                            html.Div(id="zoom-display", className="mt-2 text-end text-muted small")
                        ], width=3)
                    ])
                ], width=9)
            ], className="g-0"),

            # Shared state between callbacks
            dcc.Store(id="markers-version", data=0),
            dcc.Store(id="selection-store", data=None),

        ], fluid=True, className="px-3")

    @staticmethod
    def _create_main_render_section():
        """Create main render button section"""
        return dbc.Card([
            dbc.CardBody([
                dbc.Button(
                    "🗺️ Render Map",
                    id="render-button",
                    color="primary",
                    size="lg",
                    className="w-100 mb-2 shadow-sm",
                    n_clicks=0,
                    style={'border-radius': '12px', 'font-weight': 'bold'}
                ),
                html.Small([
                    html.I(className="fas fa-magic me-1"),
                    "After the first render the map follows marker changes and zoom"
                ], className="text-muted d-block text-center fst-italic")
            ], className="p-2")
        ], className="mb-3 border-0")

    @staticmethod
    def _create_add_markers_section():
        return html.Div([
            dbc.InputGroup([
                dbc.InputGroupText("Lat"),
                dbc.Input(id="lat-input", type="number", min=-90, max=90, step="any",
                          placeholder="-90 .. 90"),
            ], size="sm", className="mb-2"),
            dbc.InputGroup([
                dbc.InputGroupText("Lon"),
                dbc.Input(id="lon-input", type="number", min=-180, max=180, step="any",
                          placeholder="-180 .. 180"),
            ], size="sm", className="mb-2"),
            dbc.Button("➕ Add Marker", id="add-marker-button", color="success",
                       size="sm", className="w-100", n_clicks=0),
        ])

    @staticmethod
    def _create_load_markers_section(config=None):
        default_path = ""
        if config is not None and config.has_markers_csv():
            default_path = config.get_markers_csv()
        return html.Div([
            dbc.Input(id="csv-path-input", type="text", value=default_path,
                      placeholder="/path/to/markers.csv", size="sm", className="mb-2"),
            dbc.Button("📂 Load CSV", id="load-csv-button", color="secondary",
                       size="sm", className="w-100 mb-2", n_clicks=0),
            dbc.Button("🗑️ Reset All Markers", id="reset-button", color="danger",
                       outline=True, size="sm", className="w-100", n_clicks=0),
        ])

    @staticmethod
    def _create_clustering_settings_section(config=None):
        clustering_enabled = getattr(config, "clustering_enabled", True)
        distance = getattr(config, "distance_threshold", 80.0)
        scale = getattr(config, "max_cluster_scale_factor", 2.0)
        return html.Div([
            dbc.Switch(id="clustering-switch", label="Cluster nearby markers",
                       value=clustering_enabled, className="mb-2"),
            html.Label("Cluster distance (pixels):", className="small fw-bold"),
            dbc.Input(id="distance-input", type="number", min=1, step=1,
                      value=distance, size="sm", className="mb-2"),
            html.Label("Max cluster scale:", className="small fw-bold"),
            dcc.Slider(id="scale-slider", min=1.0, max=4.0, step=0.25, value=scale,
                       marks={v: f"{v:g}" for v in (1, 2, 3, 4)}),
            dbc.Button("✔️ Apply Settings", id="apply-settings-button", color="primary",
                       outline=True, size="sm", className="w-100 mt-2", n_clicks=0),
            html.Small("Changing clustering or distance re-clusters every marker.",
                       className="text-muted d-block mt-1"),
        ])

    @staticmethod
    def _create_collapsible_sections(config=None):
        """Create organized collapsible sections for the sidebar controls"""
        contents = {
            "add-markers": AppLayout._create_add_markers_section(),
            "load-markers": AppLayout._create_load_markers_section(config),
            "clustering-settings": AppLayout._create_clustering_settings_section(config),
        }
        return html.Div([
            AppLayout._create_collapsible_card(title, card_id, contents[card_id], is_open=True)
            for card_id, title in COLLAPSIBLE_SECTIONS.items()
        ])

    @staticmethod
    def _create_collapsible_card(title, card_id, content, is_open=True, color="primary"):
        """Create a collapsible card section"""
        return dbc.Card([
            dbc.CardHeader([
                dbc.Button([
                    html.I(className=f"fas fa-chevron-{'down' if is_open else 'right'} me-2"),
                    title
                ],
                    id=f"{card_id}-toggle",
                    color="link",
                    className="text-decoration-none fw-bold w-100 text-start p-2",
                    style={'color': f'var(--bs-{color})'}
                )
            ], className="border-0 p-0"),
            dbc.Collapse([
                dbc.CardBody(content, className="pt-3")
            ], id=f"{card_id}-collapse", is_open=is_open)
        ], className="mb-3 border-0 shadow-sm", style={'border-radius': '12px'})
