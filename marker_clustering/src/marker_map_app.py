#!/usr/bin/env python3
"""
Marker Map Dash App

An interactive map of geographic markers drawn through the multi-resolution
clustering engine. Zooming the map switches the detail level, so nearby
markers are shown as a single cluster glyph until the view is close enough
to separate them.

Features:
- Add markers one at a time or load them from a CSV file
- Automatic clustering level from the visible longitude span
- Click or box-select to list marker ids and the markers inside clusters
- Clustering on/off, cluster distance and cluster scale controls
- Custom configuration file support via command-line argument

USAGE:
- Default config:  marker-map
- Custom config:   marker-map --config /path/to/custom_config.ini
- External access: marker-map --external
"""

import argparse

import dash
import dash_bootstrap_components as dbc

from marker_clustering.callbacks import MainPlotCallbacks, MarkerCallbacks, PickCallbacks, UICallbacks
from marker_clustering.core import MarkerMapCore
from marker_clustering.src.config import get_config
from marker_clustering.src.data import MarkerLoader
from marker_clustering.src.visualization import FigureManager, TraceCreator
from marker_clustering.ui import AppLayout

DEFAULT_PORTS = [8050, 8051, 8052, 8053]


def parse_arguments(argv=None):
    """Parse command-line arguments"""
    parser = argparse.ArgumentParser(
        description='Marker Map Dash App',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                    # Use default config (config_local.ini or config.ini)
  %(prog)s --config /path/to/custom.ini       # Use custom config file
  %(prog)s --external                         # Allow external access (0.0.0.0)
  %(prog)s --markers /path/to/markers.csv     # Load a marker file at startup
        """
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='Path to custom configuration file (default: auto-detect config_local.ini or config.ini)'
    )
    parser.add_argument(
        '--markers',
        type=str,
        default=None,
        help='Marker CSV to load at startup (default: the configured markers_csv, if it exists)'
    )
    parser.add_argument(
        '--external',
        action='store_true',
        help='Allow external access to the app (binds to 0.0.0.0 instead of 127.0.0.1)'
    )
    parser.add_argument(
        '--remote',
        action='store_true',
        help='Alias for --external'
    )
    return parser.parse_args(argv)


class MarkerMapApp:
    """Wires configuration, clustering engine, layout and callbacks into one Dash app"""

    def __init__(self, config=None):
        """
        Args:
            config: Config instance; defaults to the global configuration
        """
        self.config = config if config is not None else get_config()

        external_stylesheets = [
            dbc.themes.BOOTSTRAP,
            "https://cdnjs.cloudflare.com/ajax/libs/font-awesome/6.0.0/css/all.min.css"
        ]
        self.app = dash.Dash(__name__, external_stylesheets=external_stylesheets)
        self.app.title = "Marker Map"

        # Clustering engine and data handling
        self.engine = self.config.create_engine()
        self.marker_loader = MarkerLoader(self.config)
        print(f"✓ Clustering engine ready: {self.engine!r}")

        # Visualization modules
        self.trace_creator = TraceCreator(marker_size=self.config.marker_size)
        self.figure_manager = FigureManager(plot_width_px=self.config.plot_width_px)

        self.app.layout = AppLayout.create_layout(self.config)
        print("✓ UI layout created")

        self.setup_callbacks()

        self.core = MarkerMapCore(self.app)

    def setup_callbacks(self):
        """Setup Dash callbacks"""
        self.main_plot_callbacks = MainPlotCallbacks(
            self.app, self.engine, self.trace_creator, self.figure_manager,
            initial_zoom=self.config.initial_zoom
        )
        self.marker_callbacks = MarkerCallbacks(
            self.app, self.engine, self.marker_loader, self.config
        )
        self.pick_callbacks = PickCallbacks(self.app, self.engine)
        self.ui_callbacks = UICallbacks(self.app)
        print("✓ All callbacks initialized")

    def load_initial_markers(self, path=None):
        """
        Load a marker CSV before the server starts.

        Without an explicit path the configured marker file is used when it exists.

        Returns:
            Number of markers added
        """
        if path is None:
            if not self.config.has_markers_csv():
                return 0
            path = self.config.get_markers_csv()
        message, _ = self.marker_callbacks.load_csv(path)
        print(f"✓ {message}")
        return self.engine.number_of_markers

    def run(self, host='localhost', port=8050, debug=False, auto_open=True, external_access=False):
        """Run the Dash app"""
        return self.core.run(host, port, debug, auto_open, external_access)


def main(argv=None):
    """Main function to run the app"""
    args = parse_arguments(argv)

    if args.config:
        print(f"📋 Using custom configuration file: {args.config}")
        config = get_config(config_file=args.config)
    else:
        print("📋 Using default configuration (auto-detect)")
        config = get_config()
    print("✓ Configuration loaded successfully")

    external_access = args.external or args.remote
    if external_access:
        print("🌐 External access enabled (binding to 0.0.0.0)")
    else:
        print("🔒 Local access only (binding to 127.0.0.1)")

    app = MarkerMapApp(config)
    app.load_initial_markers(args.markers)

    app.core.try_multiple_ports(
        ports=DEFAULT_PORTS, debug=config.debug, auto_open=False, external_access=external_access
    )


if __name__ == '__main__':
    main()
