"""
Figure management module for the marker map.

This module handles figure configuration, latitude axis labelling,
zoom state preservation and the conversion from the plotted longitude span
to a clustering zoom level.
"""

import math

import plotly.graph_objs as go
from typing import Dict, List, Optional, Tuple

from marker_clustering.src.clustering.levels import FINEST_LEVEL
from marker_clustering.src.clustering.proximity import TILE_SIZE_PX
from marker_clustering.utils.mercator import lat2y

LATITUDE_TICKS = [-80, -60, -40, -20, 0, 20, 40, 60, 80]


def zoom_level_from_span(x_span: float, plot_width_px: int) -> int:
    """
    Zoom level whose pixel resolution best matches the plotted longitude span.

    At zoom z the world is 256 * 2**z pixels wide for 360 degrees, so a plot
    plot_width_px wide showing x_span degrees sits at
    log2(plot_width_px * 360 / (256 * x_span)), floored and clamped.
    """
    if not x_span or x_span <= 0 or plot_width_px <= 0:
        return 0
    zoom = math.log2(plot_width_px * 360.0 / (TILE_SIZE_PX * abs(x_span)))
    return max(0, min(FINEST_LEVEL, int(math.floor(zoom))))


def x_span_for_zoom(zoom_level: int, plot_width_px: int) -> float:
    """Longitude span that plot_width_px pixels cover at a zoom level."""
    return plot_width_px * 360.0 / (TILE_SIZE_PX * float(1 << zoom_level))


class FigureManager:
    """Handles Plotly figure configuration and layout management."""

    def __init__(self, plot_width_px: int = 1200):
        """
        Initialize FigureManager.

        Args:
            plot_width_px: Nominal plot width used to translate axis ranges into zoom levels
        """
        self.plot_width_px = plot_width_px

    def create_figure(self, traces: list, zoom_level: int = 0,
                      relayout_data: Optional[Dict] = None, title: Optional[str] = None) -> go.Figure:
        """
        Create a Plotly figure with traces and map layout.

        Args:
            traces: List of Plotly traces to add to the figure
            zoom_level: Clustering level the traces were materialized at
            relayout_data: Current zoom state to preserve
            title: Optional title override

        Returns:
            Configured Plotly Figure object
        """
        fig = go.Figure(traces)

        xaxis_config, yaxis_config = self._get_axis_config()

        fig.update_layout(
            title=title or f'Marker Map - zoom level {zoom_level}',
            xaxis_title='Longitude (degrees)',
            yaxis_title='Latitude (degrees)',
            legend=dict(
                title='Legend',
                orientation='v',
                xanchor='left',
                x=1.01,
                yanchor='top',
                y=1,
                font=dict(size=10)
            ),
            hovermode='closest',
            dragmode='pan',
            uirevision='marker-map',
            margin=dict(l=50, r=120, t=60, b=40),
            xaxis=xaxis_config,
            yaxis=yaxis_config,
            autosize=True
        )

        # Preserve zoom state if available
        if relayout_data:
            self._apply_zoom_state(fig, relayout_data)

        return fig

    def create_empty_figure(self, show_initial_message: bool = True) -> go.Figure:
        """
        Create an empty map figure for initial state.

        Args:
            show_initial_message: Whether to show the initial instruction message

        Returns:
            Empty Plotly Figure with map axes
        """
        fig = go.Figure()

        xaxis_config, yaxis_config = self._get_axis_config(visible=not show_initial_message)

        layout_config = {
            'title': '',
            'margin': dict(l=50, r=20, t=40, b=40),
            'xaxis': xaxis_config,
            'yaxis': yaxis_config,
            'autosize': True,
            'showlegend': False
        }

        if show_initial_message:
            layout_config['annotations'] = [
                dict(
                    text="Add markers or load a marker file from the sidebar,<br>"
                         "then click 'Render Map' to draw them.",
                    xref="paper", yref="paper",
                    x=0.5, y=0.5, xanchor='center', yanchor='middle',
                    showarrow=False,
                    font=dict(size=16, color="gray")
                )
            ]

        fig.update_layout(**layout_config)
        return fig

    def _get_axis_config(self, visible: bool = True) -> Tuple[Dict, Dict]:
        """
        Axis configuration for the projected plane.

        The y axis is Mercator y; tick labels show the latitude they correspond to.
        Equal aspect keeps the projection conformal on screen.
        """
        tickvals, ticktext = self.latitude_ticks()
        xaxis_config = dict(
            range=[-180, 180],
            scaleanchor="y",
            scaleratio=1,
            constrain="domain",
            zeroline=False,
            visible=visible
        )
        yaxis_config = dict(
            range=[-180, 180],
            tickmode='array',
            tickvals=tickvals,
            ticktext=ticktext,
            constrain="domain",
            zeroline=False,
            visible=visible
        )
        return xaxis_config, yaxis_config

    @staticmethod
    def latitude_ticks(latitudes: Optional[List[float]] = None) -> Tuple[List[float], List[str]]:
        """Mercator y positions and labels for latitude grid lines."""
        latitudes = LATITUDE_TICKS if latitudes is None else latitudes
        tickvals = [lat2y(lat) for lat in latitudes]
        ticktext = [f"{lat:g}°" for lat in latitudes]
        return tickvals, ticktext

    def zoom_level_from_relayout(self, relayout_data: Optional[Dict],
                                 default: int = 0, plot_width_px: Optional[int] = None) -> int:
        """
        Derive the clustering zoom level from a relayout event.

        Args:
            relayout_data: Dash relayoutData of the map graph
            default: Level returned when the event carries no x range
            plot_width_px: Plot width override

        Returns:
            Zoom level in [0, FINEST_LEVEL]
        """
        x_range = self._get_x_range(relayout_data)
        if x_range is None:
            return default
        width = plot_width_px or self.plot_width_px
        return zoom_level_from_span(x_range[1] - x_range[0], width)

    def _get_x_range(self, relayout_data: Optional[Dict]) -> Optional[List[float]]:
        if not relayout_data:
            return None
        if 'xaxis.range[0]' in relayout_data and 'xaxis.range[1]' in relayout_data:
            return [float(relayout_data['xaxis.range[0]']), float(relayout_data['xaxis.range[1]'])]
        if 'xaxis.range' in relayout_data:
            x_range = relayout_data['xaxis.range']
            return [float(x_range[0]), float(x_range[1])]
        return None

    def center_on(self, fig: go.Figure, latitude: float, longitude: float, zoom_level: int) -> None:
        """Set the axis ranges so the figure shows a zoom level around a point."""
        half_span = x_span_for_zoom(zoom_level, self.plot_width_px) / 2.0
        y = lat2y(latitude)
        fig.update_xaxes(range=[longitude - half_span, longitude + half_span])
        fig.update_yaxes(range=[y - half_span, y + half_span])

    def preserve_zoom_state(self, fig: go.Figure, relayout_data: Dict = None, current_figure=None) -> None:
        """
        Preserve and apply zoom state to figure.

        Args:
            fig: Figure to apply zoom state to
            relayout_data: Zoom state data from relayout events
            current_figure: Fallback figure to extract zoom state from if relayout_data is insufficient
        """
        if relayout_data and self._has_valid_zoom_data(relayout_data):
            self._apply_zoom_state(fig, relayout_data)
        elif current_figure:
            self._extract_and_apply_zoom_from_figure(fig, current_figure)

    def _has_valid_zoom_data(self, relayout_data: Dict) -> bool:
        """Check if relayout_data contains valid zoom information."""
        if not relayout_data:
            return False

        has_x_zoom = ('xaxis.range[0]' in relayout_data and 'xaxis.range[1]' in relayout_data) or 'xaxis.range' in relayout_data
        has_y_zoom = ('yaxis.range[0]' in relayout_data and 'yaxis.range[1]' in relayout_data) or 'yaxis.range' in relayout_data

        return has_x_zoom or has_y_zoom

    def _extract_and_apply_zoom_from_figure(self, fig: go.Figure, current_figure) -> None:
        """Extract zoom state from current figure and apply to new figure."""
        if hasattr(current_figure, 'layout'):
            layout = current_figure.layout
            x_range = layout.xaxis.range
            y_range = layout.yaxis.range
        elif isinstance(current_figure, dict) and 'layout' in current_figure:
            layout = current_figure['layout']
            x_range = layout.get('xaxis', {}).get('range')
            y_range = layout.get('yaxis', {}).get('range')
        else:
            return

        if x_range:
            fig.update_xaxes(range=list(x_range))
        if y_range:
            fig.update_yaxes(range=list(y_range))

    def _apply_zoom_state(self, fig: go.Figure, relayout_data: Dict) -> None:
        """Apply saved zoom state to figure."""
        # Apply X-axis zoom
        if 'xaxis.range[0]' in relayout_data and 'xaxis.range[1]' in relayout_data:
            fig.update_xaxes(range=[relayout_data['xaxis.range[0]'], relayout_data['xaxis.range[1]']])
        elif 'xaxis.range' in relayout_data:
            fig.update_xaxes(range=relayout_data['xaxis.range'])

        # Apply Y-axis zoom
        if 'yaxis.range[0]' in relayout_data and 'yaxis.range[1]' in relayout_data:
            fig.update_yaxes(range=[relayout_data['yaxis.range[0]'], relayout_data['yaxis.range[1]']])
        elif 'yaxis.range' in relayout_data:
            fig.update_yaxes(range=relayout_data['yaxis.range'])
