"""
Source modules for the marker clustering map: configuration, the clustering
engine, marker data loading and Plotly visualization.
"""
