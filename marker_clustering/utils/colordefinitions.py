# !/bin/python3
# -*- coding: utf-8 -*-
# colordefinitions.py
# This file contains color definitions for marker rendering.
# It includes the fixed RGB colors per marker type and
# functions for color conversion.


import colorsys

# Marker type tags written into the materialized type array
MARKER_TYPE = 0
CLUSTER_TYPE = 1

point_color = (0, 83, 155)  # blue
cluster_color = (0, 169, 179)  # green

type_colors = {
    MARKER_TYPE: point_color,
    CLUSTER_TYPE: cluster_color,
}

type_names = {
    MARKER_TYPE: "Markers",
    CLUSTER_TYPE: "Clusters",
}


def rgb_to_hex(rgb):
    return "#{:02x}{:02x}{:02x}".format(*(int(c) for c in rgb))


def hex_to_rgb(hex_color):
    hex_color = hex_color.lstrip("#")
    lv = len(hex_color)
    return tuple(int(hex_color[i : i + lv // 3], 16) for i in range(0, lv, lv // 3))


def rgb_string(rgb, alpha=1.0):
    r, g, b = (int(c) for c in rgb)
    if alpha < 1.0:
        return f"rgba({r},{g},{b},{alpha:.2f})"
    else:
        return f"rgb({r},{g},{b})"


def hex_to_hsl(hex_color, alpha=1.0):
    rgb = tuple(c / 255.0 for c in hex_to_rgb(hex_color))
    h, l, s = colorsys.rgb_to_hls(*rgb)
    h = int(round(h * 360))
    s = int(round(s * 100))
    l = int(round(l * 100))
    if alpha < 1.0:
        return f"hsla({h}, {s}%, {l}%, {alpha:.2f})"
    else:
        return f"hsl({h}, {s}%, {l}%)"


# Outline used for selected markers
selection_outline = hex_to_hsl("#d62728")
