"""Isometric scene core: projection, anchors, connector routing, depth ranking and particles."""
