"""
The MODEL layer contains pure data structures and geometry.
It has NO knowledge of Qt or of the matplotlib preview.
It deals with projection, anchors, routing, depth and particles.
"""
