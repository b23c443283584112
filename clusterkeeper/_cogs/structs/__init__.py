"""
All the data structures and the functions to manipulate them:
raw bodies, field paths, diffs, patches, cluster specs, version bundles.

All the functions are purely data-manipulative and computational.
No external calls or any i/o activities are done here.
"""
