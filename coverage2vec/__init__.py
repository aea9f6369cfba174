"""coverage2vec — antialiased coverage rasters to sub-pixel vector polygons."""

__version__ = "0.1.0"
