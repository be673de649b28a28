"""Application composition layer for the Tkinter console.

Controllers in this package wire views, view models, adapters, and use cases
into runnable desktop workflows without placing business logic in views.
"""
