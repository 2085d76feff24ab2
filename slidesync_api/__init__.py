"""
Top‑level package for the SlideSync API.

This file makes ``slidesync_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``slidesync_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
