"""
User interface components for the receipt directory application.
"""

from .components import (
    setup_sidebar,
    display_directory_filters,
    display_folder_tree,
    display_selection_toolbar,
    display_pending_downloads,
    display_receipt_preview
)

__all__ = [
    'setup_sidebar',
    'display_directory_filters',
    'display_folder_tree',
    'display_selection_toolbar',
    'display_pending_downloads',
    'display_receipt_preview'
]
