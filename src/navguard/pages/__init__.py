"""navguard pages: page objects built on the synchronization core."""

from navguard.pages.catalog import CatalogError, Destination, DestinationCatalog, parse_locator, validate_catalog
from navguard.pages.chat import ChatLocators, ChatPanel
from navguard.pages.menu import MenuNavigator, NavigationAttempt

__all__ = [
    "CatalogError",
    "ChatLocators",
    "ChatPanel",
    "Destination",
    "DestinationCatalog",
    "MenuNavigator",
    "NavigationAttempt",
    "parse_locator",
    "validate_catalog",
]
