"""
Family Hub sync core.

Keeps calendar events, password entries and documents consistent with the
domain records (trips, appointments, doctors, portals) that own them.
"""

from familyhub.core.logging import setup_logging

logger = setup_logging()
logger.debug("Initializing Family Hub application")
